import pytest

from core.pydantic_schemas import ApiResponse, error, ok


def test_ok_helper_returns_success_envelope():
    result = ok("Embedding jobs processed", data={"completedJobIds": [1]}, meta={"completed": 1})

    assert result == {
        "code": 200,
        "success": True,
        "message": "Embedding jobs processed",
        "data": {"completedJobIds": [1]},
        "meta": {"completed": 1},
    }


def test_error_helper_marks_failure():
    result = error(400, "Invalid JSON format")

    assert result["code"] == 400
    assert result["success"] is False
    assert result["data"] is None


def test_error_helper_rejects_success_code():
    with pytest.raises(ValueError):
        error(200, "should fail")


def test_api_response_model_dump_matches_payload():
    envelope = ApiResponse[int](code=201, success=True, message="created", data=1)

    assert envelope.model_dump() == {
        "code": 201,
        "success": True,
        "message": "created",
        "data": 1,
        "meta": None,
    }
