import json

import pytest

from core.providers.batch.batch_file_ops import build_batch_file, parse_batch_results, parse_result_line
from core.providers.batch.batch_models import BatchRequest


def test_build_batch_file_writes_jsonl(tmp_path):
    path = build_batch_file(
        [BatchRequest(custom_id="1", input_text="hello"), BatchRequest(custom_id="2", input_text="world")],
        model="text-embedding-3-small",
        endpoint="/v1/embeddings",
        dimensions=256,
        output_path=tmp_path / "batch.jsonl",
    )

    lines = [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]
    assert lines[0] == {
        "custom_id": "1",
        "method": "POST",
        "url": "/v1/embeddings",
        "body": {"model": "text-embedding-3-small", "input": "hello", "dimensions": 256},
    }
    assert lines[1]["custom_id"] == "2"


def test_build_batch_file_omits_dimensions_and_uses_temp_file():
    path = build_batch_file(
        [BatchRequest(custom_id="1", input_text="hello")],
        model="text-embedding-3-small",
        endpoint="/v1/embeddings",
    )
    try:
        assert path.name.startswith("embedding-batch-")
        line = json.loads(path.read_text(encoding="utf-8"))
        assert "dimensions" not in line["body"]
    finally:
        path.unlink(missing_ok=True)


def test_build_batch_file_requires_requests():
    with pytest.raises(ValueError):
        build_batch_file([], model="m", endpoint="/v1/embeddings")


def test_parse_result_line_success():
    result = parse_result_line(
        {
            "custom_id": "7",
            "response": {"status_code": 200, "body": {"data": [{"embedding": [0.5, 1]}]}},
            "error": None,
        }
    )

    assert result.custom_id == "7"
    assert result.embedding == [0.5, 1.0]
    assert result.succeeded


def test_parse_result_line_reads_top_level_and_body_errors():
    top = parse_result_line({"custom_id": "1", "error": {"code": "server_error", "message": "boom"}})
    body = parse_result_line(
        {
            "custom_id": "2",
            "response": {"status_code": 400, "body": {"error": {"message": "too long", "code": "invalid"}}},
        }
    )

    assert (top.error_code, top.error_message, top.succeeded) == ("server_error", "boom", False)
    assert (body.status_code, body.error_message) == (400, "too long")


def test_parse_batch_results_skips_undecodable_lines():
    text = "\n".join(
        [
            json.dumps({"custom_id": "1", "response": {"status_code": 200, "body": {"data": [{"embedding": [1]}]}}}),
            "{broken",
            json.dumps({"response": {"status_code": 200}}),
            json.dumps(["not", "an", "object"]),
            "",
            json.dumps({"custom_id": 2, "response": {"status_code": 500}}),
        ]
    )

    results = parse_batch_results(text, source="file-out")

    assert [result.custom_id for result in results] == ["1", "2"]
    assert results[1].status_code == 500


def test_parse_result_line_non_numeric_embedding_is_missing():
    result = parse_result_line(
        {"custom_id": "3", "response": {"status_code": 200, "body": {"data": [{"embedding": [0.1, None]}]}}}
    )

    assert result.embedding is None
    assert not result.succeeded
