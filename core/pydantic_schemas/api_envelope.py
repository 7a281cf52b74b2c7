"""Response envelope shared by every HTTP endpoint."""

from __future__ import annotations

from typing import Any, Dict, Generic, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """``{code, success, message, data, meta}`` wrapper around a payload."""

    code: int = Field(..., description="HTTP status code mirrored in the body")
    success: bool = Field(..., description="False for any code >= 400")
    message: str = Field(..., description="Short human readable summary")
    data: Optional[T] = Field(None, description="Endpoint payload")
    meta: Optional[Dict[str, Any]] = Field(default=None, description="Counters and other side information")


def api_response(
    *,
    code: int = 200,
    message: str,
    data: T | None = None,
    meta: Dict[str, Any] | None = None,
) -> Dict[str, Any]:
    """Build the envelope and return it as a JSON-ready ``dict``."""

    envelope = ApiResponse[Any](code=code, success=code < 400, message=message, data=data, meta=meta)
    return envelope.model_dump(mode="json")


def ok(message: str, data: T | None = None, meta: Dict[str, Any] | None = None) -> Dict[str, Any]:
    return api_response(code=200, message=message, data=data, meta=meta)


def error(
    code: int,
    message: str,
    data: Any | None = None,
    meta: Dict[str, Any] | None = None,
) -> Dict[str, Any]:
    """Envelope for a failed request; ``code`` must be an error status."""

    if code < 400:
        raise ValueError(f"Error envelopes need a status code >= 400, got {code}")
    return api_response(code=code, message=message, data=data, meta=meta)


__all__ = ["ApiResponse", "api_response", "ok", "error"]
