"""Local file helpers for OpenAI Batch API embedding requests."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Iterable

from .batch_models import BatchRequest, BatchResult

logger = logging.getLogger(__name__)


def build_request_line(
    request: BatchRequest,
    *,
    model: str,
    endpoint: str,
    dimensions: int | None = None,
) -> dict[str, Any]:
    body: dict[str, Any] = {"model": model, "input": request.input_text}
    if dimensions:
        body["dimensions"] = dimensions
    return {
        "custom_id": request.custom_id,
        "method": "POST",
        "url": endpoint,
        "body": body,
    }


def build_batch_file(
    requests: Iterable[BatchRequest],
    *,
    model: str,
    endpoint: str,
    dimensions: int | None = None,
    output_path: Path | None = None,
) -> Path:
    """Create the JSONL file consumed by the Batch API.

    The caller owns the returned file and must unlink it. If writing fails the
    partial file is removed before the error propagates.
    """

    requests = list(requests)
    if not requests:
        raise ValueError("No requests provided")

    if output_path is None:
        fd, temp_path = tempfile.mkstemp(suffix=".jsonl", prefix="embedding-batch-")
        os.close(fd)
        output_path = Path(temp_path)
    else:
        output_path.parent.mkdir(parents=True, exist_ok=True)

    try:
        with output_path.open("w", encoding="utf-8") as handle:
            for request in requests:
                line = build_request_line(
                    request, model=model, endpoint=endpoint, dimensions=dimensions
                )
                handle.write(json.dumps(line))
                handle.write("\n")
    except Exception:
        output_path.unlink(missing_ok=True)
        raise

    logger.info(
        "Created batch file",
        extra={
            "path": str(output_path),
            "request_count": len(requests),
            "size_bytes": output_path.stat().st_size,
        },
    )
    return output_path


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def parse_result_line(payload: dict[str, Any]) -> BatchResult | None:
    """Map one decoded result object onto a ``BatchResult``.

    Returns ``None`` when the line carries no ``custom_id``.
    """

    custom_id = payload.get("custom_id")
    if custom_id is None or custom_id == "":
        return None

    response = _as_dict(payload.get("response"))
    body = _as_dict(response.get("body"))
    top_error = _as_dict(payload.get("error"))
    body_error = _as_dict(body.get("error"))

    embedding: list[float] | None = None
    data = body.get("data")
    if isinstance(data, list) and data:
        first = _as_dict(data[0])
        raw_embedding = first.get("embedding")
        if isinstance(raw_embedding, list) and raw_embedding:
            try:
                embedding = [float(value) for value in raw_embedding]
            except (TypeError, ValueError):
                logger.warning("Embedding contains non-numeric values", extra={"custom_id": custom_id})

    status_code = response.get("status_code")
    return BatchResult(
        custom_id=str(custom_id),
        embedding=embedding,
        status_code=status_code if isinstance(status_code, int) else None,
        error_code=top_error.get("code") or body_error.get("code") or None,
        error_message=top_error.get("message") or body_error.get("message") or None,
    )


def parse_batch_results(text: str, *, source: str | None = None) -> list[BatchResult]:
    """Parse newline-delimited JSON results; undecodable lines are skipped."""

    results: list[BatchResult] = []
    for line_number, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()
        if not line:
            continue
        try:
            payload = json.loads(line)
        except json.JSONDecodeError:
            logger.error(
                "Failed to decode batch result line",
                extra={"line": line_number, "source": source, "line_preview": line[:100]},
            )
            continue
        if not isinstance(payload, dict):
            logger.warning("Batch result line is not an object", extra={"line": line_number})
            continue

        result = parse_result_line(payload)
        if result is None:
            logger.warning("Result missing custom_id", extra={"line": line_number, "source": source})
            continue
        results.append(result)

    logger.info("Parsed batch results", extra={"total": len(results), "source": source})
    return results


__all__ = [
    "build_request_line",
    "build_batch_file",
    "parse_result_line",
    "parse_batch_results",
]
