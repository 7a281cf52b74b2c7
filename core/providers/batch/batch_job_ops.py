"""Remote job helpers for OpenAI Batch API embedding requests."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterable

from openai import AsyncOpenAI

from core.exceptions import (
    BatchCreationError,
    BatchPollingError,
    BatchUploadError,
    ResultDownloadError,
)

from .batch_models import BatchJobState

logger = logging.getLogger(__name__)


def _error_messages(batch: Any) -> list[str]:
    errors = getattr(batch, "errors", None)
    data = getattr(errors, "data", None) if errors is not None else None
    if data is None and isinstance(errors, dict):
        data = errors.get("data")
    messages: list[str] = []
    for entry in data or []:
        message = entry.get("message") if isinstance(entry, dict) else getattr(entry, "message", None)
        if message:
            messages.append(str(message))
    return messages


def _request_counts(batch: Any) -> dict[str, Any] | None:
    counts = getattr(batch, "request_counts", None)
    if counts is None:
        return None
    if isinstance(counts, dict):
        return counts
    if hasattr(counts, "model_dump"):
        return counts.model_dump()
    return {
        "total": getattr(counts, "total", None),
        "completed": getattr(counts, "completed", None),
        "failed": getattr(counts, "failed", None),
    }


def to_batch_state(batch: Any) -> BatchJobState:
    """Convert an SDK ``Batch`` object into a ``BatchJobState``."""

    return BatchJobState(
        id=batch.id,
        status=batch.status,
        output_file_id=getattr(batch, "output_file_id", None),
        error_file_id=getattr(batch, "error_file_id", None),
        input_file_id=getattr(batch, "input_file_id", None),
        errors=_error_messages(batch),
        request_counts=_request_counts(batch),
    )


async def upload_batch_file(client: AsyncOpenAI, file_path: Path) -> str:
    """Upload JSONL file to OpenAI and return file identifier."""

    try:
        with file_path.open("rb") as handle:
            response = await client.files.create(file=handle, purpose="batch")
    except Exception as exc:
        logger.error("Failed to upload batch file", exc_info=True)
        raise BatchUploadError(f"Failed to submit batch to OpenAI: {exc}", original_error=exc) from exc

    file_id = response.id
    logger.info("Uploaded batch file", extra={"file_id": file_id})
    return file_id


async def create_remote_batch_job(
    client: AsyncOpenAI,
    input_file_id: str,
    *,
    endpoint: str,
    completion_window: str,
    description: str = "Embedding jobs batch",
) -> BatchJobState:
    """Create the Batch API job and return its initial state."""

    try:
        response = await client.batches.create(
            input_file_id=input_file_id,
            endpoint=endpoint,
            completion_window=completion_window,
            metadata={"description": description},
        )
    except Exception as exc:
        logger.error("Failed to create batch job", exc_info=True)
        raise BatchCreationError(f"Failed to create OpenAI batch job: {exc}", original_error=exc) from exc

    state = to_batch_state(response)
    logger.info(
        "Created batch job",
        extra={"batch_id": state.id, "status": state.status},
    )
    return state


async def retrieve_batch(client: AsyncOpenAI, batch_id: str) -> BatchJobState:
    """Fetch the current state of a batch job."""

    try:
        batch = await client.batches.retrieve(batch_id)
    except Exception as exc:
        logger.error("Error polling batch status", extra={"batch_id": batch_id}, exc_info=True)
        raise BatchPollingError(f"Failed while polling batch job: {exc}", original_error=exc) from exc
    return to_batch_state(batch)


async def download_file_text(client: AsyncOpenAI, file_id: str) -> str:
    """Download a provider file and return it decoded as UTF-8 text."""

    try:
        response = await client.files.content(file_id)
        text = getattr(response, "text", None)
        if not isinstance(text, str):
            text = await response.aread()
    except Exception as exc:
        logger.error("Failed to download results", extra={"file_id": file_id}, exc_info=True)
        raise ResultDownloadError(f"Failed to process batch results: {exc}", original_error=exc) from exc

    if isinstance(text, bytes):
        text = text.decode("utf-8")

    logger.info(
        "Downloaded batch file",
        extra={"file_id": file_id, "content_length": len(text)},
    )
    return text


async def cancel_remote_batch(client: AsyncOpenAI, batch_id: str) -> None:
    """Request cancellation of a batch; failures are logged only."""

    try:
        await client.batches.cancel(batch_id)
        logger.info("Requested batch cancellation", extra={"batch_id": batch_id})
    except Exception:
        logger.warning("Failed to cancel batch", extra={"batch_id": batch_id}, exc_info=True)


async def cleanup_uploaded_files(client: AsyncOpenAI, file_ids: Iterable[str | None]) -> None:
    """Delete uploaded files from OpenAI once finished."""

    for file_id in file_ids:
        if not file_id:
            continue
        try:
            await client.files.delete(file_id)
            logger.debug("Deleted remote file", extra={"file_id": file_id})
        except Exception:
            logger.warning(
                "Failed to delete remote file", extra={"file_id": file_id}, exc_info=True
            )


__all__ = [
    "to_batch_state",
    "upload_batch_file",
    "create_remote_batch_job",
    "retrieve_batch",
    "download_file_text",
    "cancel_remote_batch",
    "cleanup_uploaded_files",
]
