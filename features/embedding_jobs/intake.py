"""Decode and validate incoming embedding job batches."""

from __future__ import annotations

import logging
from collections import Counter
from typing import Any, List, Sequence

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from core.exceptions import MalformedBatchError

from .schemas import EmbeddingJob

logger = logging.getLogger(__name__)

_JOB_LIST_ADAPTER = TypeAdapter(List[EmbeddingJob])
_MAX_REPORTED_ISSUES = 5


def _summarise(exc: PydanticValidationError) -> str:
    issues = []
    for error in exc.errors()[:_MAX_REPORTED_ISSUES]:
        location = ".".join(str(part) for part in error.get("loc", ()))
        issues.append(f"{location or '<root>'}: {error.get('msg')}")
    remaining = exc.error_count() - len(issues)
    if remaining > 0:
        issues.append(f"... {remaining} more")
    return "; ".join(issues)


def ensure_unique_job_ids(jobs: Sequence[EmbeddingJob]) -> None:
    """Raise ``MalformedBatchError`` when two jobs share a ``jobId``."""

    duplicates = sorted(job_id for job_id, count in Counter(job.job_id for job in jobs).items() if count > 1)
    if duplicates:
        logger.warning("Duplicate job ids in batch", extra={"job_ids": duplicates})
        raise MalformedBatchError(
            f"Invalid request body: duplicate jobId values {duplicates}",
            field="jobId",
        )


def decode_jobs(payload: Any) -> list[EmbeddingJob]:
    """Return the jobs described by ``payload`` in input order.

    ``payload`` may be raw JSON (``str``/``bytes``) or already decoded data.
    Raises ``MalformedBatchError`` when it is not an array of job objects or
    when two jobs share a ``jobId``.
    """

    try:
        if isinstance(payload, (str, bytes, bytearray)):
            jobs = _JOB_LIST_ADAPTER.validate_json(payload)
        else:
            jobs = _JOB_LIST_ADAPTER.validate_python(payload)
    except PydanticValidationError as exc:
        summary = _summarise(exc)
        logger.warning("Invalid embedding job batch", extra={"issues": summary})
        raise MalformedBatchError(f"Invalid request body: {summary}") from exc

    ensure_unique_job_ids(jobs)
    logger.info("Received embedding jobs", extra={"job_count": len(jobs)})
    return jobs


__all__ = ["decode_jobs", "ensure_unique_job_ids"]
