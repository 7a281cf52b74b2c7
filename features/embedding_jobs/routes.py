"""HTTP routes for embedding batch jobs."""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from config.embedding_jobs import WAIT_DEADLINE_SECONDS
from core.exceptions import MalformedBatchError
from core.pydantic_schemas import ApiResponse, error as api_error, ok as api_ok
from features.embedding_jobs.dependencies import get_embedding_jobs_service
from features.embedding_jobs.intake import decode_jobs
from features.embedding_jobs.schemas import BatchReportResponse
from features.embedding_jobs.service import EmbeddingJobsService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/embedding-jobs", tags=["embedding-jobs"])


def _bad_request(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=api_error(code=status.HTTP_400_BAD_REQUEST, message=message),
    )


async def _read_payload(request: Request) -> Any:
    content_type = request.headers.get("content-type", "")
    if content_type.split(";", 1)[0].strip().lower() != "application/json":
        raise MalformedBatchError("Expected json body")
    try:
        return await request.json()
    except ValueError as exc:
        raise MalformedBatchError("Invalid JSON format") from exc


@router.post("/batch", response_model=ApiResponse[BatchReportResponse])
async def process_embedding_batch(
    request: Request,
    service: EmbeddingJobsService = Depends(get_embedding_jobs_service),
) -> JSONResponse:
    """Embed every job of the posted batch and report the outcome per job."""

    try:
        jobs = decode_jobs(await _read_payload(request))
    except MalformedBatchError as exc:
        logger.warning("Rejected embedding batch request", extra={"error": exc.message})
        return _bad_request(exc.message)

    report = await service.run_batch(jobs, deadline_seconds=WAIT_DEADLINE_SECONDS or None)

    payload: Dict[str, Any] = api_ok(
        "Embedding jobs processed",
        data=report.to_response().model_dump(by_alias=True),
        meta={"completed": len(report.completed_jobs), "failed": len(report.failed_jobs)},
    )
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=payload,
        headers={
            "X-Completed-Jobs": str(len(report.completed_jobs)),
            "X-Failed-Jobs": str(len(report.failed_jobs)),
        },
    )


__all__ = ["router"]
