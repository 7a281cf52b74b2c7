"""Resolve the text each job must embed."""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol, Sequence

from core.exceptions import (
    ContentFetchError,
    EmptyContentError,
    InvalidIdentifierError,
    JobContentError,
    RowNotFoundError,
)

from .report import BatchReportBuilder
from .repositories import ContentRow
from .schemas import EmbeddingJob, EnrichedJob

logger = logging.getLogger(__name__)


class ContentSource(Protocol):
    async def fetch_content(
        self, schema: str, table: str, content_function: str, row_id: int | str
    ) -> ContentRow | None: ...


class ContentFetcher:
    """Fetches content per job; a failing job never stops the others."""

    def __init__(self, repository: ContentSource, *, max_concurrency: int = 1) -> None:
        self.repository = repository
        self.max_concurrency = max(1, max_concurrency)

    async def fetch_content(self, job: EmbeddingJob) -> str:
        """Return the trimmed content for ``job``.

        Raises ``RowNotFoundError``, ``EmptyContentError`` or
        ``ContentFetchError``.
        """

        try:
            row = await self.repository.fetch_content(
                job.schema_name,
                job.table_name,
                job.content_function_name,
                job.row_id,
            )
        except InvalidIdentifierError as exc:
            raise ContentFetchError(f"Invalid job target: {exc.message}", job_id=job.job_id) from exc
        except Exception as exc:
            raise ContentFetchError(f"Database error fetching content: {exc}", job_id=job.job_id) from exc

        if row is None:
            raise RowNotFoundError(f"Row not found: {job.row_ref}", job_id=job.job_id)

        content = row.content
        if not isinstance(content, str) or not content.strip():
            raise EmptyContentError(
                f"Invalid or empty content received from {job.content_function_name} for {job.row_ref}. "
                f"Expected non-empty string, got: {type(content).__name__}",
                job_id=job.job_id,
            )
        return content.strip()

    async def _enrich(
        self,
        job: EmbeddingJob,
        report: BatchReportBuilder,
        semaphore: asyncio.Semaphore,
    ) -> EnrichedJob | None:
        async with semaphore:
            try:
                content = await self.fetch_content(job)
            except JobContentError as exc:
                logger.warning(
                    "Failed to fetch content for job",
                    extra={"job_id": job.job_id, "error_type": type(exc).__name__, "error": str(exc)},
                )
                report.fail(job, str(exc))
                return None
        return EnrichedJob(job=job, content=content)

    async def fetch_all(
        self,
        jobs: Sequence[EmbeddingJob],
        report: BatchReportBuilder,
    ) -> list[EnrichedJob]:
        """Return jobs with usable content in input order; failures go to ``report``."""

        logger.info("Fetching content for jobs", extra={"job_count": len(jobs)})
        semaphore = asyncio.Semaphore(self.max_concurrency)
        enriched = await asyncio.gather(*(self._enrich(job, report, semaphore) for job in jobs))
        ready = [item for item in enriched if item is not None]

        logger.info(
            "Content fetch finished",
            extra={"ready": len(ready), "failed": len(jobs) - len(ready)},
        )
        return ready


__all__ = ["ContentFetcher", "ContentSource"]
