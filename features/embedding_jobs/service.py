"""Service layer running one embedding batch end to end."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Optional, Sequence

from config.embedding_jobs import (
    BATCH_MAX_REQUESTS,
    CLEANUP_REMOTE_FILES,
    MAX_CONCURRENCY,
    POLL_INTERVAL_SECONDS,
)
from core.exceptions import BatchStageError, BatchWaitTimeoutError
from core.providers.batch import BatchEmbeddingProvider, BatchJobState

from .content_fetcher import ContentFetcher, ContentSource
from .intake import decode_jobs, ensure_unique_job_ids
from .reconciler import JobQueue, ResultReconciler, VectorStore
from .report import BatchReport, BatchReportBuilder
from .schemas import EmbeddingJob, EnrichedJob
from .submitter import BatchSubmitter
from .waiter import BatchWaiter, Clock, Sleep

logger = logging.getLogger(__name__)


class EmbeddingJobsService:
    """Coordinates content fetch, batch submission, polling and reconciliation.

    Collaborators are injected; their lifecycle belongs to the caller.
    """

    def __init__(
        self,
        *,
        content_repository: ContentSource,
        vector_store: VectorStore,
        queue: JobQueue,
        provider: BatchEmbeddingProvider,
        poll_interval: float = POLL_INTERVAL_SECONDS,
        max_concurrency: int = MAX_CONCURRENCY,
        max_requests: int = BATCH_MAX_REQUESTS,
        cleanup_remote_files: bool = CLEANUP_REMOTE_FILES,
        sleep: Sleep = asyncio.sleep,
        clock: Clock = time.monotonic,
    ) -> None:
        self.provider = provider
        self.cleanup_remote_files = cleanup_remote_files
        self.fetcher = ContentFetcher(content_repository, max_concurrency=max_concurrency)
        self.submitter = BatchSubmitter(
            provider,
            max_requests=max_requests,
            cleanup_remote_files=cleanup_remote_files,
        )
        self.waiter = BatchWaiter(provider, poll_interval=poll_interval, sleep=sleep, clock=clock)
        self.reconciler = ResultReconciler(provider, vector_store, queue, max_concurrency=max_concurrency)

    async def process_payload(self, payload: Any, **kwargs: Any) -> BatchReport:
        """Decode ``payload`` and run it; ``MalformedBatchError`` propagates."""

        return await self.run_batch(decode_jobs(payload), **kwargs)

    async def run_batch(
        self,
        jobs: Sequence[EmbeddingJob],
        *,
        deadline_seconds: Optional[float] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> BatchReport:
        """Process ``jobs`` and return a report covering every one of them.

        Raises ``MalformedBatchError`` when two jobs share a ``jobId``.
        """

        ensure_unique_job_ids(jobs)
        report = BatchReportBuilder()
        enriched = await self.fetcher.fetch_all(jobs, report)
        if not enriched:
            logger.info("No jobs eligible for batch processing after content fetching")
            return report.build(jobs)

        logger.info("Jobs prepared for batch embedding", extra={"job_count": len(enriched)})

        try:
            batch = await self.submitter.submit(enriched)
        except BatchStageError as exc:
            self._fail_bulk(report, enriched, exc)
            return report.build(jobs)

        finished: Optional[BatchJobState] = None
        try:
            finished = await self._wait(batch, enriched, report, deadline_seconds, cancel_event)
            if finished is not None:
                await self.reconciler.reconcile(finished, enriched, report)
        finally:
            if self.cleanup_remote_files:
                await self.provider.cleanup_files(self._remote_files(batch, finished))

        return report.build(jobs)

    async def _wait(
        self,
        batch: BatchJobState,
        enriched: list[EnrichedJob],
        report: BatchReportBuilder,
        deadline_seconds: Optional[float],
        cancel_event: Optional[asyncio.Event],
    ) -> Optional[BatchJobState]:
        """Return the terminal batch, or ``None`` after failing every job."""

        try:
            finished = await self.waiter.wait(
                batch, deadline_seconds=deadline_seconds, cancel_event=cancel_event
            )
        except BatchWaitTimeoutError as exc:
            await self.provider.cancel_batch(batch.id)
            self._fail_bulk(report, enriched, exc)
            return None
        except BatchStageError as exc:
            self._fail_bulk(report, enriched, exc)
            return None

        logger.info(
            "Batch finished",
            extra={"batch_id": finished.id, "status": finished.status, "output_file_id": finished.output_file_id},
        )
        return finished

    @staticmethod
    def _fail_bulk(report: BatchReportBuilder, enriched: list[EnrichedJob], exc: BatchStageError) -> None:
        count = report.fail_unresolved(enriched, exc.message)
        logger.error(
            "Batch stage failed",
            extra={"error_type": type(exc).__name__, "error": exc.message, "failed_jobs": count},
        )

    @staticmethod
    def _remote_files(batch: BatchJobState, finished: Optional[BatchJobState]) -> list[str]:
        candidates = [batch.input_file_id]
        if finished is not None:
            candidates += [finished.input_file_id, finished.output_file_id, finished.error_file_id]
        return list(dict.fromkeys(file_id for file_id in candidates if file_id))


__all__ = ["EmbeddingJobsService"]
