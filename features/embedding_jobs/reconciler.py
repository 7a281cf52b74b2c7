"""Map batch results back onto jobs and persist the successful ones."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Protocol, Sequence

from core.exceptions import QueueDeleteError, ResultDownloadError, ResultItemError, StorageWriteError
from core.providers.batch import BatchJobState, BatchResult

from .report import BatchReportBuilder
from .schemas import EnrichedJob

logger = logging.getLogger(__name__)

MISSING_RESULT_REASON = "Missing result: the batch output contained no entry for this job"
NO_OUTPUT_FILE_REASON = "OpenAI batch completed but no output file ID was provided."


class ResultsProvider(Protocol):
    async def download_results(self, file_id: str) -> list[BatchResult]: ...


class VectorStore(Protocol):
    async def update_vector(
        self, schema: str, table: str, embedding_column: str, row_id: int | str, vector: Sequence[float]
    ) -> int: ...


class JobQueue(Protocol):
    async def delete(self, job_id: int) -> int: ...


def batch_failure_reason(batch: BatchJobState) -> str:
    detail = batch.errors[0] if batch.errors else "Unknown batch error"
    return f"OpenAI Batch {batch.status}: {detail}"


def classify_result(result: BatchResult) -> Optional[ResultItemError]:
    """Return the error carried by ``result``, or ``None`` when it is usable."""

    if result.succeeded:
        return None
    if result.error_message or result.error_code:
        message = result.error_message or f"error code {result.error_code}"
    elif result.status_code != 200:
        message = f"OpenAI embedding failed with status {result.status_code if result.status_code is not None else 'unknown'}"
    else:
        message = "Embedding data missing in successful response."
    return ResultItemError(message, custom_id=result.custom_id, code=result.error_code)


class ResultReconciler:
    """Decides the final outcome of every submitted job."""

    def __init__(
        self,
        provider: ResultsProvider,
        store: VectorStore,
        queue: JobQueue,
        *,
        max_concurrency: int = 1,
    ) -> None:
        self.provider = provider
        self.store = store
        self.queue = queue
        self.max_concurrency = max(1, max_concurrency)

    async def reconcile(
        self,
        batch: BatchJobState,
        enriched: Sequence[EnrichedJob],
        report: BatchReportBuilder,
    ) -> None:
        if batch.status != "completed":
            reason = batch_failure_reason(batch)
            logger.error(
                "Batch finished without completing",
                extra={"batch_id": batch.id, "status": batch.status, "errors": batch.errors},
            )
            report.fail_unresolved(enriched, reason)
            return

        if not batch.output_file_id:
            logger.error("Batch completed but no output file id", extra={"batch_id": batch.id})
            report.fail_unresolved(enriched, NO_OUTPUT_FILE_REASON)
            return

        try:
            results = await self._download(batch.output_file_id)
        except ResultDownloadError as exc:
            report.fail_unresolved(enriched, exc.message)
            return

        if batch.error_file_id:
            try:
                results = [*results, *await self._download(batch.error_file_id)]
            except ResultDownloadError:
                logger.warning(
                    "Could not read batch error file; affected jobs will be reported missing",
                    extra={"batch_id": batch.id, "error_file_id": batch.error_file_id},
                )

        await self.apply_results(results, enriched, report)

    async def _download(self, file_id: str) -> list[BatchResult]:
        try:
            return await self.provider.download_results(file_id)
        except ResultDownloadError:
            raise
        except Exception as exc:
            raise ResultDownloadError(f"Failed to process batch results: {exc}", original_error=exc) from exc

    async def apply_results(
        self,
        results: Sequence[BatchResult],
        enriched: Sequence[EnrichedJob],
        report: BatchReportBuilder,
    ) -> None:
        by_custom_id = {item.custom_id: item for item in enriched}
        matched: dict[str, tuple[EnrichedJob, BatchResult]] = {}

        for result in results:
            item = by_custom_id.get(result.custom_id)
            if item is None:
                logger.warning("Received result for unknown custom_id", extra={"custom_id": result.custom_id})
                continue
            if result.custom_id in matched:
                logger.warning("Duplicate result for custom_id ignored", extra={"custom_id": result.custom_id})
                continue
            matched[result.custom_id] = (item, result)

        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def _bounded(item: EnrichedJob, result: BatchResult) -> None:
            async with semaphore:
                await self.settle(item, result, report)

        await asyncio.gather(*(_bounded(item, result) for item, result in matched.values()))

        missing = [item for item in enriched if item.custom_id not in matched]
        if missing:
            logger.error(
                "Jobs missing from batch output",
                extra={"job_ids": [item.job.job_id for item in missing]},
            )
            report.fail_unresolved(missing, MISSING_RESULT_REASON)

    async def settle(self, item: EnrichedJob, result: BatchResult, report: BatchReportBuilder) -> None:
        """Resolve one job from its result line."""

        job = item.job
        item_error = classify_result(result)
        if item_error is not None:
            logger.error(
                "Embedding failed for job",
                extra={"job_id": job.job_id, "custom_id": result.custom_id, "error": item_error.message},
            )
            report.fail(job, f"OpenAI Batch Error: {item_error.message}")
            return

        try:
            await self._persist(item, result.embedding or [])
        except StorageWriteError as exc:
            logger.error("Failed to store embedding", extra={"job_id": job.job_id, "error": exc.message})
            report.fail(job, f"DB update failed after embedding: {exc.message}")
            return

        try:
            await self._acknowledge(item)
        except QueueDeleteError as exc:
            logger.warning(
                "Failed to delete job from queue; it may be redelivered",
                extra={"job_id": job.job_id, "error": exc.message},
            )

        report.complete(job)
        logger.info("Stored embedding for job", extra={"job_id": job.job_id})

    async def _persist(self, item: EnrichedJob, embedding: list[float]) -> None:
        job = item.job
        try:
            affected = await self.store.update_vector(
                job.schema_name,
                job.table_name,
                job.embedding_column_name,
                job.row_id,
                embedding,
            )
        except Exception as exc:
            raise StorageWriteError(f"Database error updating embedding: {exc}") from exc
        if not affected:
            raise StorageWriteError(f"Row {job.row_ref} disappeared before update.")

    async def _acknowledge(self, item: EnrichedJob) -> None:
        job = item.job
        try:
            deleted = await self.queue.delete(job.job_id)
        except Exception as exc:
            raise QueueDeleteError(f"Failed to delete job {job.job_id} from queue: {exc}") from exc
        if not deleted:
            raise QueueDeleteError(f"Job {job.job_id} was not found in the queue")


__all__ = [
    "ResultReconciler",
    "classify_result",
    "batch_failure_reason",
    "MISSING_RESULT_REASON",
    "NO_OUTPUT_FILE_REASON",
]
