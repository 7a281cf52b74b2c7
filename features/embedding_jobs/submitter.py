"""Package enriched jobs into one OpenAI batch and start it."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol, Sequence

from config.embedding_jobs import BATCH_MAX_REQUESTS
from core.exceptions import BatchCreationError, BatchUploadError
from core.providers.batch import BatchJobState, BatchRequest

from .schemas import EnrichedJob

logger = logging.getLogger(__name__)


class BatchSubmissionProvider(Protocol):
    def create_batch_file(self, requests: list[BatchRequest], output_path: Path | None = None) -> Path: ...

    async def upload_batch_file(self, file_path: Path) -> str: ...

    async def create_batch_job(self, input_file_id: str, *, description: str = ...) -> BatchJobState: ...

    async def cleanup_files(self, file_ids) -> None: ...


def build_batch_requests(enriched: Sequence[EnrichedJob]) -> list[BatchRequest]:
    """One request per job, correlated through the decimal job id."""

    return [BatchRequest(custom_id=item.custom_id, input_text=item.content) for item in enriched]


class BatchSubmitter:
    """Stages, uploads and submits a batch; any failure fails the whole batch."""

    def __init__(
        self,
        provider: BatchSubmissionProvider,
        *,
        max_requests: int = BATCH_MAX_REQUESTS,
        cleanup_remote_files: bool = True,
    ) -> None:
        self.provider = provider
        self.max_requests = max_requests
        self.cleanup_remote_files = cleanup_remote_files

    async def _upload(self, requests: list[BatchRequest]) -> str:
        try:
            staged = self.provider.create_batch_file(requests)
        except (OSError, ValueError) as exc:
            logger.error("Failed to stage batch file", exc_info=True)
            raise BatchUploadError(f"Failed to stage batch file: {exc}", original_error=exc) from exc

        try:
            return await self.provider.upload_batch_file(staged)
        except BatchUploadError:
            raise
        except Exception as exc:
            raise BatchUploadError(f"Failed to submit batch to OpenAI: {exc}", original_error=exc) from exc
        finally:
            try:
                staged.unlink(missing_ok=True)
            except OSError:
                logger.warning("Failed to delete staged batch file", extra={"path": str(staged)}, exc_info=True)

    async def submit(self, enriched: Sequence[EnrichedJob]) -> BatchJobState:
        """Upload the requests for ``enriched`` and return the created batch."""

        requests = build_batch_requests(enriched)
        if len(requests) > self.max_requests:
            raise BatchUploadError(
                f"Batch of {len(requests)} requests exceeds the provider limit of {self.max_requests}"
            )

        input_file_id = await self._upload(requests)

        try:
            batch = await self.provider.create_batch_job(
                input_file_id, description=f"Embedding jobs batch ({len(requests)} items)"
            )
        except BatchCreationError:
            await self._discard_upload(input_file_id)
            raise
        except Exception as exc:
            await self._discard_upload(input_file_id)
            raise BatchCreationError(f"Failed to create OpenAI batch job: {exc}", original_error=exc) from exc

        if batch.input_file_id is None:
            batch.input_file_id = input_file_id

        logger.info(
            "Batch submitted",
            extra={"batch_id": batch.id, "status": batch.status, "request_count": len(requests)},
        )
        return batch

    async def _discard_upload(self, input_file_id: str) -> None:
        if self.cleanup_remote_files:
            await self.provider.cleanup_files([input_file_id])


__all__ = ["BatchSubmitter", "BatchSubmissionProvider", "build_batch_requests"]
