"""OpenAI Batch API support for embedding jobs."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from openai import AsyncOpenAI

from config.embedding_jobs import (
    BATCH_ENDPOINT,
    COMPLETION_WINDOW,
    EMBEDDING_DIMENSIONS,
    EMBEDDING_MODEL,
)
from core.clients.ai import get_openai_async_client

from .batch_file_ops import build_batch_file, parse_batch_results
from .batch_job_ops import (
    cancel_remote_batch,
    cleanup_uploaded_files,
    create_remote_batch_job,
    download_file_text,
    retrieve_batch,
    upload_batch_file,
)
from .batch_models import BatchJobState, BatchRequest, BatchResult

logger = logging.getLogger(__name__)


class BatchEmbeddingProvider:
    """Wrapper around the OpenAI Batch API for embeddings.

    Each method maps to one provider call; the pipeline decides how failures
    are reported.
    """

    def __init__(
        self,
        *,
        client: AsyncOpenAI | None = None,
        model: str | None = None,
        dimensions: int | None = None,
        endpoint: str = BATCH_ENDPOINT,
        completion_window: str = COMPLETION_WINDOW,
    ) -> None:
        self.client = client if client is not None else get_openai_async_client()
        self.model = model or EMBEDDING_MODEL
        self.dimensions = dimensions if dimensions is not None else EMBEDDING_DIMENSIONS
        self.endpoint = endpoint
        self.completion_window = completion_window

        logger.info(
            "Initialized Batch Embedding Provider",
            extra={"model": self.model, "dimensions": self.dimensions},
        )

    def create_batch_file(
        self,
        requests: list[BatchRequest],
        output_path: Path | None = None,
    ) -> Path:
        return build_batch_file(
            requests,
            model=self.model,
            endpoint=self.endpoint,
            dimensions=self.dimensions,
            output_path=output_path,
        )

    async def upload_batch_file(self, file_path: Path) -> str:
        return await upload_batch_file(self.client, file_path)

    async def create_batch_job(
        self,
        input_file_id: str,
        *,
        description: str = "Embedding jobs batch",
    ) -> BatchJobState:
        return await create_remote_batch_job(
            self.client,
            input_file_id,
            endpoint=self.endpoint,
            completion_window=self.completion_window,
            description=description,
        )

    async def get_batch(self, batch_id: str) -> BatchJobState:
        return await retrieve_batch(self.client, batch_id)

    async def download_results(self, file_id: str) -> list[BatchResult]:
        text = await download_file_text(self.client, file_id)
        return parse_batch_results(text, source=file_id)

    async def cancel_batch(self, batch_id: str) -> None:
        await cancel_remote_batch(self.client, batch_id)

    async def cleanup_files(self, file_ids: Iterable[str | None]) -> None:
        await cleanup_uploaded_files(self.client, file_ids)


__all__ = ["BatchEmbeddingProvider", "BatchJobState", "BatchRequest", "BatchResult"]
