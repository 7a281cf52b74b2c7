"""FastAPI dependencies for the embedding jobs feature."""

from __future__ import annotations

from core.clients.ai import get_openai_async_client
from core.providers.batch import BatchEmbeddingProvider
from infrastructure.db import require_embeddings_session_factory

from .repositories import ContentRepository, QueueRepository
from .service import EmbeddingJobsService


def get_embedding_jobs_service() -> EmbeddingJobsService:
    """Build a service wired to the embeddings database and OpenAI."""

    session_factory = require_embeddings_session_factory()
    content_repository = ContentRepository(session_factory)
    return EmbeddingJobsService(
        content_repository=content_repository,
        vector_store=content_repository,
        queue=QueueRepository(session_factory),
        provider=BatchEmbeddingProvider(client=get_openai_async_client()),
    )


__all__ = ["get_embedding_jobs_service"]
