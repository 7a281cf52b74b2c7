"""External AI providers used by the backend.

Only the OpenAI Batch API embedding provider lives here; see
``core.providers.batch``.
"""

from .batch import BatchEmbeddingProvider

__all__ = ["BatchEmbeddingProvider"]
