"""OpenAI Batch API helpers for embedding jobs."""

from .batch_embeddings import BatchEmbeddingProvider
from .batch_models import TERMINAL_STATUSES, BatchJobState, BatchRequest, BatchResult

__all__ = [
    "BatchEmbeddingProvider",
    "BatchJobState",
    "BatchRequest",
    "BatchResult",
    "TERMINAL_STATUSES",
]
