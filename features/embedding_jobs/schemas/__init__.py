"""Schemas for the embedding jobs feature."""

from .jobs import EmbeddingJob, EnrichedJob, FailedJob
from .responses import BatchReportResponse

__all__ = ["BatchReportResponse", "EmbeddingJob", "EnrichedJob", "FailedJob"]
