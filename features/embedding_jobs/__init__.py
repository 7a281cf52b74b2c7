"""Batch embedding of queued row jobs through the OpenAI Batch API."""

from .report import BatchReport, BatchReportBuilder
from .routes import router
from .service import EmbeddingJobsService

__all__ = ["BatchReport", "BatchReportBuilder", "EmbeddingJobsService", "router"]
