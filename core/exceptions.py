"""Custom Exception Hierarchy for the embedding batch backend
This module defines a typed exception hierarchy that enables precise error
handling and structured error responses across the application.

Exception Handling Flow:
    1. Pipeline stage raises typed exception
    2. Orchestrating service converts it into report entries (per job or bulk)
    3. Only ``MalformedBatchError`` reaches the HTTP layer (400 envelope)

Taxonomy used by ``features.embedding_jobs``:
    - Per-job, recoverable: RowNotFoundError, EmptyContentError, ContentFetchError
    - Bulk, fail every unresolved job: BatchUploadError, BatchCreationError,
      BatchPollingError, BatchWaitTimeoutError, ResultDownloadError
    - Per-item: ResultItemError, StorageWriteError, QueueDeleteError (log only)
"""

from __future__ import annotations


class ServiceError(Exception):
    """Base exception for all service layer errors."""


class ValidationError(ServiceError):
    """Raised when input validation fails."""

    def __init__(self, message: str, field: str | None = None):
        self.message = message
        self.field = field
        super().__init__(self.message)


class NotFoundError(ServiceError):
    """Raised when a requested resource cannot be located."""

    def __init__(self, message: str, resource: str | None = None):
        self.message = message
        self.resource = resource
        super().__init__(self.message)


class ProviderError(ServiceError):
    """Raised when an external provider (AI API) fails."""

    def __init__(self, message: str, provider: str | None = None, original_error: Exception | None = None):
        self.message = message
        self.provider = provider
        self.original_error = original_error
        super().__init__(self.message)


class ConfigurationError(ServiceError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, message: str, key: str | None = None):
        self.message = message
        self.key = key
        super().__init__(self.message)


class DatabaseError(ServiceError):
    """Raised when database operations fail."""

    def __init__(self, message: str, operation: str | None = None):
        self.message = message
        self.operation = operation
        super().__init__(self.message)


# ---------------------------------------------------------------------------
# Intake
# ---------------------------------------------------------------------------


class MalformedBatchError(ValidationError):
    """Raised when the incoming payload is not a list of well-formed jobs."""


class InvalidIdentifierError(ValidationError):
    """Raised when a schema/table/column/function name is not an allowed SQL identifier."""


# ---------------------------------------------------------------------------
# Content fetch (per job)
# ---------------------------------------------------------------------------


class JobContentError(ServiceError):
    """Mixin base for per-job content resolution failures."""

    job_id: int | None = None


class RowNotFoundError(JobContentError, NotFoundError):
    """Raised when the row referenced by a job does not exist."""

    def __init__(self, message: str, job_id: int | None = None):
        NotFoundError.__init__(self, message, resource="row")
        self.job_id = job_id


class EmptyContentError(JobContentError, ValidationError):
    """Raised when the content function yields no usable text."""

    def __init__(self, message: str, job_id: int | None = None):
        ValidationError.__init__(self, message, field="content")
        self.job_id = job_id


class ContentFetchError(JobContentError, DatabaseError):
    """Raised when the storage layer fails while resolving content."""

    def __init__(self, message: str, job_id: int | None = None):
        DatabaseError.__init__(self, message, operation="fetch_content")
        self.job_id = job_id


# ---------------------------------------------------------------------------
# External batch stages (bulk)
# ---------------------------------------------------------------------------


class BatchStageError(ProviderError):
    """Raised when a whole-batch stage fails; every unresolved job fails with it."""

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message, provider="openai", original_error=original_error)


class BatchUploadError(BatchStageError):
    """Raised when the staged request file cannot be built or uploaded."""


class BatchCreationError(BatchStageError):
    """Raised when the provider refuses to start the batch job."""


class BatchPollingError(BatchStageError):
    """Raised when retrieving the batch status fails."""


class BatchWaitTimeoutError(BatchStageError):
    """Raised when waiting is cut short by a deadline or cancellation."""


class ResultDownloadError(BatchStageError):
    """Raised when the batch output file cannot be downloaded."""


# ---------------------------------------------------------------------------
# Reconciliation (per item)
# ---------------------------------------------------------------------------


class ResultItemError(ProviderError):
    """Raised for a result line carrying a provider error or no embedding."""

    def __init__(self, message: str, custom_id: str | None = None, code: str | None = None):
        super().__init__(message, provider="openai")
        self.custom_id = custom_id
        self.code = code


class StorageWriteError(DatabaseError):
    """Raised when the embedding cannot be written back to its row."""

    def __init__(self, message: str):
        super().__init__(message, operation="update_vector")


class QueueDeleteError(DatabaseError):
    """Raised when a processed job cannot be removed from the queue."""

    def __init__(self, message: str):
        super().__init__(message, operation="queue_delete")
