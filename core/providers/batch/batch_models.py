"""Models used for OpenAI Batch API embedding jobs."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

TERMINAL_STATUSES = frozenset({"completed", "failed", "cancelled", "expired"})
"""Batch statuses after which no further transitions occur."""


@dataclass(slots=True)
class BatchRequest:
    """Represents a single embedding request in a batch job."""

    custom_id: str
    input_text: str


@dataclass(slots=True)
class BatchJobState:
    """Snapshot of a remote batch job as last reported by the provider."""

    id: str
    status: str
    output_file_id: str | None = None
    error_file_id: str | None = None
    input_file_id: str | None = None
    errors: list[str] = field(default_factory=list)
    request_counts: dict[str, Any] | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


@dataclass(slots=True)
class BatchResult:
    """Represents a single embedding response from a batch job."""

    custom_id: str
    embedding: list[float] | None = None
    status_code: int | None = None
    error_code: str | None = None
    error_message: str | None = None

    @property
    def succeeded(self) -> bool:
        return (
            self.error_code is None
            and self.error_message is None
            and self.status_code == 200
            and bool(self.embedding)
        )


__all__ = ["TERMINAL_STATUSES", "BatchRequest", "BatchJobState", "BatchResult"]
