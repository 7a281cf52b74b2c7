"""Response schemas for the embedding batch pipeline."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field

from .jobs import FailedJob


class BatchReportResponse(BaseModel):
    """Outcome of one batch run as returned to the caller."""

    model_config = ConfigDict(populate_by_name=True)

    completed_job_ids: List[int] = Field(default_factory=list, alias="completedJobIds")
    failed_job_details: List[FailedJob] = Field(default_factory=list, alias="failedJobDetails")


__all__ = ["BatchReportResponse"]
