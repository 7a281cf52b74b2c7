"""Aggregate outcome of one embedding batch run."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from .schemas import BatchReportResponse, EmbeddingJob, EnrichedJob, FailedJob

logger = logging.getLogger(__name__)

UNRESOLVED_REASON = "Job was not resolved by the batch pipeline"


@dataclass(slots=True)
class BatchReport:
    """Completed and failed jobs of one run; every input job is in exactly one list."""

    completed_jobs: list[EmbeddingJob] = field(default_factory=list)
    failed_jobs: list[FailedJob] = field(default_factory=list)

    @property
    def completed_job_ids(self) -> list[int]:
        return [job.job_id for job in self.completed_jobs]

    def to_response(self) -> BatchReportResponse:
        return BatchReportResponse(
            completed_job_ids=self.completed_job_ids,
            failed_job_details=list(self.failed_jobs),
        )


class BatchReportBuilder:
    """Collects outcomes while a run progresses.

    The first outcome recorded for a ``job_id`` wins; later attempts are
    logged and ignored. Methods never await, so concurrent tasks on one
    event loop cannot interleave inside an update.
    """

    def __init__(self) -> None:
        self._completed: dict[int, EmbeddingJob] = {}
        self._failed: dict[int, FailedJob] = {}

    def is_resolved(self, job_id: int) -> bool:
        return job_id in self._completed or job_id in self._failed

    def complete(self, job: EmbeddingJob) -> bool:
        if self.is_resolved(job.job_id):
            logger.warning("Job already resolved; ignoring completion", extra={"job_id": job.job_id})
            return False
        self._completed[job.job_id] = job
        return True

    def fail(self, job: EmbeddingJob, reason: str) -> bool:
        if self.is_resolved(job.job_id):
            logger.warning(
                "Job already resolved; ignoring failure",
                extra={"job_id": job.job_id, "reason": reason},
            )
            return False
        self._failed[job.job_id] = FailedJob.from_job(job, reason)
        return True

    def fail_unresolved(self, jobs: Iterable[EmbeddingJob | EnrichedJob], reason: str) -> int:
        """Fail every job in ``jobs`` that has no outcome yet."""

        count = 0
        for item in jobs:
            job = item.job if isinstance(item, EnrichedJob) else item
            if not self.is_resolved(job.job_id):
                self._failed[job.job_id] = FailedJob.from_job(job, reason)
                count += 1
        return count

    def build(self, jobs: Iterable[EmbeddingJob]) -> BatchReport:
        """Return the report for ``jobs``, failing any that were never resolved."""

        jobs = list(jobs)
        leftovers = self.fail_unresolved(jobs, UNRESOLVED_REASON)
        if leftovers:
            logger.error("Jobs left unresolved by the pipeline", extra={"count": leftovers})

        completed = [self._completed[job.job_id] for job in jobs if job.job_id in self._completed]
        failed = list(self._failed.values())

        logger.info(
            "Finished processing jobs",
            extra={"completed": len(completed), "failed": len(failed)},
        )
        return BatchReport(completed_jobs=completed, failed_jobs=failed)


__all__ = ["BatchReport", "BatchReportBuilder", "UNRESOLVED_REASON"]
