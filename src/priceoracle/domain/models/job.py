"""Domain types for backfill jobs."""

from datetime import datetime

from pydantic import BaseModel

from priceoracle.domain.enums import JobStatus


class BackfillJob(BaseModel):
    """A scheduled price history backfill for one (token, network)."""

    job_id: str
    token: str
    network: str
    creation_date: datetime
    status: JobStatus = JobStatus.PENDING
    total_days: int = 0
    processed_days: int = 0  # Batch-aligned, never exceeds total_days
    error: str | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None


class JobStatusView(BaseModel):
    job_id: str
    status: JobStatus
    progress: int  # Percent, 0-100
    total_days: int
    processed_days: int
    error: str | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None

    @classmethod
    def from_job(cls, job: BackfillJob) -> "JobStatusView":
        return cls(
            job_id=job.job_id,
            status=job.status,
            progress=_percent(job.processed_days, job.total_days),
            total_days=job.total_days,
            processed_days=job.processed_days,
            error=job.error,
            started_at=job.started_at,
            completed_at=job.completed_at,
        )


def _percent(done: int, total: int) -> int:
    """Round half up, 0 when there is nothing to do."""
    if total <= 0:
        return 0
    return (200 * done + total) // (2 * total)
