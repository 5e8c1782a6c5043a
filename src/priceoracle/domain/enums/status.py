from enum import Enum


class JobStatus(str, Enum):
    """Backfill job lifecycle: PENDING -> PROCESSING -> COMPLETED | FAILED."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)

    def can_move_to(self, target: "JobStatus") -> bool:
        """Status only moves forward; staying in a non-terminal state is allowed."""
        if self.is_terminal:
            return False
        return _ORDER[target] >= _ORDER[self]


_ORDER = {
    JobStatus.PENDING: 0,
    JobStatus.PROCESSING: 1,
    JobStatus.COMPLETED: 2,
    JobStatus.FAILED: 2,
}
