"""Domain entities held in the in-memory repositories."""

from alumni_profiler.core.models.jobs import TERMINAL_STATUSES, FailedItem, Job, JobStatus
from alumni_profiler.core.models.profiles import PastRole, ProfileRecord, ProfileStatus

__all__ = [
    "FailedItem",
    "Job",
    "JobStatus",
    "PastRole",
    "ProfileRecord",
    "ProfileStatus",
    "TERMINAL_STATUSES",
]
