"""In-memory job entity and its state machine vocabulary.

A :class:`Job` is mutated in place by exactly one
:class:`~alumni_profiler.scraper.controller.JobController` run while status
pollers read it concurrently.  All counter updates for one item happen
without an intervening ``await`` so readers never observe
``processed_count != success_count + failure_count``.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from alumni_profiler.core.models.profiles import ProfileRecord


class JobStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


#: No transition leaves these states.
TERMINAL_STATUSES: frozenset[JobStatus] = frozenset(
    {JobStatus.COMPLETED, JobStatus.FAILED}
)


@dataclass(frozen=True)
class FailedItem:
    """A URL that did not produce a profile record.

    Attributes:
        url: The URL that failed.
        error: Human-readable description.
        reason: Machine-readable code (``timeout``, ``access_denied``,
            ``network_error``, ``unknown``, ``invalid_url``).
    """

    url: str
    error: str
    reason: str = "unknown"


@dataclass
class Job:
    """One batch run over a list of profile URLs."""

    urls: tuple[str, ...]
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    status: JobStatus = JobStatus.PENDING
    processed_count: int = 0
    success_count: int = 0
    failure_count: int = 0
    current_url: str | None = None
    results: list[ProfileRecord] = field(default_factory=list)
    failures: list[FailedItem] = field(default_factory=list)
    created_at: datetime = field(default_factory=lambda: datetime.now(tz=timezone.utc))
    started_at: datetime | None = None
    completed_at: datetime | None = None
    error_message: str | None = None

    def __post_init__(self) -> None:
        self.urls = tuple(self.urls)

    @property
    def total_count(self) -> int:
        return len(self.urls)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES
