"""Profile record entities.

A :class:`ProfileRecord` is produced once per successfully processed URL and
never changes afterwards, so both it and :class:`PastRole` are frozen
dataclasses.  API serialisation goes through
:mod:`alumni_profiler.core.schemas.profiles`.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class ProfileStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class PastRole:
    """One earlier position listed on a profile."""

    title: str
    company: str
    years: str = ""
    location: str | None = None


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


@dataclass(frozen=True)
class ProfileRecord:
    """Normalized career record for one profile URL.

    Attributes:
        source_url: The profile URL the record was built from.
        status: ``success`` or ``failed``.
        id: Generated unique identifier.
        name: Display name, empty when not found.
        title: Current headline title.
        company: Current company.
        location: Free-text location.
        education: Education entries in page order.
        past_roles: Earlier positions in page order.
        summary: Short professional synopsis (at most 150 characters).
        retrieved_at: UTC timestamp of retrieval.
        error: Failure description; set if and only if ``status`` is ``failed``.

    Raises:
        ValueError: If ``status`` and ``error`` disagree.
    """

    source_url: str
    status: ProfileStatus
    id: str = field(default_factory=_new_id)
    name: str = ""
    title: str = ""
    company: str = ""
    location: str = ""
    education: tuple[str, ...] = ()
    past_roles: tuple[PastRole, ...] = ()
    summary: str = ""
    retrieved_at: datetime = field(default_factory=_utcnow)
    error: str | None = None

    def __post_init__(self) -> None:
        if self.status is ProfileStatus.FAILED and not self.error:
            raise ValueError("a failed ProfileRecord requires an error message")
        if self.status is ProfileStatus.SUCCESS and self.error is not None:
            raise ValueError("a successful ProfileRecord cannot carry an error")
