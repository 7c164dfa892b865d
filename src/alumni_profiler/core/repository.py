"""In-memory repositories for jobs and profile records.

Both repositories map an entity's ``id`` to the entity itself and live for
the lifetime of the FastAPI application: the lifespan handler in
``api/main.py`` creates them at startup and clears them at shutdown.  They
are injected into the job controller and the job service rather than being
module-level singletons, so tests build their own fresh instances.

Entries are never evicted automatically; terminal jobs are removed only
through :meth:`alumni_profiler.scraper.jobs.JobService.delete_job`.

Example::

    jobs = JobRepository()
    jobs.add(job)
    jobs.require(job.id)   # -> Job, or raises JobNotFoundError
"""

from __future__ import annotations

from typing import Generic, Iterator, Protocol, TypeVar

from alumni_profiler.core.exceptions import JobNotFoundError, ProfileNotFoundError
from alumni_profiler.core.models.jobs import Job
from alumni_profiler.core.models.profiles import ProfileRecord


class _HasId(Protocol):
    @property
    def id(self) -> str: ...


EntityT = TypeVar("EntityT", bound=_HasId)


class InMemoryRepository(Generic[EntityT]):
    """Insertion-ordered ``id -> entity`` mapping."""

    def __init__(self) -> None:
        self._items: dict[str, EntityT] = {}

    def add(self, item: EntityT) -> EntityT:
        if item.id in self._items:
            raise ValueError(f"duplicate id {item.id!r}")
        self._items[item.id] = item
        return item

    def get(self, item_id: str) -> EntityT | None:
        return self._items.get(item_id)

    def require(self, item_id: str) -> EntityT:
        """Return the entity or raise the repository's not-found error."""
        item = self._items.get(item_id)
        if item is None:
            raise self._not_found(item_id)
        return item

    def remove(self, item_id: str) -> EntityT | None:
        return self._items.pop(item_id, None)

    def values(self) -> list[EntityT]:
        return list(self._items.values())

    def clear(self) -> None:
        self._items.clear()

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[EntityT]:
        return iter(list(self._items.values()))

    def _not_found(self, item_id: str) -> Exception:
        return KeyError(item_id)


class JobRepository(InMemoryRepository[Job]):
    def _not_found(self, item_id: str) -> Exception:
        return JobNotFoundError(item_id)


class ProfileRepository(InMemoryRepository[ProfileRecord]):
    def _not_found(self, item_id: str) -> Exception:
        return ProfileNotFoundError(item_id)
