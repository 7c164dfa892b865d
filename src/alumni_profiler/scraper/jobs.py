"""Job service: the operations exposed to the HTTP layer.

Wraps the two repositories and the :class:`JobController` behind
create/run/poll/retrieve operations.  A run is scheduled as an
``asyncio`` task on the running loop and the call returns immediately;
callers poll :meth:`JobService.get_job` (or await :meth:`wait_for`) to
observe progress.
"""

from __future__ import annotations

import asyncio
from typing import Iterable

import structlog

from alumni_profiler.core.exceptions import JobStateError, NoValidUrlsError
from alumni_profiler.core.models.jobs import Job
from alumni_profiler.core.models.profiles import ProfileRecord
from alumni_profiler.core.repository import JobRepository, ProfileRepository
from alumni_profiler.scraper.controller import JobController
from alumni_profiler.scraper.url_validator import (
    UrlValidator,
    filter_profile_urls,
    is_valid_profile_url,
)

logger = structlog.get_logger(__name__)


class JobService:
    """Create, run and query profile ingestion jobs.

    Args:
        controller: Pipeline driver shared by every job.
        jobs: Job repository.
        profiles: Profile record repository (also written by the controller).
        url_validator: Ingestion-time URL filter.
    """

    def __init__(
        self,
        controller: JobController,
        jobs: JobRepository,
        profiles: ProfileRepository,
        *,
        url_validator: UrlValidator = is_valid_profile_url,
    ) -> None:
        self._controller = controller
        self._jobs = jobs
        self._profiles = profiles
        self._is_valid = url_validator
        self._tasks: dict[str, asyncio.Task[Job]] = {}

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_job(self, urls: Iterable[str | None]) -> Job:
        """Filter ``urls`` and store a new pending job.

        Raises:
            NoValidUrlsError: If no URL passes validation.
        """
        submitted = list(urls)
        valid = filter_profile_urls(submitted, self._is_valid)
        if not valid:
            raise NoValidUrlsError(submitted=len(submitted))

        job = self._jobs.add(Job(urls=tuple(valid)))
        logger.info(
            "profile_job_created",
            job_id=job.id,
            submitted=len(submitted),
            total_profiles=job.total_count,
        )
        return job

    def run_job(self, job_id: str) -> Job:
        """Start a pending job and schedule its processing in the background.

        Raises:
            JobNotFoundError: If the job does not exist.
            JobStateError: If the job is not pending.
        """
        job = self._jobs.require(job_id)
        self._controller.start(job)
        task = asyncio.get_running_loop().create_task(
            self._controller.process(job), name=f"profile-job-{job.id}"
        )
        self._tasks[job.id] = task
        task.add_done_callback(lambda _task, key=job.id: self._tasks.pop(key, None))
        return job

    def delete_job(self, job_id: str) -> None:
        """Remove a terminal job and its profile records.

        Raises:
            JobNotFoundError: If the job does not exist.
            JobStateError: If the job is pending or running.
        """
        job = self._jobs.require(job_id)
        if not job.is_terminal:
            raise JobStateError(
                job.id,
                job.status.value,
                f"Cannot delete a job with status '{job.status.value}'. "
                "Only completed or failed jobs can be deleted.",
            )
        for record in job.results:
            self._profiles.remove(record.id)
        self._jobs.remove(job.id)
        logger.info("profile_job_deleted", job_id=job.id, profiles=len(job.results))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_job(self, job_id: str) -> Job:
        return self._jobs.require(job_id)

    def list_jobs(self) -> list[Job]:
        return self._jobs.values()

    def get_results(self, job_id: str) -> list[ProfileRecord]:
        """Records produced so far, in input order; valid while running."""
        return list(self._jobs.require(job_id).results)

    def get_profile(self, profile_id: str) -> ProfileRecord:
        return self._profiles.require(profile_id)

    def list_profiles(self) -> list[ProfileRecord]:
        return self._profiles.values()

    @property
    def active_jobs(self) -> int:
        return len(self._tasks)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def wait_for(self, job_id: str) -> Job:
        """Await a scheduled run; returns the job at once if none is in flight."""
        task = self._tasks.get(job_id)
        if task is not None:
            await asyncio.shield(task)
        return self._jobs.require(job_id)

    async def shutdown(self) -> None:
        """Cancel outstanding runs and clear both repositories."""
        tasks = list(self._tasks.values())
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()
        self._jobs.clear()
        self._profiles.clear()
        logger.info("profile_jobs_shutdown", cancelled=len(tasks))
