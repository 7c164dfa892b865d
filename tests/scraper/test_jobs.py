"""Unit tests for the job service: creation, background runs, queries and deletion."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from alumni_profiler.core.exceptions import (
    JobNotFoundError,
    JobStateError,
    NoValidUrlsError,
    ProfileNotFoundError,
)
from alumni_profiler.core.models.jobs import JobStatus
from alumni_profiler.core.repository import JobRepository, ProfileRepository
from alumni_profiler.scraper.controller import JobController, PacingPolicy
from alumni_profiler.scraper.jobs import JobService
from alumni_profiler.scraper.summarizer import Summarizer
from tests.factories.doubles import StubFetcher, access_denied
from tests.factories.profiles import profile_html

_A = "https://www.linkedin.com/in/alice/"
_B = "https://www.linkedin.com/in/bob/"
_C = "https://www.linkedin.com/in/carol/"


def _service(
    fetcher: StubFetcher,
    jobs: JobRepository,
    profiles: ProfileRepository,
    summarizer: Summarizer,
    sleep: Any,
) -> JobService:
    controller = JobController(
        fetcher,  # type: ignore[arg-type]
        summarizer,
        profiles,
        pacing=PacingPolicy(delay_seconds=0.0),
        sleep=sleep,
    )
    return JobService(controller, jobs, profiles)


@pytest.fixture
def service(
    jobs: JobRepository,
    profiles: ProfileRepository,
    keyword_summarizer: Summarizer,
    fake_sleep: Any,
) -> JobService:
    fetcher = StubFetcher(
        {
            _A: profile_html(name="Alice"),
            _B: access_denied(_B),
            _C: profile_html(name="Carol"),
        }
    )
    return _service(fetcher, jobs, profiles, keyword_summarizer, fake_sleep)


class TestCreateJob:
    def test_filters_invalid_urls(self, service: JobService) -> None:
        job = service.create_job([_A, "https://evil.example.com/in/x/", _B])

        assert job.status is JobStatus.PENDING
        assert job.urls == (_A, _B)
        assert job.total_count == 2
        assert service.get_job(job.id) is job

    def test_no_valid_urls_rejected(self, service: JobService, jobs: JobRepository) -> None:
        with pytest.raises(NoValidUrlsError) as exc_info:
            service.create_job(["https://www.linkedin.com/", "", None])
        assert exc_info.value.submitted == 3
        assert len(jobs) == 0

    def test_empty_list_rejected(self, service: JobService) -> None:
        with pytest.raises(NoValidUrlsError):
            service.create_job([])


@pytest.mark.asyncio
class TestRunJob:
    async def test_run_processes_in_background(self, service: JobService) -> None:
        job = service.create_job([_A, _B, _C])

        returned = service.run_job(job.id)
        assert returned.status is JobStatus.RUNNING

        finished = await service.wait_for(job.id)

        assert finished.status is JobStatus.COMPLETED
        assert (finished.success_count, finished.failure_count) == (2, 1)
        assert [record.name for record in service.get_results(job.id)] == ["Alice", "Carol"]
        assert service.active_jobs == 0

    async def test_second_run_rejected(self, service: JobService) -> None:
        job = service.create_job([_A])
        service.run_job(job.id)

        with pytest.raises(JobStateError):
            service.run_job(job.id)

        await service.wait_for(job.id)
        with pytest.raises(JobStateError):
            service.run_job(job.id)

    async def test_unknown_job(self, service: JobService) -> None:
        with pytest.raises(JobNotFoundError):
            service.run_job("missing")

    async def test_status_readable_while_running(
        self,
        jobs: JobRepository,
        profiles: ProfileRepository,
        keyword_summarizer: Summarizer,
    ) -> None:
        gate = asyncio.Event()

        async def _gated_sleep(seconds: float) -> None:
            await gate.wait()

        fetcher = StubFetcher({_A: profile_html(name="Alice"), _C: profile_html(name="Carol")})
        service = _service(fetcher, jobs, profiles, keyword_summarizer, _gated_sleep)
        job = service.create_job([_A, _C])
        service.run_job(job.id)

        for _ in range(20):
            if job.processed_count == 1:
                break
            await asyncio.sleep(0)

        snapshot = service.get_job(job.id)
        assert snapshot.status is JobStatus.RUNNING
        assert snapshot.processed_count == 1
        assert [record.name for record in service.get_results(job.id)] == ["Alice"]

        gate.set()
        finished = await service.wait_for(job.id)
        assert finished.processed_count == 2


@pytest.mark.asyncio
class TestQueries:
    async def test_profiles_indexed_by_id(self, service: JobService) -> None:
        job = service.create_job([_A, _C])
        service.run_job(job.id)
        await service.wait_for(job.id)

        records = service.list_profiles()
        assert len(records) == 2
        assert service.get_profile(records[0].id) is records[0]

    async def test_unknown_profile(self, service: JobService) -> None:
        with pytest.raises(ProfileNotFoundError):
            service.get_profile("missing")

    async def test_list_jobs(self, service: JobService) -> None:
        first = service.create_job([_A])
        second = service.create_job([_C])
        assert [job.id for job in service.list_jobs()] == [first.id, second.id]


@pytest.mark.asyncio
class TestDeleteAndShutdown:
    async def test_delete_terminal_job_removes_profiles(self, service: JobService) -> None:
        job = service.create_job([_A, _C])
        service.run_job(job.id)
        await service.wait_for(job.id)

        service.delete_job(job.id)

        with pytest.raises(JobNotFoundError):
            service.get_job(job.id)
        assert service.list_profiles() == []

    async def test_delete_pending_job_rejected(self, service: JobService) -> None:
        job = service.create_job([_A])
        with pytest.raises(JobStateError):
            service.delete_job(job.id)

    async def test_shutdown_cancels_and_clears(
        self,
        jobs: JobRepository,
        profiles: ProfileRepository,
        keyword_summarizer: Summarizer,
    ) -> None:
        async def _forever(seconds: float) -> None:
            await asyncio.Event().wait()

        fetcher = StubFetcher({_A: profile_html(), _C: profile_html()})
        service = _service(fetcher, jobs, profiles, keyword_summarizer, _forever)
        job = service.create_job([_A, _C])
        service.run_job(job.id)
        await asyncio.sleep(0)

        await service.shutdown()

        assert service.active_jobs == 0
        assert len(jobs) == 0
        assert len(profiles) == 0
