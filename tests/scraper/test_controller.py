"""Unit tests for the job controller state machine.

Collaborators are test doubles: a URL-keyed stub fetcher, stub summary
backends and a recording sleep, so every run completes instantly.
"""

from __future__ import annotations

from typing import Any

import pytest

from alumni_profiler.core.exceptions import JobStateError, NetworkFetchError
from alumni_profiler.core.models.jobs import Job, JobStatus
from alumni_profiler.core.models.profiles import PastRole, ProfileStatus
from alumni_profiler.core.repository import ProfileRepository
from alumni_profiler.scraper.config import GENERIC_SUMMARY, MAX_SUMMARY_CHARS
from alumni_profiler.scraper.controller import JobController, PacingPolicy, build_record
from alumni_profiler.scraper.profile_extractor import PartialProfile
from alumni_profiler.scraper.summarizer import Summarizer, keyword_summary
from alumni_profiler.scraper.url_validator import make_validator
from tests.factories.doubles import StubBackend, StubFetcher, access_denied
from tests.factories.profiles import profile_html

_JANE_ABOUT = (
    "Experienced product manager working across fintech and payments, with a "
    "focus on management of cross-functional teams."
)


def _url(handle: str) -> str:
    return f"https://www.linkedin.com/in/{handle}/"


def _controller(
    fetcher: StubFetcher,
    profiles: ProfileRepository,
    summarizer: Summarizer,
    sleep: Any,
    **kwargs: Any,
) -> JobController:
    return JobController(
        fetcher,  # type: ignore[arg-type]
        summarizer,
        profiles,
        pacing=PacingPolicy(delay_seconds=2.0),
        sleep=sleep,
        **kwargs,
    )


class TestPacingPolicy:
    def test_fixed_delay(self) -> None:
        assert PacingPolicy(delay_seconds=1.5).next_delay() == 1.5

    def test_jitter_within_bounds(self) -> None:
        policy = PacingPolicy(delay_seconds=1.0, jitter_seconds=0.5)
        for _ in range(50):
            assert 1.0 <= policy.next_delay() <= 1.5


class TestBuildRecord:
    def test_headline_company_kept(self) -> None:
        partial = PartialProfile(name="Jane", title="PM", company="Google")
        record = build_record(_url("jane"), partial, "Summary.")
        assert record.company == "Google"
        assert record.status is ProfileStatus.SUCCESS
        assert record.error is None

    def test_company_from_first_past_role_when_missing(self) -> None:
        partial = PartialProfile(
            title="Independent Consultant",
            past_roles=(PastRole("Partner", "Bain"), PastRole("Associate", "BCG")),
        )
        assert build_record(_url("x"), partial, "").company == "Bain"


@pytest.mark.asyncio
class TestJobControllerScenarios:
    async def test_single_profile_completes(
        self, profiles: ProfileRepository, keyword_summarizer: Summarizer, fake_sleep: Any
    ) -> None:
        url = _url("janedoe")
        html = profile_html(name="Jane Doe", headline="Product Manager at Google", about=_JANE_ABOUT)
        controller = _controller(StubFetcher({url: html}), profiles, keyword_summarizer, fake_sleep)
        job = Job(urls=(url,))

        await controller.run(job)

        assert job.status is JobStatus.COMPLETED
        assert job.success_count == 1
        assert job.failure_count == 0
        assert job.current_url is None
        assert job.started_at is not None and job.completed_at is not None
        record = job.results[0]
        assert record.name == "Jane Doe"
        assert record.title == "Product Manager"
        assert record.company == "Google"
        assert record.source_url == url
        assert record.summary
        assert len(record.summary) <= MAX_SUMMARY_CHARS
        assert profiles.get(record.id) is record

    async def test_access_denied_item_does_not_fail_job(
        self, profiles: ProfileRepository, keyword_summarizer: Summarizer, fake_sleep: Any
    ) -> None:
        urls = (_url("a"), _url("b"), _url("c"))
        fetcher = StubFetcher(
            {
                urls[0]: profile_html(name="A"),
                urls[1]: access_denied(urls[1]),
                urls[2]: profile_html(name="C"),
            }
        )
        job = Job(urls=urls)

        await _controller(fetcher, profiles, keyword_summarizer, fake_sleep).run(job)

        assert job.status is JobStatus.COMPLETED
        assert (job.success_count, job.failure_count, job.processed_count) == (2, 1, 3)
        assert len(job.failures) == 1
        assert job.failures[0].url == urls[1]
        assert job.failures[0].reason == "access_denied"
        assert [record.name for record in job.results] == ["A", "C"]

    async def test_backend_failing_everywhere_still_succeeds(
        self, profiles: ProfileRepository, fake_sleep: Any
    ) -> None:
        urls = (_url("a"), _url("b"))
        fetcher = StubFetcher({url: profile_html(about=_JANE_ABOUT) for url in urls})
        summarizer = Summarizer(StubBackend(error=RuntimeError("backend down")))
        job = Job(urls=urls)

        await _controller(fetcher, profiles, summarizer, fake_sleep).run(job)

        assert job.status is JobStatus.COMPLETED
        assert job.success_count == 2
        for record in job.results:
            assert record.status is ProfileStatus.SUCCESS
            assert record.summary == keyword_summary(_JANE_ABOUT)

    async def test_missing_about_gets_generic_summary(
        self, profiles: ProfileRepository, keyword_summarizer: Summarizer, fake_sleep: Any
    ) -> None:
        url = _url("quiet")
        job = Job(urls=(url,))
        await _controller(StubFetcher({url: profile_html()}), profiles, keyword_summarizer, fake_sleep).run(job)

        assert job.results[0].summary == GENERIC_SUMMARY


@pytest.mark.asyncio
class TestJobControllerLaws:
    async def test_partition_and_order(
        self, profiles: ProfileRepository, keyword_summarizer: Summarizer, fake_sleep: Any
    ) -> None:
        handles = ["a", "b", "c", "d", "e", "f"]
        urls = tuple(_url(h) for h in handles)
        responses: dict[str, Any] = {}
        for index, url in enumerate(urls):
            if index % 3 == 1:
                responses[url] = access_denied(url)
            elif index % 3 == 2:
                responses[url] = NetworkFetchError("connection reset", url=url)
            else:
                responses[url] = profile_html(name=handles[index].upper())
        fetcher = StubFetcher(responses)
        job = Job(urls=urls)

        await _controller(fetcher, profiles, keyword_summarizer, fake_sleep).run(job)

        assert job.processed_count == job.success_count + job.failure_count == len(urls)
        assert [record.source_url for record in job.results] == [urls[0], urls[3]]
        assert [item.url for item in job.failures] == [urls[1], urls[2], urls[4], urls[5]]
        assert fetcher.fetched == list(urls)

    async def test_raised_fetch_error_recorded_with_reason(
        self, profiles: ProfileRepository, keyword_summarizer: Summarizer, fake_sleep: Any
    ) -> None:
        url = _url("net")
        job = Job(urls=(url,))
        fetcher = StubFetcher({url: NetworkFetchError("dns failure", url=url)})

        await _controller(fetcher, profiles, keyword_summarizer, fake_sleep).run(job)

        assert job.status is JobStatus.COMPLETED
        assert job.failures[0].reason == "network_error"
        assert "dns failure" in job.failures[0].error

    async def test_delay_between_items_only(
        self,
        profiles: ProfileRepository,
        keyword_summarizer: Summarizer,
        fake_sleep: Any,
        sleeps: list[float],
    ) -> None:
        urls = (_url("a"), _url("b"), _url("c"))
        fetcher = StubFetcher({url: profile_html() for url in urls})

        await _controller(fetcher, profiles, keyword_summarizer, fake_sleep).run(Job(urls=urls))

        assert sleeps == [2.0, 2.0]

    async def test_single_item_never_sleeps(
        self,
        profiles: ProfileRepository,
        keyword_summarizer: Summarizer,
        fake_sleep: Any,
        sleeps: list[float],
    ) -> None:
        url = _url("solo")
        await _controller(StubFetcher({url: profile_html()}), profiles, keyword_summarizer, fake_sleep).run(
            Job(urls=(url,))
        )
        assert sleeps == []

    async def test_progress_visible_after_each_item(
        self, profiles: ProfileRepository, keyword_summarizer: Summarizer
    ) -> None:
        urls = (_url("a"), _url("b"), _url("c"))
        job = Job(urls=urls)
        snapshots: list[tuple[int, int, int, str | None]] = []

        async def _observing_sleep(seconds: float) -> None:
            snapshots.append(
                (job.processed_count, job.success_count, job.failure_count, job.current_url)
            )

        fetcher = StubFetcher(
            {urls[0]: profile_html(), urls[1]: access_denied(urls[1]), urls[2]: profile_html()}
        )
        await _controller(fetcher, profiles, keyword_summarizer, _observing_sleep).run(job)

        assert snapshots == [(1, 1, 0, None), (2, 1, 1, None)]

    async def test_current_url_set_only_while_item_in_flight(
        self, profiles: ProfileRepository, keyword_summarizer: Summarizer, fake_sleep: Any
    ) -> None:
        urls = (_url("a"), _url("b"))
        job = Job(urls=urls)
        in_flight: list[str | None] = []

        class _RecordingFetcher(StubFetcher):
            async def fetch(self, url: str) -> Any:
                in_flight.append(job.current_url)
                return await super().fetch(url)

        fetcher = _RecordingFetcher({url: profile_html() for url in urls})
        await _controller(fetcher, profiles, keyword_summarizer, fake_sleep).run(job)

        assert in_flight == list(urls)
        assert job.current_url is None

    async def test_invalid_url_recorded_without_fetch(
        self, profiles: ProfileRepository, keyword_summarizer: Summarizer, fake_sleep: Any
    ) -> None:
        bad = "https://evil.example.com/in/x/"
        good = _url("ok")
        fetcher = StubFetcher({good: profile_html()})
        job = Job(urls=(bad, good))

        await _controller(fetcher, profiles, keyword_summarizer, fake_sleep).run(job)

        assert fetcher.fetched == [good]
        assert job.failures[0].url == bad
        assert job.failures[0].reason == "invalid_url"
        assert job.success_count == 1

    async def test_custom_validator(
        self, profiles: ProfileRepository, keyword_summarizer: Summarizer, fake_sleep: Any
    ) -> None:
        url = "https://source.example/in/janedoe/"
        job = Job(urls=(url,))
        controller = _controller(
            StubFetcher({url: profile_html()}),
            profiles,
            keyword_summarizer,
            fake_sleep,
            url_validator=make_validator("source.example", "/in/"),
        )

        await controller.run(job)

        assert job.success_count == 1


@pytest.mark.asyncio
class TestJobControllerTransitions:
    async def test_start_sets_running(
        self, profiles: ProfileRepository, keyword_summarizer: Summarizer, fake_sleep: Any
    ) -> None:
        job = Job(urls=(_url("a"),))
        _controller(StubFetcher({}), profiles, keyword_summarizer, fake_sleep).start(job)

        assert job.status is JobStatus.RUNNING
        assert job.started_at is not None

    @pytest.mark.parametrize("state", [JobStatus.RUNNING, JobStatus.COMPLETED, JobStatus.FAILED])
    async def test_start_rejected_unless_pending(
        self,
        state: JobStatus,
        profiles: ProfileRepository,
        keyword_summarizer: Summarizer,
        fake_sleep: Any,
    ) -> None:
        job = Job(urls=(_url("a"),), status=state)
        controller = _controller(StubFetcher({}), profiles, keyword_summarizer, fake_sleep)

        with pytest.raises(JobStateError):
            controller.start(job)
        assert job.status is state

    async def test_unexpected_error_fails_job_and_keeps_results(
        self, profiles: ProfileRepository, keyword_summarizer: Summarizer, fake_sleep: Any
    ) -> None:
        urls = (_url("a"), _url("b"), _url("c"))
        fetcher = StubFetcher({url: profile_html(name=url) for url in urls})

        def _extractor(html: str) -> PartialProfile:
            if urls[1] in html:
                raise RuntimeError("parser exploded")
            return PartialProfile(name="ok")

        job = Job(urls=urls)
        controller = _controller(fetcher, profiles, keyword_summarizer, fake_sleep, extractor=_extractor)

        await controller.run(job)

        assert job.status is JobStatus.FAILED
        assert job.current_url is None
        assert job.completed_at is not None
        assert urls[1] in (job.error_message or "")
        assert "parser exploded" in (job.error_message or "")
        assert len(job.results) == 1
        assert job.processed_count == 1
        assert fetcher.fetched == [urls[0], urls[1]]

    async def test_terminal_job_cannot_rerun(
        self, profiles: ProfileRepository, keyword_summarizer: Summarizer, fake_sleep: Any
    ) -> None:
        url = _url("a")
        controller = _controller(StubFetcher({url: profile_html()}), profiles, keyword_summarizer, fake_sleep)
        job = Job(urls=(url,))
        await controller.run(job)

        with pytest.raises(JobStateError):
            await controller.run(job)
        assert job.processed_count == 1
