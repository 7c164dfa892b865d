"""Per-job state machine driving fetch, extract and summarize.

A :class:`JobController` owns no state of its own: it mutates the
:class:`~alumni_profiler.core.models.jobs.Job` it is given and appends
produced records to the profile repository.  URLs are processed strictly in
input order, one at a time, with the pacing policy's delay between items.

State transitions::

    pending --start()--> running --process()--> completed
                                      |
                                      +-- unexpected exception --> failed

Per-item failures (invalid URL, fetch failure) are recorded on the job and
never abort it.  Only an exception escaping that handling moves the job to
``failed``; records collected before the fault are kept.
"""

from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Awaitable, Callable

import structlog

from alumni_profiler.core.exceptions import FetchError, JobStateError
from alumni_profiler.core.logging_config import job_log_context
from alumni_profiler.core.models.jobs import FailedItem, Job, JobStatus
from alumni_profiler.core.models.profiles import ProfileRecord, ProfileStatus
from alumni_profiler.core.repository import ProfileRepository
from alumni_profiler.scraper.config import DEFAULT_INTER_ITEM_DELAY
from alumni_profiler.scraper.playwright_fetcher import FetchFailure, ProfileFetcher
from alumni_profiler.scraper.profile_extractor import PartialProfile, extract_profile
from alumni_profiler.scraper.summarizer import Summarizer
from alumni_profiler.scraper.url_validator import UrlValidator, is_valid_profile_url

logger = structlog.get_logger(__name__)

Extractor = Callable[[str], PartialProfile]
Sleep = Callable[[float], Awaitable[None]]

INVALID_URL_REASON = "invalid_url"


@dataclass(frozen=True)
class PacingPolicy:
    """Delay inserted between two consecutive items of a job.

    Attributes:
        delay_seconds: Fixed pause.
        jitter_seconds: Upper bound of a uniform random extra pause.
    """

    delay_seconds: float = DEFAULT_INTER_ITEM_DELAY
    jitter_seconds: float = 0.0

    def next_delay(self) -> float:
        if self.jitter_seconds <= 0:
            return self.delay_seconds
        return self.delay_seconds + random.uniform(0, self.jitter_seconds)


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


def build_record(url: str, partial: PartialProfile, summary: str) -> ProfileRecord:
    """Assemble a successful record from extracted fields and a summary.

    When the headline carries no company, the first past role's company is
    used instead.
    """
    company = partial.company
    if not company and partial.past_roles:
        company = partial.past_roles[0].company
    return ProfileRecord(
        source_url=url,
        status=ProfileStatus.SUCCESS,
        name=partial.name,
        title=partial.title,
        company=company,
        location=partial.location,
        education=partial.education,
        past_roles=partial.past_roles,
        summary=summary,
    )


class JobController:
    """Runs jobs through the fetch, extract and summarize pipeline.

    Args:
        fetcher: Shared profile fetcher.
        summarizer: Summarizer with its fallback already wired.
        profiles: Repository every produced record is indexed in.
        pacing: Inter-item delay policy.
        url_validator: Pre-fetch URL check.
        extractor: Markup to :class:`PartialProfile` function.
        sleep: Awaitable used for pacing; replaced in tests.
    """

    def __init__(
        self,
        fetcher: ProfileFetcher,
        summarizer: Summarizer,
        profiles: ProfileRepository,
        *,
        pacing: PacingPolicy | None = None,
        url_validator: UrlValidator = is_valid_profile_url,
        extractor: Extractor = extract_profile,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._fetcher = fetcher
        self._summarizer = summarizer
        self._profiles = profiles
        self._pacing = pacing or PacingPolicy()
        self._is_valid = url_validator
        self._extract = extractor
        self._sleep = sleep

    def start(self, job: Job) -> None:
        """Transition ``job`` from pending to running.

        Raises:
            JobStateError: If the job is not pending.
        """
        if job.status is not JobStatus.PENDING:
            raise JobStateError(
                job.id,
                job.status.value,
                f"Job '{job.id}' is {job.status.value}; only pending jobs can be run",
            )
        job.status = JobStatus.RUNNING
        job.started_at = _utcnow()

    async def process(self, job: Job) -> Job:
        """Process every URL of a running job and move it to a terminal state.

        ``job_id`` is bound into the logging context for the whole run, so
        records from the fetcher and summarizer carry it too.
        """
        with job_log_context(job.id):
            logger.info("profile_job_started", total=job.total_count)
            try:
                for index, url in enumerate(job.urls):
                    if index > 0:
                        await self._sleep(self._pacing.next_delay())
                    job.current_url = url
                    await self._process_item(job, url)
                    job.current_url = None
            except Exception as exc:  # noqa: BLE001
                in_flight = job.current_url
                job.status = JobStatus.FAILED
                job.error_message = f"Job aborted while processing {in_flight}: {exc}"
                job.current_url = None
                job.completed_at = _utcnow()
                logger.exception(
                    "profile_job_failed", url=in_flight, processed=job.processed_count
                )
                return job

            job.status = JobStatus.COMPLETED
            job.current_url = None
            job.completed_at = _utcnow()
            logger.info(
                "profile_job_completed",
                total=job.total_count,
                succeeded=job.success_count,
                failed=job.failure_count,
            )
            return job

    async def run(self, job: Job) -> Job:
        self.start(job)
        return await self.process(job)

    async def _process_item(self, job: Job, url: str) -> None:
        if not self._is_valid(url):
            self._record_failure(
                job, FailedItem(url, "URL is not a valid profile URL", INVALID_URL_REASON)
            )
            return

        try:
            result = await self._fetcher.fetch(url)
        except FetchError as exc:
            self._record_failure(job, FailedItem(url, str(exc), exc.reason))
            return
        if isinstance(result, FetchFailure):
            self._record_failure(job, FailedItem(url, result.message, result.reason.value))
            return

        partial = self._extract(result.html)
        logger.debug(
            "profile_extracted",
            url=url,
            about=partial.about,
            roles=len(partial.past_roles),
            education=len(partial.education),
        )
        summary = await self._summarizer.summarize(partial.about)
        record = build_record(url, partial, summary)

        self._profiles.add(record)
        job.results.append(record)
        job.success_count += 1
        job.processed_count += 1
        logger.info("profile_processed", url=url, profile_id=record.id)

    @staticmethod
    def _record_failure(job: Job, item: FailedItem) -> None:
        job.failures.append(item)
        job.failure_count += 1
        job.processed_count += 1
        logger.warning(
            "profile_failed",
            url=item.url,
            reason=item.reason,
            error=item.error,
        )
