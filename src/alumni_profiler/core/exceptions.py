"""Application-wide exception hierarchy for Alumni Profiler.

All custom exceptions subclass ``AlumniProfilerError``, enabling
consistent error handling and structured logging across the application.

Hierarchy::

    AlumniProfilerError
    ├── IngestionError
    │   └── NoValidUrlsError
    ├── JobNotFoundError
    ├── JobStateError
    ├── ProfileNotFoundError
    ├── FetchError                    (reason: str)
    │   ├── FetchTimeoutError
    │   ├── AccessDeniedError
    │   └── NetworkFetchError
    └── SummaryBackendError
        ├── SummaryBackendAuthError
        └── SummaryBackendRateLimitError  (retry_after: float)
"""

from __future__ import annotations


class AlumniProfilerError(Exception):
    """Base class for all Alumni Profiler exceptions.

    All application-specific exceptions inherit from this class so that
    callers can catch the entire hierarchy with a single ``except`` clause
    when needed.
    """


# ---------------------------------------------------------------------------
# Ingestion exceptions
# ---------------------------------------------------------------------------


class IngestionError(AlumniProfilerError):
    """Raised when submitted input cannot be turned into a job."""


class NoValidUrlsError(IngestionError):
    """Raised when no profile URL survives validation.

    Args:
        submitted: Number of candidate URLs that were submitted.
    """

    def __init__(self, submitted: int = 0) -> None:
        super().__init__(
            f"No valid profile URLs found ({submitted} candidate(s) submitted)"
        )
        self.submitted = submitted


# ---------------------------------------------------------------------------
# Job exceptions
# ---------------------------------------------------------------------------


class JobNotFoundError(AlumniProfilerError):
    """Raised when a job id is not present in the job repository."""

    def __init__(self, job_id: str) -> None:
        super().__init__(f"Job '{job_id}' not found")
        self.job_id = job_id


class JobStateError(AlumniProfilerError):
    """Raised when a command is not allowed in the job's current state.

    Args:
        job_id: Identifier of the job.
        status: The job's current status value.
        message: Human-readable explanation.
    """

    def __init__(self, job_id: str, status: str, message: str) -> None:
        super().__init__(message)
        self.job_id = job_id
        self.status = status


class ProfileNotFoundError(AlumniProfilerError):
    """Raised when a profile id is not present in the profile repository."""

    def __init__(self, profile_id: str) -> None:
        super().__init__(f"Profile '{profile_id}' not found")
        self.profile_id = profile_id


# ---------------------------------------------------------------------------
# Fetch exceptions
# ---------------------------------------------------------------------------


class FetchError(AlumniProfilerError):
    """Raised by a rendering session when a page cannot be retrieved.

    The fetcher converts these into a ``FetchFailure`` value carrying
    ``reason``; they never abort a job.

    Args:
        message: Human-readable description of the failure.
        url: The URL being fetched.
    """

    reason: str = "unknown"

    def __init__(self, message: str, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


class FetchTimeoutError(FetchError):
    """Navigation or the page stability wait exceeded its bound."""

    reason = "timeout"


class AccessDeniedError(FetchError):
    """The rendered page is an authentication wall instead of a profile.

    Raised by :class:`~alumni_profiler.scraper.playwright_fetcher.ProfileFetcher`
    after reading the markup, or by a rendering session that detects the wall
    itself.
    """

    reason = "access_denied"


class NetworkFetchError(FetchError):
    """Transport-level failure (DNS, connection reset, TLS, ...)."""

    reason = "network_error"


# ---------------------------------------------------------------------------
# Summary backend exceptions
# ---------------------------------------------------------------------------


class SummaryBackendError(AlumniProfilerError):
    """Raised when the generative summary backend fails.

    Always absorbed by the summarizer's keyword fallback.

    Args:
        message: Human-readable description of the failure.
        backend: Name of the backend that failed (e.g. ``"gemini"``).
    """

    def __init__(self, message: str, backend: str | None = None) -> None:
        super().__init__(message)
        self.backend = backend


class SummaryBackendAuthError(SummaryBackendError):
    """The backend rejected the configured API key (HTTP 401/403)."""


class SummaryBackendRateLimitError(SummaryBackendError):
    """The backend returned HTTP 429.

    Args:
        message: Human-readable description of the rate limit.
        retry_after: Seconds the backend asked us to wait. Defaults to 60.
        backend: Name of the backend.
    """

    def __init__(
        self,
        message: str,
        retry_after: float = 60.0,
        backend: str | None = None,
    ) -> None:
        super().__init__(message, backend=backend)
        self.retry_after = retry_after
