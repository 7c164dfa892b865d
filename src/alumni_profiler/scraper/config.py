"""Constants and tuning parameters for the profile ingestion pipeline.

Deployment-specific values (hosts, timeouts, pacing, API keys) live in
:mod:`alumni_profiler.config.settings`; the defaults below are what those
settings fall back to, plus the fixed heuristics that are not meant to be
tuned per deployment.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Source profiles
# ---------------------------------------------------------------------------

#: Hostname profile URLs must carry exactly.
DEFAULT_PROFILE_HOST: str = "www.linkedin.com"

#: Path prefix of a profile page.
DEFAULT_PROFILE_PATH_PREFIX: str = "/in/"

#: CSV column names that may hold the profile URL, checked in this order.
URL_COLUMN_CANDIDATES: tuple[str, ...] = (
    "linkedin_url",
    "linkedinUrl",
    "url",
    "URL",
    "LinkedIn",
)

# ---------------------------------------------------------------------------
# Fetch timing
# ---------------------------------------------------------------------------

#: Navigation / network-idle bound in seconds.
DEFAULT_TIMEOUT: float = 30.0

#: Wait after network idle for late client-side rendering (seconds).
DEFAULT_SETTLE_DELAY: float = 2.0

#: Pause between two profiles of the same job (seconds).
DEFAULT_INTER_ITEM_DELAY: float = 2.0

# ---------------------------------------------------------------------------
# Browser
# ---------------------------------------------------------------------------

#: Desktop Chrome user agent; the source serves a reduced page to unknown agents.
USER_AGENT: str = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/122.0.0.0 Safari/537.36"
)

VIEWPORT: dict[str, int] = {"width": 1920, "height": 1080}

#: Playwright resource types aborted before download.
BLOCKED_RESOURCE_TYPES: frozenset[str] = frozenset(
    {"image", "stylesheet", "font", "media"}
)

#: Chromium flags for containerised runs.
CHROMIUM_ARGS: tuple[str, ...] = (
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
)

#: CSS selectors whose presence marks a rendered page as a login wall.
AUTH_WALL_SELECTORS: tuple[str, ...] = (
    'form[action*="login"]',
    "form.login__form",
    'input[name="session_key"]',
    ".authwall-join-form",
)

# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------

#: Education / past-role entries with less text than this are layout noise.
MIN_ENTRY_LENGTH: int = 3

#: Literal separating title from company in a headline.
HEADLINE_SEPARATOR: str = " at "

# ---------------------------------------------------------------------------
# Summaries
# ---------------------------------------------------------------------------

#: Hard upper bound on summary length, ellipsis included.
MAX_SUMMARY_CHARS: int = 150

#: About texts shorter than this are not worth summarising.
MIN_ABOUT_LENGTH: int = 10

#: Returned when there is nothing to summarise.
GENERIC_SUMMARY: str = "Professional with experience in their field."

#: Vocabulary scanned by the offline keyword summarizer, in priority order.
SUMMARY_KEYWORDS: tuple[str, ...] = (
    "management",
    "leadership",
    "strategy",
    "innovation",
    "technology",
    "business development",
    "operations",
    "marketing",
    "finance",
    "fintech",
    "consulting",
    "product management",
    "project management",
    "team building",
    "analytics",
)

#: Used by the keyword summarizer when no vocabulary term matches.
DEFAULT_SUMMARY_TERMS: tuple[str, ...] = ("business", "professional development")

#: At most this many matched terms appear in a keyword summary.
MAX_SUMMARY_TERMS: int = 3
