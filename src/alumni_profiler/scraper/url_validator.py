"""Profile URL shape validation.

Pure functions, no I/O.  Used when a job is created (to drop unusable
entries before they are counted) and again by the controller right before
each fetch.
"""

from __future__ import annotations

from functools import partial
from typing import Callable, Iterable
from urllib.parse import urlsplit

from alumni_profiler.scraper.config import DEFAULT_PROFILE_HOST, DEFAULT_PROFILE_PATH_PREFIX

UrlValidator = Callable[[str], bool]

_ALLOWED_SCHEMES: frozenset[str] = frozenset({"http", "https"})


def is_valid_profile_url(
    url: str,
    *,
    host: str = DEFAULT_PROFILE_HOST,
    path_prefix: str = DEFAULT_PROFILE_PATH_PREFIX,
) -> bool:
    """Return ``True`` if ``url`` looks like a profile page on ``host``.

    The hostname must equal ``host`` exactly (no subdomain or look-alike
    matching) and the path must start with ``path_prefix`` followed by at
    least one non-slash character, so ``https://www.linkedin.com/in/`` is
    rejected while ``https://www.linkedin.com/in/janedoe/`` is accepted.

    Args:
        url: Candidate URL.
        host: Expected hostname.
        path_prefix: Expected path prefix, e.g. ``"/in/"``.

    Returns:
        ``True`` if the URL passes every check.
    """
    if not isinstance(url, str) or not url.strip():
        return False
    try:
        parts = urlsplit(url.strip())
        hostname = parts.hostname
    except ValueError:
        return False

    if parts.scheme.lower() not in _ALLOWED_SCHEMES:
        return False
    if hostname is None or hostname != host.lower():
        return False
    if not parts.path.startswith(path_prefix):
        return False
    return bool(parts.path[len(path_prefix):].strip("/"))


def make_validator(host: str, path_prefix: str) -> UrlValidator:
    """Bind ``host`` and ``path_prefix`` into a single-argument validator."""
    return partial(is_valid_profile_url, host=host, path_prefix=path_prefix)


def filter_profile_urls(
    urls: Iterable[str | None],
    validator: UrlValidator = is_valid_profile_url,
) -> list[str]:
    """Strip and keep the valid URLs, preserving input order.

    Duplicates are kept: every occurrence is one unit of work.
    """
    kept: list[str] = []
    for raw in urls:
        if raw is None:
            continue
        candidate = str(raw).strip()
        if candidate and validator(candidate):
            kept.append(candidate)
    return kept
