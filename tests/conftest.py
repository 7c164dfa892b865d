"""Shared pytest fixtures for Alumni Profiler tests.

Fixture summary
---------------
profiles           — empty ProfileRepository.
jobs               — empty JobRepository.
sleeps             — list collecting every pacing delay the controller awaited.
fake_sleep         — awaitable recording into ``sleeps`` without waiting.
keyword_summarizer — Summarizer whose primary backend is the keyword one.

Test doubles live in ``tests/factories/doubles.py``.  No test needs a
browser, a network connection or an API key.
"""

from __future__ import annotations

import os
from typing import Any

import pytest

# ---------------------------------------------------------------------------
# Test environment bootstrap
# ---------------------------------------------------------------------------
# Set before any application module reads Settings() so that a developer's
# real key never selects the generative backend during tests.

os.environ["GEMINI_API_KEY"] = ""
os.environ["LOG_LEVEL"] = "INFO"

from alumni_profiler.config.settings import get_settings  # noqa: E402
from alumni_profiler.core.repository import JobRepository, ProfileRepository  # noqa: E402
from alumni_profiler.scraper.summarizer import KeywordSummaryBackend, Summarizer  # noqa: E402

get_settings.cache_clear()


@pytest.fixture
def profiles() -> ProfileRepository:
    return ProfileRepository()


@pytest.fixture
def jobs() -> JobRepository:
    return JobRepository()


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest.fixture
def fake_sleep(sleeps: list[float]) -> Any:
    async def _sleep(seconds: float) -> None:
        sleeps.append(seconds)

    return _sleep


@pytest.fixture
def keyword_summarizer() -> Summarizer:
    return Summarizer(KeywordSummaryBackend())
