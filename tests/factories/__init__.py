"""Factory Boy factories and test doubles for the ingestion pipeline.

Available factories
-------------------
PastRoleFactory       — PastRole dataclass
ProfileRecordFactory  — successful ProfileRecord dataclass
JobFactory            — pending Job with valid profile URLs

Helpers
-------
profile_html          — rendered profile markup in the current layout
legacy_profile_html   — rendered profile markup in the legacy layout

Test doubles (FakeSession, StubFetcher, StubBackend) live in ``doubles``.
"""

from __future__ import annotations

from tests.factories.profiles import (
    JobFactory,
    PastRoleFactory,
    ProfileRecordFactory,
    legacy_profile_html,
    profile_html,
)

__all__ = [
    "JobFactory",
    "PastRoleFactory",
    "ProfileRecordFactory",
    "legacy_profile_html",
    "profile_html",
]
