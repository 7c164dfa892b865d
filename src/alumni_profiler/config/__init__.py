"""Configuration package for Alumni Profiler.

Re-exports the settings symbols so that callers can write::

    from alumni_profiler.config import get_settings
"""

from __future__ import annotations

from alumni_profiler.config.settings import GEMINI_KEY_PLACEHOLDER, Settings, get_settings

__all__ = [
    "GEMINI_KEY_PLACEHOLDER",
    "Settings",
    "get_settings",
]
