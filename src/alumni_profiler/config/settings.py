"""Application settings loaded from environment variables.

Uses Pydantic Settings v2 for validated, type-safe configuration.
All credentials and secrets are accessed exclusively through this module —
never call ``os.getenv`` directly elsewhere in the codebase.

Usage::

    from alumni_profiler.config.settings import get_settings

    settings = get_settings()
    delay = settings.inter_item_delay_seconds
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

#: Value shipped in the example ``.env`` file.  Treated as "not configured".
GEMINI_KEY_PLACEHOLDER = "your_gemini_api_key_here"


class Settings(BaseSettings):
    """Application-wide configuration backed by environment variables and an optional .env file.

    Every field has a default so the service starts without any configuration;
    the generative summary backend is simply disabled until ``GEMINI_API_KEY``
    is provided.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Application behaviour
    # ------------------------------------------------------------------

    app_name: str = "Alumni Profiler"
    """Human-readable application name shown in the OpenAPI docs."""

    debug: bool = False
    """Enable FastAPI debug mode and verbose error responses.  Never True in production."""

    log_level: str = "INFO"
    """Logging verbosity.  One of: DEBUG, INFO, WARNING, ERROR, CRITICAL."""

    allowed_origins: list[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]
    """Origins permitted by the CORS middleware (the dashboard dev server by default)."""

    # ------------------------------------------------------------------
    # Profile source
    # ------------------------------------------------------------------

    profile_host: str = "www.linkedin.com"
    """Exact hostname a profile URL must carry to be accepted."""

    profile_path_prefix: str = "/in/"
    """Path prefix identifying a profile page on ``profile_host``."""

    # ------------------------------------------------------------------
    # Browser / fetch
    # ------------------------------------------------------------------

    fetch_timeout_seconds: float = Field(default=30.0, gt=0)
    """Upper bound for page navigation and for the network-idle wait."""

    settle_delay_seconds: float = Field(default=2.0, ge=0)
    """Extra wait after network idle so late client-side rendering can finish."""

    browser_headless: bool = True
    """Run Chromium headless.  Set to False only when debugging locally."""

    # ------------------------------------------------------------------
    # Pacing
    # ------------------------------------------------------------------

    inter_item_delay_seconds: float = Field(default=2.0, ge=0)
    """Pause between two consecutive profiles of the same job."""

    inter_item_jitter_seconds: float = Field(default=0.0, ge=0)
    """Random extra pause (0..jitter) added to ``inter_item_delay_seconds``."""

    # ------------------------------------------------------------------
    # Generative summary backend
    # ------------------------------------------------------------------

    gemini_api_key: Optional[str] = None
    """Google Generative Language API key.  When unset, summaries are produced
    by the offline keyword backend."""

    gemini_model: str = "gemini-1.5-flash"
    """Model identifier passed to the ``generateContent`` endpoint."""

    gemini_api_base: str = "https://generativelanguage.googleapis.com/v1beta"
    """Base URL of the Generative Language REST API."""

    summary_timeout_seconds: float = Field(default=20.0, gt=0)
    """HTTP timeout for one summary request."""

    @property
    def generative_backend_configured(self) -> bool:
        """``True`` when a usable Gemini API key is present."""
        key = (self.gemini_api_key or "").strip()
        return bool(key) and key != GEMINI_KEY_PLACEHOLDER


@lru_cache
def get_settings() -> Settings:
    """Return the cached application settings singleton.

    Uses ``functools.lru_cache`` so that Pydantic Settings reads the environment
    and .env file exactly once per process lifetime.  In tests, call
    ``get_settings.cache_clear()`` after patching environment variables.

    Returns:
        Settings: The validated settings object.
    """
    return Settings()
