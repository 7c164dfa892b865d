"""Two-tier profile summarisation.

Primary tier: a generative backend (Gemini) compresses the profile's
"about" text into a one or two sentence synopsis.  Secondary tier: an
offline keyword template that never raises and never touches the network.

Which backend is primary is decided once, at startup, by
:func:`build_summarizer`; the pipeline only ever calls
:meth:`Summarizer.summarize`.  Any primary failure (HTTP error, timeout,
empty answer) degrades to the keyword tier, so summarisation can lower the
quality of a record but never fail it.

Every summary is bounded to ``MAX_SUMMARY_CHARS`` characters.
"""

from __future__ import annotations

import logging
from typing import Protocol

import httpx

from alumni_profiler.config.settings import Settings
from alumni_profiler.core.exceptions import SummaryBackendError
from alumni_profiler.scraper import _gemini
from alumni_profiler.scraper.config import (
    DEFAULT_SUMMARY_TERMS,
    GENERIC_SUMMARY,
    MAX_SUMMARY_CHARS,
    MAX_SUMMARY_TERMS,
    MIN_ABOUT_LENGTH,
    SUMMARY_KEYWORDS,
)

logger = logging.getLogger(__name__)

ELLIPSIS = "..."

SUMMARY_PROMPT = (
    "Summarize the following professional profile 'About' section into 1-2 "
    "concise sentences that highlight the person's key expertise and career "
    "focus. Keep it professional and under {max_chars} characters. Reply with "
    "the summary only.\n\n\"{about}\""
)


class SummaryBackend(Protocol):
    """Anything that can turn about-text into a synopsis."""

    name: str

    async def summarize(self, about_text: str) -> str: ...


def truncate_summary(text: str, max_chars: int = MAX_SUMMARY_CHARS) -> str:
    """Bound ``text`` to ``max_chars``: longer text keeps ``max_chars - 3`` characters plus ``"..."``."""
    text = text.strip()
    if len(text) <= max_chars:
        return text
    return text[: max_chars - len(ELLIPSIS)] + ELLIPSIS


def _join_terms(terms: list[str]) -> str:
    if len(terms) == 1:
        return terms[0]
    return ", ".join(terms[:-1]) + " and " + terms[-1]


def keyword_summary(about_text: str) -> str:
    """Deterministic template summary built from known domain keywords.

    Scans ``about_text`` for :data:`SUMMARY_KEYWORDS` (case-insensitive) and
    names the first few matches, in vocabulary order.
    """
    lowered = about_text.lower()
    found = [keyword for keyword in SUMMARY_KEYWORDS if keyword in lowered]
    terms = found[:MAX_SUMMARY_TERMS] or list(DEFAULT_SUMMARY_TERMS)
    return f"Experienced professional with expertise in {_join_terms(terms)}."


class KeywordSummaryBackend:
    """Offline backend; the fallback tier and the primary when no key is configured."""

    name = "keyword"

    async def summarize(self, about_text: str) -> str:
        return keyword_summary(about_text)


class GeminiSummaryBackend:
    """Generative backend calling the Gemini ``generateContent`` endpoint."""

    name = "gemini"

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        api_key: str,
        model: str,
        api_base: str = _gemini.GEMINI_API_BASE,
        timeout: float = 20.0,
        max_chars: int = MAX_SUMMARY_CHARS,
    ) -> None:
        self._client = client
        self._api_key = api_key
        self._model = model
        self._api_base = api_base
        self._timeout = timeout
        self._max_chars = max_chars

    async def summarize(self, about_text: str) -> str:
        """Return the model's synopsis.

        Raises:
            SummaryBackendError: On any HTTP failure or an empty answer.
        """
        prompt = SUMMARY_PROMPT.format(max_chars=self._max_chars, about=about_text)
        response = await _gemini.generate_content(
            self._client,
            model=self._model,
            prompt=prompt,
            api_key=self._api_key,
            api_base=self._api_base,
            timeout=self._timeout,
        )
        text = _gemini.extract_text(response)
        if not text:
            raise SummaryBackendError("gemini: response contained no text", backend=self.name)
        return text


class Summarizer:
    """Front door used by the job controller.

    Args:
        backend: Primary backend.
        fallback: Backend used when the primary raises or answers with
            nothing.  Must not raise.
        max_chars: Summary length bound.
    """

    def __init__(
        self,
        backend: SummaryBackend,
        *,
        fallback: SummaryBackend | None = None,
        max_chars: int = MAX_SUMMARY_CHARS,
    ) -> None:
        self._backend = backend
        self._fallback = fallback or KeywordSummaryBackend()
        self._max_chars = max_chars

    @property
    def backend_name(self) -> str:
        return self._backend.name

    async def summarize(self, about_text: str) -> str:
        """Summarise ``about_text`` into at most ``max_chars`` characters.

        Returns :data:`GENERIC_SUMMARY` for empty or very short input without
        calling any backend.
        """
        text = (about_text or "").strip()
        if len(text) < MIN_ABOUT_LENGTH:
            return GENERIC_SUMMARY

        try:
            summary = await self._backend.summarize(text)
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "scraper: %s summary failed, using %s fallback: %s",
                self._backend.name,
                self._fallback.name,
                exc,
            )
            summary = await self._fallback.summarize(text)

        if not isinstance(summary, str) or not summary.strip():
            logger.warning(
                "scraper: %s summary returned no text, using %s fallback",
                self._backend.name,
                self._fallback.name,
            )
            summary = await self._fallback.summarize(text)
        return truncate_summary(summary, self._max_chars)


def build_summarizer(settings: Settings, client: httpx.AsyncClient) -> Summarizer:
    """Select the primary backend from configuration, once.

    Gemini is used when ``GEMINI_API_KEY`` holds a real key; otherwise the
    keyword backend serves as primary as well as fallback.
    """
    if settings.generative_backend_configured:
        backend: SummaryBackend = GeminiSummaryBackend(
            client,
            api_key=(settings.gemini_api_key or "").strip(),
            model=settings.gemini_model,
            api_base=settings.gemini_api_base,
            timeout=settings.summary_timeout_seconds,
        )
    else:
        backend = KeywordSummaryBackend()
    logger.info("scraper: summary backend selected: %s", backend.name)
    return Summarizer(backend, fallback=KeywordSummaryBackend())
