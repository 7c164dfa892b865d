"""Low-level Gemini (Generative Language API) HTTP client.

This module is private to the ``scraper`` package (indicated by the leading
underscore).  External code should go through
:class:`~alumni_profiler.scraper.summarizer.GeminiSummaryBackend` instead.

Responsibilities:
- ``generate_content()``: POST a single-turn prompt to the
  ``models/{model}:generateContent`` endpoint and return the raw JSON dict.
- ``extract_text()``: pull the first candidate's text out of that dict.

Error handling maps HTTP status codes to typed exceptions:
- HTTP 429 -> :class:`~alumni_profiler.core.exceptions.SummaryBackendRateLimitError`
- HTTP 401/403 -> :class:`~alumni_profiler.core.exceptions.SummaryBackendAuthError`
- Other non-2xx -> :class:`~alumni_profiler.core.exceptions.SummaryBackendError`
- Network errors and unparseable bodies -> :class:`~alumni_profiler.core.exceptions.SummaryBackendError`
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from alumni_profiler.core.exceptions import (
    SummaryBackendAuthError,
    SummaryBackendError,
    SummaryBackendRateLimitError,
)

logger = logging.getLogger(__name__)

GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta"

_BACKEND = "gemini"


async def generate_content(
    client: httpx.AsyncClient,
    *,
    model: str,
    prompt: str,
    api_key: str,
    api_base: str = GEMINI_API_BASE,
    timeout: float = 20.0,
    max_output_tokens: int = 120,
) -> dict[str, Any]:
    """Call ``generateContent`` and return the parsed JSON response.

    Temperature is kept low so repeated runs over the same profile produce
    near-identical summaries.

    Args:
        client: Shared :class:`httpx.AsyncClient` instance.
        model: Model identifier (e.g. ``"gemini-1.5-flash"``).
        prompt: Complete prompt text.
        api_key: Generative Language API key, sent as ``x-goog-api-key``.
        api_base: API base URL without trailing slash.
        timeout: Request timeout in seconds.
        max_output_tokens: Generation cap.

    Returns:
        Parsed JSON response dict.

    Raises:
        SummaryBackendRateLimitError: On HTTP 429.
        SummaryBackendAuthError: On HTTP 401 or 403.
        SummaryBackendError: On other non-2xx responses, network errors or
            an unparseable body.
    """
    url = f"{api_base.rstrip('/')}/models/{model}:generateContent"
    payload: dict[str, Any] = {
        "contents": [{"role": "user", "parts": [{"text": prompt}]}],
        "generationConfig": {
            "temperature": 0.2,
            "maxOutputTokens": max_output_tokens,
        },
    }
    headers: dict[str, str] = {
        "x-goog-api-key": api_key,
        "Content-Type": "application/json",
    }

    try:
        response = await client.post(url, json=payload, headers=headers, timeout=timeout)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        code = exc.response.status_code
        if code == 429:
            retry_after = float(exc.response.headers.get("Retry-After", 60))
            raise SummaryBackendRateLimitError(
                "gemini: HTTP 429 — rate limited",
                retry_after=retry_after,
                backend=_BACKEND,
            ) from exc
        if code in (401, 403):
            raise SummaryBackendAuthError(
                f"gemini: HTTP {code} — invalid or unauthorised API key",
                backend=_BACKEND,
            ) from exc
        raise SummaryBackendError(
            f"gemini: HTTP {code} — {exc.response.text[:200]}",
            backend=_BACKEND,
        ) from exc
    except httpx.RequestError as exc:
        raise SummaryBackendError(
            f"gemini: network error — {exc}",
            backend=_BACKEND,
        ) from exc

    try:
        return response.json()  # type: ignore[no-any-return]
    except ValueError as exc:
        raise SummaryBackendError(
            f"gemini: JSON parse error — {exc}",
            backend=_BACKEND,
        ) from exc


def extract_text(response: dict[str, Any]) -> str:
    """Return the concatenated text parts of the first candidate.

    A blocked prompt comes back with no ``candidates`` (only
    ``promptFeedback``); that and any other unexpected shape yield ``""``.

    Args:
        response: Parsed JSON response dict from ``generateContent``.

    Returns:
        Stripped candidate text, or ``""``.
    """
    candidates = response.get("candidates") if isinstance(response, dict) else None
    if not candidates or not isinstance(candidates, list):
        return ""
    first = candidates[0] if isinstance(candidates[0], dict) else {}
    parts = (first.get("content") or {}).get("parts") or []
    texts = [
        part["text"]
        for part in parts
        if isinstance(part, dict) and isinstance(part.get("text"), str)
    ]
    return "".join(texts).strip()
