"""Headless-browser profile fetcher.

Profile pages are rendered client-side, so the fetcher drives a real
Chromium instance through Playwright.  The browser mechanics sit behind the
:class:`RenderingSession` protocol; :class:`ProfileFetcher` only sequences
the protocol calls, classifies failures and checks the rendered markup for
a login wall.

Install Playwright and download the Chromium browser binary::

    pip install playwright>=1.48
    playwright install chromium
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Protocol, Sequence

from bs4 import BeautifulSoup
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from alumni_profiler.core.exceptions import (
    AccessDeniedError,
    FetchError,
    FetchTimeoutError,
    NetworkFetchError,
)
from alumni_profiler.scraper.config import (
    AUTH_WALL_SELECTORS,
    BLOCKED_RESOURCE_TYPES,
    CHROMIUM_ARGS,
    DEFAULT_SETTLE_DELAY,
    DEFAULT_TIMEOUT,
    USER_AGENT,
    VIEWPORT,
)

logger = logging.getLogger(__name__)


class FetchFailureReason(str, Enum):
    TIMEOUT = "timeout"
    ACCESS_DENIED = "access_denied"
    NETWORK_ERROR = "network_error"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class RawPage:
    """Rendered markup of one profile page, opaque to the fetcher."""

    url: str
    html: str


@dataclass(frozen=True)
class FetchFailure:
    """Typed outcome of a fetch that produced no usable page."""

    url: str
    reason: FetchFailureReason
    message: str


FetchResult = RawPage | FetchFailure


class RenderingSession(Protocol):
    """Capability the fetcher needs from a headless renderer."""

    async def navigate(self, url: str, *, timeout: float) -> None: ...

    async def wait_for_stable(self) -> None: ...

    async def read_full_markup(self) -> str: ...

    async def close(self) -> None: ...


SessionFactory = Callable[[], Awaitable[RenderingSession]]


# ---------------------------------------------------------------------------
# Playwright implementation
# ---------------------------------------------------------------------------


def _translate_playwright_error(exc: Exception, url: str) -> FetchError:
    """Map a Playwright exception onto the fetch error taxonomy."""
    if isinstance(exc, PlaywrightTimeoutError):
        return FetchTimeoutError(f"navigation timed out: {exc}", url=url)
    if "net::ERR" in str(exc):
        return NetworkFetchError(f"network error: {exc}", url=url)
    return FetchError(f"playwright error: {exc}", url=url)


class PlaywrightSession:
    """One Chromium browser, context and page, closed together.

    Use :meth:`launch` to build one; ``close()`` must be awaited on every
    exit path.
    """

    def __init__(
        self,
        playwright: Any,
        browser: Any,
        context: Any,
        page: Any,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        settle_delay: float = DEFAULT_SETTLE_DELAY,
    ) -> None:
        self._playwright = playwright
        self._browser = browser
        self._context = context
        self._page = page
        self._timeout = timeout
        self._settle_delay = settle_delay
        self._url = ""

    @classmethod
    async def launch(
        cls,
        *,
        headless: bool = True,
        timeout: float = DEFAULT_TIMEOUT,
        settle_delay: float = DEFAULT_SETTLE_DELAY,
    ) -> PlaywrightSession:
        playwright = await async_playwright().start()
        try:
            browser = await playwright.chromium.launch(
                headless=headless, args=list(CHROMIUM_ARGS)
            )
            context = await browser.new_context(user_agent=USER_AGENT, viewport=VIEWPORT)
            page = await context.new_page()
            await page.route("**/*", _block_heavy_resources)
        except Exception:
            await playwright.stop()
            raise
        return cls(
            playwright,
            browser,
            context,
            page,
            timeout=timeout,
            settle_delay=settle_delay,
        )

    async def navigate(self, url: str, *, timeout: float) -> None:
        self._url = url
        try:
            await self._page.goto(
                url,
                timeout=timeout * 1000,
                wait_until="domcontentloaded",
            )
        except PlaywrightError as exc:
            raise _translate_playwright_error(exc, url) from exc

    async def wait_for_stable(self) -> None:
        """Wait for network idle (bounded), then a short settle delay."""
        try:
            await self._page.wait_for_load_state(
                "networkidle", timeout=self._timeout * 1000
            )
        except PlaywrightError as exc:
            raise _translate_playwright_error(exc, self._url) from exc
        if self._settle_delay > 0:
            await asyncio.sleep(self._settle_delay)

    async def read_full_markup(self) -> str:
        try:
            return await self._page.content()
        except PlaywrightError as exc:
            raise _translate_playwright_error(exc, self._url) from exc

    async def close(self) -> None:
        try:
            await self._context.close()
            await self._browser.close()
        finally:
            await self._playwright.stop()


async def _block_heavy_resources(route: Any) -> None:
    if route.request.resource_type in BLOCKED_RESOURCE_TYPES:
        await route.abort()
    else:
        await route.continue_()


def playwright_session_factory(
    *,
    headless: bool = True,
    timeout: float = DEFAULT_TIMEOUT,
    settle_delay: float = DEFAULT_SETTLE_DELAY,
) -> SessionFactory:
    """Return a factory launching a fresh :class:`PlaywrightSession` per fetch."""

    async def _factory() -> RenderingSession:
        return await PlaywrightSession.launch(
            headless=headless, timeout=timeout, settle_delay=settle_delay
        )

    return _factory


# ---------------------------------------------------------------------------
# Fetcher
# ---------------------------------------------------------------------------


def looks_like_auth_wall(
    html: str, selectors: Sequence[str] = AUTH_WALL_SELECTORS
) -> bool:
    """Return ``True`` if the markup contains a login-form marker."""
    soup = BeautifulSoup(html or "", "html.parser")
    return any(soup.select_one(selector) is not None for selector in selectors)


class ProfileFetcher:
    """Retrieve rendered profile markup, one rendering session at a time.

    Never raises for an expected failure: every outcome is either a
    :class:`RawPage` or a :class:`FetchFailure`.

    Args:
        session_factory: Async callable opening a new rendering session.
        timeout: Navigation bound in seconds.
        auth_wall_selectors: CSS selectors marking a login wall.
    """

    def __init__(
        self,
        session_factory: SessionFactory,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        auth_wall_selectors: Sequence[str] = AUTH_WALL_SELECTORS,
    ) -> None:
        self._session_factory = session_factory
        self._timeout = timeout
        self._auth_wall_selectors = tuple(auth_wall_selectors)
        self._lock = asyncio.Lock()

    async def fetch(self, url: str) -> FetchResult:
        async with self._lock:
            try:
                html = await self._render(url)
            except FetchError as exc:
                return self._failure(url, FetchFailureReason(exc.reason), str(exc))
            except TimeoutError as exc:
                return self._failure(url, FetchFailureReason.TIMEOUT, f"timed out: {exc}")
            except OSError as exc:
                return self._failure(url, FetchFailureReason.NETWORK_ERROR, f"network error: {exc}")
            except Exception as exc:  # noqa: BLE001
                return self._failure(url, FetchFailureReason.UNKNOWN, f"unexpected error: {exc}")

        logger.debug("scraper: fetched %s (%d chars)", url, len(html))
        return RawPage(url=url, html=html)

    async def _render(self, url: str) -> str:
        session = await self._session_factory()
        try:
            await session.navigate(url, timeout=self._timeout)
            await session.wait_for_stable()
            html = await session.read_full_markup()
            if looks_like_auth_wall(html, self._auth_wall_selectors):
                raise AccessDeniedError("page requires sign-in (login wall detected)", url=url)
            return html
        finally:
            try:
                await session.close()
            except Exception as exc:  # noqa: BLE001
                logger.warning("scraper: failed to close rendering session for %s: %s", url, exc)

    @staticmethod
    def _failure(url: str, reason: FetchFailureReason, message: str) -> FetchFailure:
        logger.warning("scraper: fetch failed for %s (%s): %s", url, reason.value, message)
        return FetchFailure(url=url, reason=reason, message=message)
