"""Lifecycle of the shared headless browser used by the rendering tier."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any, Callable, Optional

from playwright.async_api import Browser, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError

from price_engine.configs import Settings, settings
from price_engine.models import RenderingError

logger = logging.getLogger("price_engine.rendering")

LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-extensions",
    "--disable-gpu",
    "--no-first-run",
    "--disable-background-timer-throttling",
    "--disable-backgrounding-occluded-windows",
    "--disable-renderer-backgrounding",
]


class SessionState(str, Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    CLOSING = "closing"
    CLOSED = "closed"


class RenderingSessionManager:
    """Owns the single browser shared by concurrent rendered fetches.

    ``init`` is idempotent while connected and relaunches the browser after
    a crash. Once ``close`` starts, every further ``init`` fails fast.
    Pages are handed out per fetch and closed by the caller.
    """

    def __init__(
        self,
        config: Settings = settings,
        playwright_factory: Callable[[], Any] = async_playwright,
    ) -> None:
        self.config = config
        self.pool_size = config.BROWSER_POOL_SIZE
        self.state = SessionState.UNINITIALIZED
        self._playwright_factory = playwright_factory
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._lock = asyncio.Lock()

    @property
    def is_connected(self) -> bool:
        return self._browser is not None and self._browser.is_connected()

    def _check_open(self) -> None:
        if self.state in (SessionState.CLOSING, SessionState.CLOSED):
            raise RenderingError("", "Rendering session is being closed")

    async def init(self) -> None:
        """Make sure a connected browser exists."""
        self._check_open()
        async with self._lock:
            self._check_open()
            if self.is_connected:
                return

            if self._browser is not None:
                try:
                    await self._browser.close()
                except PlaywrightError as exc:
                    logger.info("Ignoring error while closing stale browser: %s", exc)
                self._browser = None

            if self._playwright is None:
                self._playwright = await self._playwright_factory().start()
                self._check_open()

            logger.info(
                "Launching headless browser (pool size %d, using 1)", self.pool_size
            )
            browser = await self._playwright.chromium.launch(
                headless=True, args=LAUNCH_ARGS
            )
            if self.state in (SessionState.CLOSING, SessionState.CLOSED):
                await self._discard(browser)
                self._check_open()
            browser.on("disconnected", self._on_disconnected)
            self._browser = browser
            self.state = SessionState.READY

    async def _discard(self, browser: Browser) -> None:
        logger.info("Closing browser launched while the session was closing")
        try:
            await asyncio.wait_for(
                browser.close(), timeout=self.config.BROWSER_CLOSE_TIMEOUT_SECONDS
            )
        except (asyncio.TimeoutError, PlaywrightError) as exc:
            logger.warning("Browser close error: %s", exc)

    def _on_disconnected(self, browser: Browser) -> None:
        if browser is not self._browser:
            return
        logger.warning("Browser disconnected")
        self._browser = None
        if self.state == SessionState.READY:
            self.state = SessionState.UNINITIALIZED

    async def new_page(self) -> Page:
        """Open a fresh page with the desktop user agent and viewport."""
        await self.init()
        if self._browser is None:
            raise RenderingError("", "Browser is not available")
        return await self._browser.new_page(
            user_agent=self.config.USER_AGENT,
            viewport={
                "width": self.config.RENDER_VIEWPORT_WIDTH,
                "height": self.config.RENDER_VIEWPORT_HEIGHT,
            },
            java_script_enabled=True,
        )

    async def close(self) -> None:
        """Close every page and the browser, then refuse further use."""
        self.state = SessionState.CLOSING
        # Waits for an in-flight init, which then sees CLOSING and backs out.
        async with self._lock:
            await self._shutdown()

    async def _shutdown(self) -> None:
        browser = self._browser
        try:
            if browser is not None:
                pages = [page for context in browser.contexts for page in context.pages]
                outcomes = await asyncio.gather(
                    *(page.close() for page in pages), return_exceptions=True
                )
                for outcome in outcomes:
                    if isinstance(outcome, Exception):
                        logger.info("Page close error: %s", outcome)

                await asyncio.wait_for(
                    browser.close(), timeout=self.config.BROWSER_CLOSE_TIMEOUT_SECONDS
                )
        except (asyncio.TimeoutError, PlaywrightError) as exc:
            logger.warning("Browser close error: %s", exc)
        finally:
            self._browser = None
            playwright, self._playwright = self._playwright, None
            if playwright is not None:
                try:
                    await playwright.stop()
                except PlaywrightError as exc:
                    logger.info("Playwright stop error: %s", exc)
            self.state = SessionState.CLOSED

    async def __aenter__(self) -> "RenderingSessionManager":
        await self.init()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
