"""Rendered tier: load the page in the shared headless browser."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from bs4 import BeautifulSoup
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from price_engine.configs import Settings, settings
from price_engine.fetchers.base import BaseFetcher
from price_engine.models import RenderingError
from price_engine.profiles import SiteProfileRegistry
from price_engine.rendering import RenderingSessionManager

logger = logging.getLogger("price_engine.rendered")

# Scripts often set hidden price inputs through the ``value`` property only;
# mirror it into the attribute so the serialized DOM carries it.
SYNC_INPUT_VALUES = """
() => {
  for (const input of document.querySelectorAll('input')) {
    if (input.value) input.setAttribute('value', input.value);
  }
}
"""


class RenderedFetcher(BaseFetcher):
    """Navigate with retries, let price widgets render, then snapshot the DOM."""

    method = "rendered"
    error_title = "Rendering error"

    def __init__(
        self,
        session_manager: RenderingSessionManager,
        registry: Optional[SiteProfileRegistry] = None,
        config: Settings = settings,
    ) -> None:
        super().__init__(registry=registry, config=config)
        self.session_manager = session_manager

    @property
    def timeout(self) -> float:
        return self.config.RENDER_BUDGET_SECONDS

    async def _load_document(self, url: str) -> BeautifulSoup:
        logger.info("Rendered fetch started: %s", url)
        try:
            page = await self.session_manager.new_page()
        except RenderingError as exc:
            raise RenderingError(url, exc.message) from exc
        except PlaywrightError as exc:
            raise RenderingError(url, f"Could not open page: {exc}") from exc

        page.on(
            "pageerror",
            lambda error: logger.debug("Page JS error on %s: %s", url, error),
        )
        try:
            await self._navigate(page, url)
            await asyncio.sleep(self.config.RENDER_SETTLE_SECONDS)
            if page.is_closed():
                raise RenderingError(url, "Page was closed before extraction")
            await page.evaluate(SYNC_INPUT_VALUES)
            html = await page.content()
        except PlaywrightError as exc:
            raise RenderingError(url, str(exc)) from exc
        finally:
            await self._release(page)

        return BeautifulSoup(html, "html.parser")

    async def _navigate(self, page: Page, url: str) -> None:
        attempts = self.config.RENDER_NAVIGATION_ATTEMPTS
        last_error: Optional[PlaywrightError] = None
        for attempt in range(1, attempts + 1):
            try:
                await page.goto(
                    url,
                    wait_until="domcontentloaded",
                    timeout=self.config.RENDER_NAVIGATION_TIMEOUT_MS,
                )
                return
            except PlaywrightError as exc:
                last_error = exc
                if attempt < attempts:
                    logger.info("Retry %d/%d for %s", attempt, attempts, url)
                    await asyncio.sleep(self.config.RENDER_RETRY_DELAY_SECONDS)
        raise RenderingError(
            url, f"Navigation failed after {attempts} attempts: {last_error}"
        )

    async def _release(self, page: Page) -> None:
        if page.is_closed():
            return
        try:
            await asyncio.wait_for(
                page.close(), timeout=self.config.PAGE_CLOSE_TIMEOUT_SECONDS
            )
        except (asyncio.TimeoutError, PlaywrightError) as exc:
            logger.info("Page close error: %s", str(exc) or "timeout")
            try:
                await asyncio.wait_for(
                    page.close(), timeout=self.config.PAGE_CLOSE_TIMEOUT_SECONDS
                )
            except (asyncio.TimeoutError, PlaywrightError) as force_exc:
                logger.info("Force close error: %s", str(force_exc) or "timeout")
