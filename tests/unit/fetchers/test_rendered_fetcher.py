"""Tests for the rendered fetch tier."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from playwright.async_api import Error as PlaywrightError

from price_engine.configs import Settings
from price_engine.fetchers.rendered import RenderedFetcher
from price_engine.models import RenderingError

HIDDEN_INPUT_HTML = """
<html>
  <head><title>Arduino Uno R3</title></head>
  <body>
    <span class="product-price"></span>
    <input type="hidden" id="product-price-vat-include" value="649,90">
  </body>
</html>
"""


def _page(html: str = HIDDEN_INPUT_HTML) -> MagicMock:
    page = MagicMock()
    page.goto = AsyncMock()
    page.evaluate = AsyncMock()
    page.content = AsyncMock(return_value=html)
    page.close = AsyncMock()
    page.is_closed = MagicMock(return_value=False)
    return page


class TestRenderedFetcher:
    """Test cases for RenderedFetcher."""

    def setup_method(self) -> None:
        """Set up a fetcher with a fake session manager and no delays."""
        self.config = Settings(
            RENDER_SETTLE_SECONDS=0,
            RENDER_RETRY_DELAY_SECONDS=0,
            PAGE_CLOSE_TIMEOUT_SECONDS=0.05,
            RENDER_BUDGET_SECONDS=5,
        )
        self.page = _page()
        self.session_manager = MagicMock()
        self.session_manager.new_page = AsyncMock(return_value=self.page)
        self.fetcher = RenderedFetcher(self.session_manager, config=self.config)

    @pytest.mark.asyncio
    async def test_fetch_reads_hidden_input_from_rendered_dom(self) -> None:
        """Test that the rendered DOM goes through the shared chain."""
        result = await self.fetcher.fetch("https://www.robotistan.com/arduino-uno")

        assert result.success is True
        assert result.price == 649.90
        assert result.method == "rendered"
        assert result.extraction_method == "hidden-input: #product-price-vat-include"
        assert result.title == "Arduino Uno R3"
        self.page.goto.assert_awaited_once()
        self.page.evaluate.assert_awaited_once()
        self.page.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_navigation_uses_dom_content_loaded_and_timeout(self) -> None:
        await self.fetcher.fetch("https://example.com/p/1")

        args, kwargs = self.page.goto.call_args
        assert args == ("https://example.com/p/1",)
        assert kwargs == {"wait_until": "domcontentloaded", "timeout": 20000}

    @pytest.mark.asyncio
    async def test_navigation_is_retried(self) -> None:
        """Test that two failed navigations are followed by a third attempt."""
        self.page.goto.side_effect = [
            PlaywrightError("net::ERR_CONNECTION_RESET"),
            PlaywrightError("net::ERR_CONNECTION_RESET"),
            None,
        ]

        result = await self.fetcher.fetch("https://www.robotistan.com/arduino-uno")

        assert result.success is True
        assert self.page.goto.await_count == 3

    @pytest.mark.asyncio
    async def test_navigation_gives_up_after_three_attempts(self) -> None:
        """Test that a persistent navigation error becomes a failure result."""
        self.page.goto.side_effect = PlaywrightError("Timeout 20000ms exceeded")

        result = await self.fetcher.fetch("https://example.com/p/1")

        assert result.success is False
        assert result.method == "rendered"
        assert "Navigation failed after 3 attempts" in result.error
        assert self.page.goto.await_count == 3
        self.page.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_rendered_404_page(self) -> None:
        self.page.content.return_value = (
            "<html><head><title>Sayfa Bulunamadı</title></head>"
            '<body><span class="price">100,00 TL</span></body></html>'
        )

        result = await self.fetcher.fetch("https://example.com/p/1")

        assert result.not_found is True
        assert result.price is None
        self.page.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_page_close_timeout_forces_second_close(self) -> None:
        """Test that a hanging close is followed by a forced close."""
        calls = {"count": 0}

        async def close() -> None:
            calls["count"] += 1
            if calls["count"] == 1:
                await asyncio.sleep(1)

        self.page.close = AsyncMock(side_effect=close)

        result = await self.fetcher.fetch("https://www.robotistan.com/arduino-uno")

        assert result.success is True
        assert calls["count"] == 2

    @pytest.mark.asyncio
    async def test_forced_close_is_bounded_when_page_never_closes(self) -> None:
        """Test that a page whose every close hangs does not stall the fetch."""

        async def close() -> None:
            await asyncio.sleep(10)

        self.page.close = AsyncMock(side_effect=close)

        result = await asyncio.wait_for(
            self.fetcher.fetch("https://www.robotistan.com/arduino-uno"), timeout=1
        )

        assert result.success is True
        assert result.price == 649.9
        assert self.page.close.await_count == 2

    @pytest.mark.asyncio
    async def test_page_closed_during_settle(self) -> None:
        self.page.is_closed.return_value = True

        result = await self.fetcher.fetch("https://example.com/p/1")

        assert result.success is False
        assert result.error == "Page was closed before extraction"
        self.page.close.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_closing_session_fails_fast(self) -> None:
        """Test that a closing session manager turns into a failure result."""
        self.session_manager.new_page.side_effect = RenderingError(
            "", "Rendering session is being closed"
        )

        result = await self.fetcher.fetch("https://example.com/p/1")

        assert result.success is False
        assert result.error == "Rendering session is being closed"
        self.page.goto.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_browser_crash_on_new_page(self) -> None:
        self.session_manager.new_page.side_effect = PlaywrightError("Browser closed")

        result = await self.fetcher.fetch("https://example.com/p/1")

        assert result.success is False
        assert "Browser closed" in result.error
