"""High-level service choosing between the static and rendered tiers."""

from __future__ import annotations

from typing import Optional

from price_engine.configs import Settings, settings
from price_engine.fetchers.base import BaseFetcher
from price_engine.fetchers.rendered import RenderedFetcher
from price_engine.fetchers.static import StaticFetcher
from price_engine.logger_config import get_logger
from price_engine.models import ExtractionResult
from price_engine.profiles import SiteProfileRegistry
from price_engine.rendering import RenderingSessionManager

logger = get_logger("price_engine")


def build_registry(config: Settings = settings) -> SiteProfileRegistry:
    """Registry from ``SITE_PROFILES_PATH`` or the built-in profiles."""
    if config.SITE_PROFILES_PATH:
        return SiteProfileRegistry.from_file(config.SITE_PROFILES_PATH)
    return SiteProfileRegistry()


class PriceExtractionService:
    """Extract one URL's price, static tier first and rendered tier second."""

    def __init__(
        self,
        session_manager: Optional[RenderingSessionManager] = None,
        registry: Optional[SiteProfileRegistry] = None,
        static_fetcher: Optional[BaseFetcher] = None,
        rendered_fetcher: Optional[BaseFetcher] = None,
        config: Settings = settings,
    ) -> None:
        self.config = config
        self.registry = registry if registry is not None else build_registry(config)
        self.session_manager = session_manager or RenderingSessionManager(config)
        self.static_fetcher = static_fetcher or StaticFetcher(self.registry, config)
        self.rendered_fetcher = rendered_fetcher or RenderedFetcher(
            self.session_manager, self.registry, config
        )

    async def extract(self, url: str) -> ExtractionResult:
        """Return the first successful tier's result, else the last failure."""
        logger.info("Extracting price: %s", url)
        static_result = await self.static_fetcher.fetch(url)
        if static_result.success:
            return static_result

        if not self.config.RENDERING_ENABLED:
            return static_result

        logger.info(
            "Static tier failed for %s (%s), trying rendered tier",
            url,
            static_result.error,
        )
        return await self.rendered_fetcher.fetch(url)

    async def close(self) -> None:
        await self.session_manager.close()

    async def __aenter__(self) -> "PriceExtractionService":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
