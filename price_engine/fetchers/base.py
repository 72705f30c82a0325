"""Base class shared by the static and rendered fetch tiers."""

from __future__ import annotations

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from typing import Optional

from bs4 import BeautifulSoup

from price_engine.configs import Settings, settings
from price_engine.extraction import extract_price, is_not_found, page_title
from price_engine.models import (
    ExtractionFailure,
    ExtractionResult,
    FetchMethod,
    NotFoundError,
    PriceEngineError,
)
from price_engine.profiles import SiteProfileRegistry
from price_engine.utils import elapsed_ms

logger = logging.getLogger("price_engine.fetcher")


class BaseFetcher(ABC):
    """Load a document for a URL and run the shared extraction chain."""

    method: FetchMethod
    error_title: str = "Fetch error"

    def __init__(
        self,
        registry: Optional[SiteProfileRegistry] = None,
        config: Settings = settings,
    ) -> None:
        self.registry = registry if registry is not None else SiteProfileRegistry()
        self.config = config

    @property
    @abstractmethod
    def timeout(self) -> float:
        """Upper bound in seconds for loading one document."""
        raise NotImplementedError

    async def fetch(self, url: str) -> ExtractionResult:
        """Public entry point; failures come back as unsuccessful results."""
        started = time.perf_counter()
        try:
            document = await asyncio.wait_for(
                self._load_document(url), timeout=self.timeout
            )
            return self._extract(url, document, started)
        except asyncio.TimeoutError:
            message = f"{self.method} fetch timed out after {self.timeout:g}s"
            logger.warning("%s: %s", url, message)
            return self._failure(url, message, started)
        except NotFoundError:
            logger.info("%s reported as not found (%s)", url, self.method)
            return ExtractionResult.not_found_result(
                url,
                self.method,
                currency=self.config.DEFAULT_CURRENCY,
                duration_ms=elapsed_ms(started),
            )
        except ExtractionFailure as exc:
            logger.info("No price on %s (%s)", url, self.method)
            return self._failure(url, exc.message, started, title=exc.title)
        except PriceEngineError as exc:
            logger.warning("%s fetch failed for %s: %s", self.method, url, exc.message)
            return self._failure(url, exc.message, started)
        except Exception as exc:
            logger.exception("Unexpected error during %s fetch of %s", self.method, url)
            return self._failure(url, str(exc) or type(exc).__name__, started)

    def _extract(
        self, url: str, document: BeautifulSoup, started: float
    ) -> ExtractionResult:
        if is_not_found(document):
            raise NotFoundError(url)

        title = page_title(document)
        price, extraction_method = extract_price(document, self.registry.lookup(url))
        if price is None:
            raise ExtractionFailure(url, title=title)

        duration = elapsed_ms(started)
        logger.info(
            "%s fetch of %s finished in %dms: %s via %s",
            self.method,
            url,
            duration,
            price,
            extraction_method,
        )
        return ExtractionResult(
            url=url,
            title=title,
            method=self.method,
            price=price,
            currency=self.config.DEFAULT_CURRENCY,
            success=True,
            extraction_method=extraction_method,
            duration_ms=duration,
        )

    def _failure(
        self,
        url: str,
        message: str,
        started: float,
        title: Optional[str] = None,
    ) -> ExtractionResult:
        return ExtractionResult.failure(
            url,
            self.method,
            message,
            title=title or self.error_title,
            currency=self.config.DEFAULT_CURRENCY,
            duration_ms=elapsed_ms(started),
        )

    @abstractmethod
    async def _load_document(self, url: str) -> BeautifulSoup:
        """Return the parsed document for ``url``."""
        raise NotImplementedError
