"""Static tier: plain HTTP fetch, no script execution."""

from __future__ import annotations

import asyncio
import logging

import requests
from bs4 import BeautifulSoup

from price_engine.fetchers.base import BaseFetcher
from price_engine.models import NotFoundError, TransportError
from price_engine.utils import default_headers

logger = logging.getLogger("price_engine.static")


class StaticFetcher(BaseFetcher):
    """Fetch the raw HTML with ``requests`` and parse it without scripts."""

    method = "static"
    error_title = "HTTP error"

    @property
    def timeout(self) -> float:
        return self.config.HTTP_RACE_TIMEOUT_SECONDS

    def _get(self, url: str) -> requests.Response:
        with requests.Session() as session:
            session.max_redirects = self.config.HTTP_MAX_REDIRECTS
            return session.get(
                url,
                headers=default_headers(self.config),
                timeout=self.config.HTTP_TIMEOUT_SECONDS,
            )

    async def _load_document(self, url: str) -> BeautifulSoup:
        logger.info("Static fetch started: %s", url)
        try:
            response = await asyncio.to_thread(self._get, url)
        except requests.RequestException as exc:
            raise TransportError(url, str(exc) or type(exc).__name__) from exc

        if response.status_code == 404:
            raise NotFoundError(url)
        if not 200 <= response.status_code < 300:
            raise TransportError(url, f"HTTP {response.status_code}")

        return BeautifulSoup(response.text, "html.parser")
