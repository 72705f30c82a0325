"""Bounded-concurrency extraction over a list of URLs."""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Sequence

from price_engine.configs import Settings, settings
from price_engine.models import BatchSummary, ExtractionResult
from price_engine.service import PriceExtractionService

logger = logging.getLogger("price_engine.batch")


class BatchOrchestrator:
    """Run extractions in small concurrent windows with a pause between them.

    The returned list is aligned with the input: ``results[i]`` belongs to
    ``urls[i]`` whatever order the fetches finish in.
    """

    def __init__(
        self,
        service: PriceExtractionService,
        window_size: Optional[int] = None,
        delay_seconds: Optional[float] = None,
        config: Settings = settings,
    ) -> None:
        self.service = service
        self.window_size = window_size or config.BATCH_WINDOW_SIZE
        self.delay_seconds = (
            config.BATCH_DELAY_SECONDS if delay_seconds is None else delay_seconds
        )
        self.currency = config.DEFAULT_CURRENCY
        if self.window_size < 1:
            raise ValueError("window_size must be at least 1")

    async def run(self, urls: Sequence[str]) -> List[ExtractionResult]:
        results: List[ExtractionResult] = []
        summary = BatchSummary()

        for start in range(0, len(urls), self.window_size):
            window = list(urls[start : start + self.window_size])
            logger.info(
                "Batch window %d-%d of %d", start + 1, start + len(window), len(urls)
            )
            outcomes = await asyncio.gather(
                *(self.service.extract(url) for url in window),
                return_exceptions=True,
            )
            for url, outcome in zip(window, outcomes):
                result = self._to_result(url, outcome)
                summary.record(result)
                results.append(result)

            if start + self.window_size < len(urls):
                await asyncio.sleep(self.delay_seconds)

        logger.info(
            "Batch finished: %d ok, %d not found, %d failed",
            summary.succeeded,
            summary.not_found,
            summary.failed,
        )
        return results

    def _to_result(self, url: str, outcome: object) -> ExtractionResult:
        if isinstance(outcome, ExtractionResult):
            return outcome
        if isinstance(outcome, BaseException):
            logger.error("Batch extraction error for %s: %r", url, outcome)
            message = str(outcome) or type(outcome).__name__
        else:
            message = f"Unexpected extraction outcome: {outcome!r}"
        return ExtractionResult.failure(
            url,
            "static",
            message,
            title="Batch error",
            currency=self.currency,
            extraction_method="batch-error",
        )


async def scrape_many(
    urls: Sequence[str], service: Optional[PriceExtractionService] = None
) -> List[ExtractionResult]:
    """Extract every URL with a fresh engine and close it afterwards."""
    owned = service is None
    service = service or PriceExtractionService()
    try:
        return await BatchOrchestrator(service).run(urls)
    finally:
        if owned:
            await service.close()
