"""Resilient price extraction for e-commerce product pages."""

from price_engine.batch import BatchOrchestrator, scrape_many
from price_engine.models import ExtractionResult, SiteProfile
from price_engine.price_parser import parse_price
from price_engine.profiles import SiteProfileRegistry
from price_engine.rendering import RenderingSessionManager
from price_engine.service import PriceExtractionService

__all__ = [
    "BatchOrchestrator",
    "ExtractionResult",
    "PriceExtractionService",
    "RenderingSessionManager",
    "SiteProfile",
    "SiteProfileRegistry",
    "parse_price",
    "scrape_many",
]
