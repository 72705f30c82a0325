from price_engine.fetchers.base import BaseFetcher
from price_engine.fetchers.rendered import RenderedFetcher
from price_engine.fetchers.static import StaticFetcher

__all__ = ["BaseFetcher", "RenderedFetcher", "StaticFetcher"]
