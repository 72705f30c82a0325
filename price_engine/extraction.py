"""Ordered extraction rules applied to a loaded document.

Both fetch tiers hand a parsed ``BeautifulSoup`` document to this module, so
the profile rules, the heuristic fallback and the 404 heuristics are shared.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence, Tuple

from bs4 import BeautifulSoup

from price_engine.heuristics import find_price
from price_engine.models import SiteProfile
from price_engine.price_parser import parse_price
from price_engine.utils import normalize_whitespace

logger = logging.getLogger("price_engine.extraction")

UNKNOWN_METHOD = "unknown"
HEURISTIC_METHOD = "smart-price-finder"
DEFAULT_TITLE = "Product title not found"

UNREACHABLE_PHRASE = "Aradığınız içeriğe şu an ulaşılamıyor"
_TITLE_MARKERS = ("404", "not found", "bulunamadı")
_BODY_MARKERS = ("ürün bulunamadı", "sayfa bulunamadı")


def _fold(text: str) -> str:
    """Lower-case with dotted and dotless i treated alike."""
    return text.lower().replace("\u0307", "").replace("ı", "i")


def page_title(document: BeautifulSoup) -> str:
    """``<title>`` text, falling back to the first ``<h1>``."""
    for element in (document.title, document.find("h1")):
        if element is not None:
            text = normalize_whitespace(element.get_text())
            if text:
                return text
    return DEFAULT_TITLE


def is_not_found(document: BeautifulSoup) -> bool:
    """Whether the page reads as a removed product or missing page."""
    title = document.title.get_text() if document.title is not None else ""
    body = document.body.get_text(" ") if document.body is not None else ""
    title_folded = _fold(title)
    body_folded = _fold(body)

    if any(_fold(marker) in title_folded for marker in _TITLE_MARKERS):
        return True
    if UNREACHABLE_PHRASE in title or UNREACHABLE_PHRASE in body:
        return True
    return any(_fold(marker) in body_folded for marker in _BODY_MARKERS)


def _from_data_attributes(
    document: BeautifulSoup, profile: SiteProfile
) -> Tuple[Optional[float], str]:
    for attribute in profile.data_attributes:
        element = document.select_one(f"[{attribute}]")
        if element is None:
            continue
        price = parse_price(element.get(attribute))
        if price is not None:
            return price, f"data-attribute: {attribute}"
    return None, UNKNOWN_METHOD


def _from_text_selectors(
    document: BeautifulSoup, selectors: Sequence[str], label: str
) -> Tuple[Optional[float], str]:
    for selector in selectors:
        element = document.select_one(selector)
        if element is None:
            continue
        price = parse_price(element.get_text().strip())
        if price is not None:
            return price, f"{label}: {selector}"
    return None, UNKNOWN_METHOD


def _from_hidden_inputs(
    document: BeautifulSoup, profile: SiteProfile
) -> Tuple[Optional[float], str]:
    for selector in profile.hidden_inputs:
        element = document.select_one(selector)
        if element is None:
            continue
        price = parse_price(element.get("value"))
        if price is not None:
            return price, f"hidden-input: {selector}"
    return None, UNKNOWN_METHOD


def extract_price(
    document: BeautifulSoup, profile: Optional[SiteProfile] = None
) -> Tuple[Optional[float], str]:
    """Run the rule chain and return ``(price, method tag)``.

    The first rule that yields a price wins. The heuristic finder always
    runs last, with or without a profile.
    """
    if profile is not None:
        logger.debug("Using site profile %s", profile.domain)
        steps = (
            lambda: _from_data_attributes(document, profile),
            lambda: _from_text_selectors(document, profile.primary, "primary-selector"),
            lambda: _from_hidden_inputs(document, profile),
            lambda: _from_text_selectors(
                document, profile.alternative, "alternative-selector"
            ),
        )
        for step in steps:
            price, method = step()
            if price is not None:
                logger.debug("Found price %s via %s", price, method)
                return price, method

    price = find_price(document)
    if price is not None:
        return price, HEURISTIC_METHOD
    return None, UNKNOWN_METHOD
