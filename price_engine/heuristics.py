"""Generic full-page price scan used when no site rule yields a price."""

from __future__ import annotations

import logging
import re
from collections import Counter
from typing import Iterable, List, Optional, Sequence

from bs4 import BeautifulSoup, Tag

from price_engine.models import PriceCandidate
from price_engine.price_parser import parse_price

logger = logging.getLogger("price_engine.heuristics")

MAX_TEXT_LENGTH = 200
MIN_CANDIDATE_PRICE = 1
MAX_CANDIDATE_PRICE = 1_000_000

PRICE_SELECTORS: Sequence[str] = (
    ".price",
    ".product-price",
    ".current-price",
    ".sale-price",
    ".fiyat",
    ".tutar",
    ".amount",
    ".cost",
    ".value",
    "[data-price]",
    ".money",
    ".currency",
    ".product-amount",
    ".final-price",
    ".selling-price",
    ".price-current",
    ".price-item",
    ".price-wrapper",
    ".price-item--regular",
    ".price-item--last",
    ".price-item--sale",
    ".price__sale",
    ".price__container",
    "span[data-product-price]",
    "[data-product-price]",
)

BLOCKLIST_PATTERNS = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        # shipping promos
        r"kargo.*bedava",
        r"ücretsiz.*kargo",
        r"free.*shipping",
        # loyalty and points
        r"kazanmanıza.*kaldı",
        r"kazan",
        r"earn",
        r"puan.*kazan",
        r"bonus.*point",
        # coupons
        r"kupon.*kod",
        r"coupon.*code",
        # installments and fees
        r"taksit.*sayısı",
        r"aylık.*ödeme",
        r"komisyon.*oranı",
        r"fee.*rate",
        # embedded code and tracking
        r"window\.",
        r"function",
        r"script",
        r"style",
        r"\.css",
        r"\.js",
        r"src=",
        r"href=",
        r"@media",
        r"font-family",
        r"color:",
        r"performance.*mark",
        r"console\.",
        r"googletagmanager",
        r"analytics",
        r"tracking",
    )
)

_CURRENCY_MARKERS = ("₺", "TL", "tl", "$", "€", "£")
_SEPARATED_DIGITS = re.compile(r"\d+[.,]\d+")
_SKIPPED_TAGS = ["script", "style", "noscript", "template", "head"]


def _is_blocked(text: str, markup: str) -> bool:
    return any(
        pattern.search(text) or pattern.search(markup) for pattern in BLOCKLIST_PATTERNS
    )


def _looks_like_price(text: str) -> bool:
    return any(marker in text for marker in _CURRENCY_MARKERS) or bool(
        _SEPARATED_DIGITS.search(text)
    )


def _candidate(element: Tag, bucket: str) -> Optional[PriceCandidate]:
    text = element.get_text().strip()
    if not text or len(text) > MAX_TEXT_LENGTH:
        return None

    price = parse_price(text)
    if price is None or not MIN_CANDIDATE_PRICE <= price <= MAX_CANDIDATE_PRICE:
        return None

    if _is_blocked(text, element.decode_contents()):
        logger.debug("Blocked candidate %s from %r", price, text[:50])
        return None

    return PriceCandidate(
        price=price,
        source_text=text[:100],
        css_context=" ".join(element.get("class") or []),
        priority_bucket=bucket,  # type: ignore[arg-type]
    )


def collect_candidates(document: BeautifulSoup) -> List[PriceCandidate]:
    """Collect price candidates, targeted sweep first and exhaustive sweep second."""
    candidates: List[PriceCandidate] = []
    for element in document.select(", ".join(PRICE_SELECTORS)):
        candidate = _candidate(element, "high")
        if candidate is not None:
            candidates.append(candidate)
    if candidates:
        return candidates

    for element in document.find_all(True):
        if element.name in _SKIPPED_TAGS:
            continue
        if element.find_parent(_SKIPPED_TAGS) is not None:
            continue
        text = element.get_text()
        if not _looks_like_price(text):
            continue
        candidate = _candidate(element, "normal")
        if candidate is not None:
            candidates.append(candidate)
    return candidates


def select_price(candidates: Iterable[PriceCandidate]) -> Optional[float]:
    """Pick one price from the candidates.

    High-priority candidates win in document order. Otherwise the most
    frequent value wins if it repeats, and the largest value is the last
    resort since promotional numbers tend to be smaller than the price.
    """
    candidates = list(candidates)
    if not candidates:
        return None

    for candidate in candidates:
        if candidate.priority_bucket == "high":
            return candidate.price

    value, count = Counter(c.price for c in candidates).most_common(1)[0]
    if count > 1:
        return value

    return max(c.price for c in candidates)


def find_price(document: BeautifulSoup) -> Optional[float]:
    """Scan the whole document for the most plausible price."""
    candidates = collect_candidates(document)
    if not candidates:
        logger.debug("No price candidates on page")
        return None

    for candidate in candidates[:5]:
        logger.debug(
            "Candidate %s [%s] %r (%s)",
            candidate.price,
            candidate.css_context,
            candidate.source_text[:30],
            candidate.priority_bucket,
        )
    return select_price(candidates)
