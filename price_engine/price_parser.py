"""Locale-tolerant conversion of price text to a float.

Shop pages mix Turkish (``26.145,24``), international (``26,145.24``) and
bare (``1234``) notations, often next to unrelated numbers. ``parse_price``
is the only place where text becomes a price; both fetch tiers call it.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Optional

logger = logging.getLogger("price_engine.parser")

MAX_PRICE = 10_000_000
# Readings above this without a comma are usually ids or raw attributes.
MAX_UNGROUPED_VALUE = 100_000

_CURRENCY_GLYPHS = re.compile(r"[₺$€£]")
_CURRENCY_WORDS = re.compile(r"(?<![a-z])(?:tl|try|usd|eur|gbp)(?![a-z])", re.IGNORECASE)
_LEADING_NUMBER = re.compile(r"\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)")

def strip_currency(text: str) -> str:
    """Remove currency glyphs and currency words."""
    text = _CURRENCY_GLYPHS.sub("", text)
    return _CURRENCY_WORDS.sub("", text).strip()


def _leading_float(text: str) -> Optional[float]:
    match = _LEADING_NUMBER.match(text)
    if not match:
        return None
    return float(match.group(0))


def _normalize_token(token: str) -> str:
    """Turn a matched token into a ``float()``-friendly string."""
    if "." in token and "," in token:
        decimal_sep = "," if token.rfind(",") > token.rfind(".") else "."
        group_sep = "." if decimal_sep == "," else ","
        head, _, tail = token.rpartition(decimal_sep)
        if len(tail) <= 2:
            return head.replace(group_sep, "").replace(decimal_sep, "") + "." + tail
        return token.replace(".", "").replace(",", "")

    for sep in (",", "."):
        if sep in token:
            parts = token.split(sep)
            if len(parts) == 2 and len(parts[1]) <= 2 and len(parts[0]) <= 4:
                return parts[0] + "." + parts[1]
            return token.replace(sep, "")

    return token


def _decimal_token(token: str) -> str:
    """Read the only separator of an ungrouped number as the decimal mark."""
    return token.replace(",", ".")


# Most specific first. Boundaries keep a match from starting or ending
# inside a longer run of digits.
_PATTERNS = (
    (re.compile(r"(?<!\d)\d{1,3}(?:\.\d{3})+,\d{1,2}(?!\d)"), _normalize_token),
    (re.compile(r"(?<!\d)\d{1,3}(?:,\d{3})+\.\d{1,2}(?!\d)"), _normalize_token),
    (re.compile(r"(?<!\d)\d{1,4}[.,]\d{1,2}(?!\d)"), _normalize_token),
    (re.compile(r"(?<!\d)\d{1,3}(?:[.,]\d{3})+(?!\d)"), _normalize_token),
    # 12345,67: more than four integer digits and no grouping
    (re.compile(r"(?<!\d)\d+[.,]\d{1,2}(?!\d)"), _decimal_token),
    (re.compile(r"\d+"), _normalize_token),
)


def parse_price(text: Any) -> Optional[float]:
    """Extract a price from free text, or ``None`` when it is not safe to.

    Returns a float in ``(0, 10_000_000]`` or ``None``; never raises.
    """
    if text is None:
        return None
    cleaned = strip_currency(str(text))
    if not cleaned:
        return None

    if cleaned.count(".") > 2:
        logger.debug("Rejected text with too many dot groups: %r", cleaned)
        return None

    if "," not in cleaned:
        reading = _leading_float(cleaned.replace(".", ""))
        if reading is not None and reading > MAX_UNGROUPED_VALUE:
            logger.debug("Rejected oversized ungrouped number: %r", cleaned)
            return None

    for pattern, read_token in _PATTERNS:
        match = pattern.search(cleaned)
        if not match:
            continue
        try:
            value = float(read_token(match.group(0)))
        except ValueError:
            return None
        if 0 < value <= MAX_PRICE:
            logger.debug("Parsed %r as %s", text, value)
            return value
        return None

    return None
