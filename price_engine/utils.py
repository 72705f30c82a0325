"""Utilities shared by the fetch tiers."""

from __future__ import annotations

import re
import time
from typing import Dict

from price_engine.configs import Settings


def default_headers(config: Settings) -> Dict[str, str]:
    """Browser-like headers for the static fetch."""
    return {
        "User-Agent": config.USER_AGENT,
        "Accept": (
            "text/html,application/xhtml+xml,application/xml;q=0.9,"
            "image/webp,*/*;q=0.8"
        ),
        "Accept-Language": config.ACCEPT_LANGUAGE,
        "Accept-Encoding": "gzip, deflate",
        "Connection": "keep-alive",
        "Upgrade-Insecure-Requests": "1",
    }


def normalize_whitespace(value: str) -> str:
    """Collapse repeated spaces and newlines."""
    return re.sub(r"\s+", " ", value).strip()


def elapsed_ms(started: float) -> int:
    """Milliseconds since a ``time.perf_counter()`` reading."""
    return int((time.perf_counter() - started) * 1000)
