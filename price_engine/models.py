"""Domain models for price extraction results."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Literal, Optional, Tuple

FetchMethod = Literal["static", "rendered"]

NOT_FOUND_TITLE = "Product not found"
NOT_FOUND_ERROR = "Product not found (404)"


@dataclass(frozen=True, slots=True)
class SiteProfile:
    """Ordered extraction rules for one shop domain."""

    domain: str
    data_attributes: Tuple[str, ...] = ()
    primary: Tuple[str, ...] = ()
    hidden_inputs: Tuple[str, ...] = ()
    alternative: Tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class PriceCandidate:
    """Price-looking value found by the heuristic finder."""

    price: float
    source_text: str
    css_context: str = ""
    priority_bucket: Literal["high", "normal"] = "normal"


@dataclass(frozen=True, slots=True)
class ExtractionResult:
    """Outcome of one extraction attempt for a single URL."""

    url: str
    title: str
    method: FetchMethod
    price: Optional[float] = None
    currency: str = "TL"
    success: bool = False
    extraction_method: str = "unknown"
    not_found: bool = False
    error: Optional[str] = None
    duration_ms: int = 0

    def __post_init__(self) -> None:
        if self.price is not None and not self.success:
            raise ValueError("price is only allowed on successful results")
        if self.not_found and (self.success or self.price is not None):
            raise ValueError("not-found results cannot carry a price")
        if self.price is not None and not 0 < self.price <= 10_000_000:
            raise ValueError(f"price out of range: {self.price}")

    @classmethod
    def not_found_result(
        cls,
        url: str,
        method: FetchMethod,
        currency: str = "TL",
        duration_ms: int = 0,
    ) -> "ExtractionResult":
        return cls(
            url=url,
            title=NOT_FOUND_TITLE,
            method=method,
            currency=currency,
            not_found=True,
            error=NOT_FOUND_ERROR,
            duration_ms=duration_ms,
        )

    @classmethod
    def failure(
        cls,
        url: str,
        method: FetchMethod,
        error: str,
        title: str = "Extraction error",
        currency: str = "TL",
        extraction_method: str = "unknown",
        duration_ms: int = 0,
    ) -> "ExtractionResult":
        return cls(
            url=url,
            title=title,
            method=method,
            currency=currency,
            error=error,
            extraction_method=extraction_method,
            duration_ms=duration_ms,
        )

    def as_dict(self) -> Dict[str, Any]:
        """Return the camelCase shape consumed by downstream collaborators."""
        return {
            "url": self.url,
            "title": self.title,
            "price": self.price,
            "currency": self.currency,
            "success": self.success,
            "method": self.method,
            "extractionMethod": self.extraction_method,
            "notFound": self.not_found,
            "error": self.error,
            "durationMs": self.duration_ms,
        }


class PriceEngineError(RuntimeError):
    """Base error for a failed extraction of a single URL."""

    def __init__(self, url: str, message: str) -> None:
        super().__init__(message)
        self.url = url
        self.message = message


class NotFoundError(PriceEngineError):
    """The page is gone or the product was removed."""

    def __init__(self, url: str, message: str = NOT_FOUND_ERROR) -> None:
        super().__init__(url, message)


class TransportError(PriceEngineError):
    """Timeout, connection failure or bad status during the static fetch."""


class RenderingError(PriceEngineError):
    """Navigation, page or browser session failure in the rendering tier."""


class ExtractionFailure(PriceEngineError):
    """The page loaded cleanly but no rule produced a price."""

    def __init__(
        self,
        url: str,
        message: str = "No price found on page",
        title: Optional[str] = None,
    ) -> None:
        super().__init__(url, message)
        self.title = title


@dataclass(slots=True)
class BatchSummary:
    """Counters for one batch run, used for logging."""

    total: int = 0
    succeeded: int = 0
    not_found: int = 0
    failed: int = 0

    def record(self, result: ExtractionResult) -> None:
        self.total += 1
        if result.success:
            self.succeeded += 1
        elif result.not_found:
            self.not_found += 1
        else:
            self.failed += 1
