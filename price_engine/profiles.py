"""Per-domain extraction profiles and their lookup."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from price_engine.models import SiteProfile

logger = logging.getLogger("price_engine.profiles")


class SiteProfileSchema(BaseModel):
    """Shape of one profile entry in a profiles JSON file."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    data_attributes: List[str] = Field(default_factory=list, alias="dataAttributes")
    primary: List[str] = Field(default_factory=list)
    hidden_inputs: List[str] = Field(default_factory=list, alias="hiddenInputs")
    alternative: List[str] = Field(default_factory=list)

    def to_profile(self, domain: str) -> SiteProfile:
        return SiteProfile(
            domain=domain,
            data_attributes=tuple(self.data_attributes),
            primary=tuple(self.primary),
            hidden_inputs=tuple(self.hidden_inputs),
            alternative=tuple(self.alternative),
        )


DEFAULT_PROFILES: Dict[str, SiteProfile] = {
    "3dcim.com": SiteProfile(
        domain="3dcim.com",
        primary=("#indirimliFiyat .spanFiyat", ".indirimliFiyat .spanFiyat"),
        alternative=(".IndirimliFiyatContent .spanFiyat", ".spanFiyat"),
    ),
    "porima3d.com": SiteProfile(
        domain="porima3d.com",
        data_attributes=("data-product-price", "data-price"),
        primary=(
            ".price-item--sale .money",
            ".price__sale .money",
            ".price-item .money",
            ".price .money",
            ".money",
        ),
        alternative=(
            ".price__container .money",
            "[data-price] .money",
            ".price-item--regular",
            ".price-item--last",
            ".price-wrapper .money",
            ".product-price .money",
            "span[data-product-price]",
            ".price-current",
            ".current-price",
        ),
    ),
    # data-price holds a raw internal value here; only the visible text is usable.
    "store.metatechtr.com": SiteProfile(
        domain="store.metatechtr.com",
        primary=(".product-price", ".product-current-price .product-price"),
        alternative=(".product-price-not-vat",),
    ),
    "3dteknomarket.com": SiteProfile(
        domain="3dteknomarket.com",
        primary=("#indirimliFiyat .spanFiyat", ".IndirimliFiyatContent .spanFiyat"),
        alternative=(".spanFiyat",),
    ),
    "robo90.com": SiteProfile(
        domain="robo90.com",
        primary=(".d-discountPrice .product-price", ".product-price"),
        hidden_inputs=("#urun-fiyat-kdvli",),
    ),
    "robolinkmarket.com": SiteProfile(
        domain="robolinkmarket.com",
        primary=(".d-discountPrice .product-price", ".product-price"),
        hidden_inputs=("#product-price-vat-include",),
    ),
    "robotistan.com": SiteProfile(
        domain="robotistan.com",
        primary=(".product-price",),
        hidden_inputs=("#product-price-vat-include",),
    ),
}


def _hostname(url: str) -> Optional[str]:
    try:
        hostname = urlparse(url).hostname
    except ValueError:
        return None
    if not hostname:
        return None
    hostname = hostname.lower()
    if hostname.startswith("www."):
        hostname = hostname[len("www."):]
    return hostname or None


class SiteProfileRegistry:
    """Read-only mapping of domain keys to profiles.

    Lookup is exact first, then a containment match in either direction so
    that ``shop.example.com`` finds ``example.com`` and an alias key such as
    ``store.example.com`` is found from ``example.com``.
    """

    def __init__(self, profiles: Optional[Mapping[str, SiteProfile]] = None) -> None:
        source = DEFAULT_PROFILES if profiles is None else profiles
        self._profiles: Mapping[str, SiteProfile] = MappingProxyType(
            {domain.lower(): profile for domain, profile in source.items()}
        )

    @classmethod
    def from_file(cls, path: str | Path) -> "SiteProfileRegistry":
        """Load profiles from a JSON object of ``domain -> rules``."""
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(raw, dict):
            raise ValueError(f"Profiles file {path} must hold a JSON object")

        profiles: Dict[str, SiteProfile] = {}
        for domain, entry in raw.items():
            try:
                profiles[domain] = SiteProfileSchema.model_validate(entry).to_profile(
                    domain
                )
            except ValidationError as exc:
                raise ValueError(f"Invalid profile for {domain}: {exc}") from exc
        logger.info("Loaded %d site profiles from %s", len(profiles), path)
        return cls(profiles)

    @property
    def domains(self) -> List[str]:
        return list(self._profiles)

    def __len__(self) -> int:
        return len(self._profiles)

    def lookup(self, url: str) -> Optional[SiteProfile]:
        """Return the profile serving ``url``, or ``None``."""
        hostname = _hostname(url)
        if hostname is None:
            return None

        profile = self._profiles.get(hostname)
        if profile is not None:
            return profile

        for domain, candidate in self._profiles.items():
            if domain in hostname or hostname in domain:
                logger.debug("Profile %s matched host %s by containment", domain, hostname)
                return candidate
        return None
