"""Persistent geocoding cache in front of an external provider."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from speechmap.domain.errors import GeocodeProviderError
from speechmap.domain.model import GeocodeCacheEntry

if TYPE_CHECKING:
    from speechmap.domain.model import GeocodeResult
    from speechmap.domain.ports import GeocodeCacheRepository, GeocodeProvider

log = getLogger(__name__)

DEFAULT_COUNTRY_HINT = "Japan"


def build_query(text: str, country_hint: str | None) -> str:
    if not country_hint:
        return text
    return f"{text} {country_hint}"


@dataclass(slots=True)
class GeocodeCache:
    """Answer lookups from the cache, asking the provider at most once per text.

    Keys are the literal location text, without any normalization. Failed
    lookups are cached as negative entries and never retried.
    """

    entries: GeocodeCacheRepository
    provider: GeocodeProvider | None
    country_hint: str | None = DEFAULT_COUNTRY_HINT

    def lookup(self, text: str) -> GeocodeResult | None:
        if not text.strip():
            return None

        cached = self.entries.get(text)
        if cached is not None:
            return cached.to_result()

        if self.provider is None:
            log.warning("No geocoding provider configured, skipping lookup for %r", text)
            return None

        try:
            result = self.provider.lookup(build_query(text, self.country_hint))
        except GeocodeProviderError as exc:
            log.warning("Geocoding failed for %r: %s", text, exc)
            result = None

        self.entries.add(GeocodeCacheEntry.from_result(text, result))
        if result is None:
            log.info("Cached negative geocode result for %r", text)
        return result
