"""Geocoding results and their persistent cache rows."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class GeocodeResult:
    lat: float
    lng: float
    address: str


@dataclass(eq=False, kw_only=True)
class GeocodeCacheEntry:
    """Cached lookup keyed on the literal location text.

    A row without coordinates records a failed lookup and is never retried.
    """

    location_text: str
    lat: float | None = None
    lng: float | None = None
    formatted_address: str | None = None

    @classmethod
    def from_result(cls, location_text: str, result: GeocodeResult | None) -> GeocodeCacheEntry:
        if result is None:
            return cls(location_text=location_text)
        return cls(
            location_text=location_text,
            lat=result.lat,
            lng=result.lng,
            formatted_address=result.address,
        )

    @property
    def is_negative(self) -> bool:
        return all(value is None for value in (self.lat, self.lng, self.formatted_address))

    def to_result(self) -> GeocodeResult | None:
        if self.lat is None or self.lng is None or self.formatted_address is None:
            return None
        return GeocodeResult(lat=self.lat, lng=self.lng, address=self.formatted_address)
