"""Ports for resolving location text into coordinates."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from speechmap.domain.model import GeocodeResult


@runtime_checkable
class GeocodeProvider(Protocol):
    """External geocoding service. Failures raise ``GeocodeProviderError``."""

    def lookup(self, query: str) -> GeocodeResult | None: ...


@runtime_checkable
class Geocoder(Protocol):
    """Anything that answers location lookups for the merger."""

    def lookup(self, text: str) -> GeocodeResult | None: ...


__all__ = ["GeocodeProvider", "Geocoder"]
