"""Public interface for the Google Places geocoding adapter."""

from __future__ import annotations

from .client import GooglePlacesGeocoder, first_result
from .schema import PlacePayload, SearchTextResponse

__all__ = [
    "GooglePlacesGeocoder",
    "PlacePayload",
    "SearchTextResponse",
    "first_result",
]
