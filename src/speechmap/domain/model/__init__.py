"""Domain model for canonical speech records."""

from __future__ import annotations

from .base import Entity, new_id
from .geocode import GeocodeCacheEntry, GeocodeResult
from .organization import DEFAULT_ORGANIZATION_COLOR, Candidate, Organization
from .speech import (
    DEFAULT_SEARCH_LIMIT,
    RawSpeechRecord,
    Speech,
    SpeechFilter,
    SpeechListing,
    normalize_start_at,
)

__all__ = [
    "DEFAULT_ORGANIZATION_COLOR",
    "DEFAULT_SEARCH_LIMIT",
    "Candidate",
    "Entity",
    "GeocodeCacheEntry",
    "GeocodeResult",
    "Organization",
    "RawSpeechRecord",
    "Speech",
    "SpeechFilter",
    "SpeechListing",
    "new_id",
    "normalize_start_at",
]
