"""Domain port definitions for adapters."""

from __future__ import annotations

from .geocoding import GeocodeProvider, Geocoder
from .persistence import (
    CandidateRepository,
    GeocodeCacheRepository,
    OrganizationRepository,
    Repository,
    SpeechRepository,
)
from .sources import SpeechSource
from .unit_of_work import (
    RepositoryCollection,
    SpeechRepositories,
    SpeechUnitOfWork,
    UnitOfWork,
)

__all__ = [
    "CandidateRepository",
    "GeocodeCacheRepository",
    "GeocodeProvider",
    "Geocoder",
    "OrganizationRepository",
    "Repository",
    "RepositoryCollection",
    "SpeechRepositories",
    "SpeechRepository",
    "SpeechSource",
    "SpeechUnitOfWork",
    "UnitOfWork",
]
