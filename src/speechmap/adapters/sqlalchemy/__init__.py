"""SQLAlchemy adapter package."""

from __future__ import annotations

from .mappings import mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyCandidateRepository,
    SqlAlchemyGeocodeCacheRepository,
    SqlAlchemyOrganizationRepository,
    SqlAlchemySpeechRepository,
)
from .unit_of_work import (
    SqlAlchemyUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyCandidateRepository",
    "SqlAlchemyGeocodeCacheRepository",
    "SqlAlchemyOrganizationRepository",
    "SqlAlchemySpeechRepository",
    "SqlAlchemyUnitOfWork",
    "StartupError",
    "configured_engine",
    "is_started",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
