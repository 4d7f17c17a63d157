"""Unit-of-work abstractions for coordinating repositories."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType

    from speechmap.domain.ports.persistence import (
        CandidateRepository,
        GeocodeCacheRepository,
        OrganizationRepository,
        SpeechRepository,
    )


@runtime_checkable
class RepositoryCollection(Protocol):
    """Marker protocol for groups of repositories managed together."""


@runtime_checkable
class UnitOfWork[TRepositories: RepositoryCollection](Protocol):
    """Generic unit-of-work boundary around a repository collection.

    ``commit`` raises ``PersistenceConflictError`` when a uniqueness constraint
    is violated; the transaction is rolled back first.
    """

    @property
    def repositories(self) -> TRepositories: ...

    def __enter__(self) -> UnitOfWork[TRepositories]: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


@dataclass(slots=True)
class SpeechRepositories(RepositoryCollection):
    """Repositories required to ingest and query speeches."""

    organizations: OrganizationRepository
    candidates: CandidateRepository
    speeches: SpeechRepository
    geocode_cache: GeocodeCacheRepository


type SpeechUnitOfWork = UnitOfWork[SpeechRepositories]
