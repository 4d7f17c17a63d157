"""Ports for persisting domain aggregates."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from speechmap.domain.model import (
    Candidate,
    GeocodeCacheEntry,
    Organization,
    Speech,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime
    from uuid import UUID

    from speechmap.domain.model import SpeechFilter, SpeechListing


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class OrganizationRepository(Repository[Organization], Protocol):
    def get_by_name(self, name: str) -> Organization | None: ...

    def list_all(self) -> Sequence[Organization]: ...


@runtime_checkable
class CandidateRepository(Repository[Candidate], Protocol):
    def get_by_name(self, name: str, organization_id: UUID) -> Candidate | None: ...

    def list_all(self) -> Sequence[Candidate]: ...


@runtime_checkable
class SpeechRepository(Repository[Speech], Protocol):
    def get_by_identity(self, candidate_id: UUID, start_at: datetime) -> Speech | None: ...

    def list_all(self) -> Sequence[Speech]: ...

    def search(self, criteria: SpeechFilter) -> Sequence[SpeechListing]: ...


@runtime_checkable
class GeocodeCacheRepository(Repository[GeocodeCacheEntry], Protocol):
    def get(self, location_text: str) -> GeocodeCacheEntry | None: ...
