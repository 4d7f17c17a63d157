"""Read-side queries over canonical speeches."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import timedelta
from typing import TYPE_CHECKING

from speechmap.domain.model import SpeechFilter

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime
    from uuid import UUID

    from speechmap.domain.model import Organization, SpeechListing
    from speechmap.domain.ports import SpeechUnitOfWork


def search_speeches(
    unit_of_work_factory: Callable[[], SpeechUnitOfWork],
    criteria: SpeechFilter | None = None,
) -> list[SpeechListing]:
    with unit_of_work_factory() as uow:
        return list(uow.repositories.speeches.search(criteria or SpeechFilter()))


def search_around(
    unit_of_work_factory: Callable[[], SpeechUnitOfWork],
    target: datetime,
    *,
    range_hours: float = 1.0,
    criteria: SpeechFilter | None = None,
) -> list[SpeechListing]:
    """Located speeches starting within ``range_hours`` of ``target``, without a limit."""

    if range_hours < 0:
        raise ValueError("range_hours must be non-negative")
    window = timedelta(hours=range_hours)
    bounded = replace(
        criteria or SpeechFilter(),
        start=target - window,
        end=target + window,
        has_location=True,
        limit=None,
        offset=0,
    )
    return search_speeches(unit_of_work_factory, bounded)


@dataclass(frozen=True, slots=True)
class CandidateListing:
    id: UUID
    name: str
    organization_id: UUID
    organization_name: str

    def to_dict(self) -> dict[str, object]:
        return {
            "id": str(self.id),
            "name": self.name,
            "organization_id": str(self.organization_id),
            "organization_name": self.organization_name,
        }


@dataclass(frozen=True, slots=True)
class SpeechStats:
    total_speeches: int
    total_candidates: int
    total_organizations: int
    speeches_without_location: int
    last_updated: datetime | None

    def to_dict(self) -> dict[str, object]:
        return {
            "total_speeches": self.total_speeches,
            "total_candidates": self.total_candidates,
            "total_organizations": self.total_organizations,
            "speeches_without_location": self.speeches_without_location,
            "last_updated": self.last_updated.isoformat() if self.last_updated else None,
        }


def organization_to_dict(organization: Organization) -> dict[str, object]:
    return {"id": str(organization.id), "name": organization.name, "color": organization.color}


def load_organizations(
    unit_of_work_factory: Callable[[], SpeechUnitOfWork],
) -> list[Organization]:
    with unit_of_work_factory() as uow:
        return sorted(uow.repositories.organizations.list_all(), key=lambda org: org.name)


def load_candidates(
    unit_of_work_factory: Callable[[], SpeechUnitOfWork],
    organization_id: UUID | None = None,
) -> list[CandidateListing]:
    """Candidates ordered by name, optionally restricted to one organization."""

    with unit_of_work_factory() as uow:
        repositories = uow.repositories
        names = {org.id: org.name for org in repositories.organizations.list_all()}
        candidates = [
            candidate
            for candidate in repositories.candidates.list_all()
            if organization_id is None or candidate.organization_id == organization_id
        ]
    return [
        CandidateListing(
            id=candidate.id,
            name=candidate.name,
            organization_id=candidate.organization_id,
            organization_name=names.get(candidate.organization_id, ""),
        )
        for candidate in sorted(candidates, key=lambda candidate: candidate.name)
    ]


def speech_stats(unit_of_work_factory: Callable[[], SpeechUnitOfWork]) -> SpeechStats:
    """Totals over stored data; ``last_updated`` is ``None`` when no speech exists."""

    with unit_of_work_factory() as uow:
        repositories = uow.repositories
        speeches = repositories.speeches.list_all()
        return SpeechStats(
            total_speeches=len(speeches),
            total_candidates=len(repositories.candidates.list_all()),
            total_organizations=len(repositories.organizations.list_all()),
            speeches_without_location=sum(1 for speech in speeches if not speech.has_location),
            last_updated=max((speech.updated_at for speech in speeches), default=None),
        )
