"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select

from speechmap.adapters.sqlalchemy.mappings import (
    candidate_table,
    geocode_cache_table,
    organization_table,
    speech_table,
)
from speechmap.domain.model import (
    Candidate,
    GeocodeCacheEntry,
    Organization,
    Speech,
    SpeechListing,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime
    from uuid import UUID

    from sqlalchemy import Select
    from sqlalchemy.orm import Session

    from speechmap.domain.model import SpeechFilter


class SqlAlchemyRepository[TEntity]:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: TEntity) -> None:
        self.session.add(entity)


class SqlAlchemyOrganizationRepository(SqlAlchemyRepository[Organization]):
    def get_by_name(self, name: str) -> Organization | None:
        stmt = select(Organization).where(organization_table.c.name == name)
        return self.session.execute(stmt).scalar_one_or_none()

    def list_all(self) -> Sequence[Organization]:
        stmt = select(Organization).order_by(organization_table.c.name)
        return self.session.execute(stmt).scalars().all()


class SqlAlchemyCandidateRepository(SqlAlchemyRepository[Candidate]):
    def get_by_name(self, name: str, organization_id: UUID) -> Candidate | None:
        stmt = (
            select(Candidate)
            .where(candidate_table.c.name == name)
            .where(candidate_table.c.organization_id == organization_id)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def list_all(self) -> Sequence[Candidate]:
        stmt = select(Candidate).order_by(candidate_table.c.name)
        return self.session.execute(stmt).scalars().all()


class SqlAlchemySpeechRepository(SqlAlchemyRepository[Speech]):
    def get_by_identity(self, candidate_id: UUID, start_at: datetime) -> Speech | None:
        stmt = (
            select(Speech)
            .where(speech_table.c.candidate_id == candidate_id)
            .where(speech_table.c.start_at == start_at)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def list_all(self) -> Sequence[Speech]:
        stmt = select(Speech).order_by(speech_table.c.start_at)
        return self.session.execute(stmt).scalars().all()

    def search(self, criteria: SpeechFilter) -> Sequence[SpeechListing]:
        stmt = self._filtered(criteria)
        return [
            SpeechListing(
                speech=speech,
                candidate_name=candidate_name,
                organization_id=organization_id,
                organization_name=organization_name,
                organization_color=organization_color,
            )
            for speech, candidate_name, organization_id, organization_name, organization_color in (
                self.session.execute(stmt).tuples()
            )
        ]

    def _filtered(
        self,
        criteria: SpeechFilter,
    ) -> Select[tuple[Speech, str, UUID, str, str]]:
        stmt = (
            select(
                Speech,
                candidate_table.c.name,
                organization_table.c.id,
                organization_table.c.name,
                organization_table.c.color,
            )
            .join(candidate_table, speech_table.c.candidate_id == candidate_table.c.id)
            .join(organization_table, candidate_table.c.organization_id == organization_table.c.id)
        )
        if criteria.organization_ids:
            stmt = stmt.where(organization_table.c.id.in_(criteria.organization_ids))
        if criteria.candidate_ids:
            stmt = stmt.where(candidate_table.c.id.in_(criteria.candidate_ids))
        if criteria.start is not None:
            stmt = stmt.where(speech_table.c.start_at >= criteria.start)
        if criteria.end is not None:
            stmt = stmt.where(speech_table.c.start_at <= criteria.end)
        if criteria.has_location is True:
            stmt = stmt.where(speech_table.c.lat.is_not(None), speech_table.c.lng.is_not(None))
        elif criteria.has_location is False:
            stmt = stmt.where(speech_table.c.lat.is_(None) | speech_table.c.lng.is_(None))
        stmt = stmt.order_by(speech_table.c.start_at, candidate_table.c.name)
        if criteria.offset:
            stmt = stmt.offset(criteria.offset)
        if criteria.limit is not None:
            stmt = stmt.limit(criteria.limit)
        return stmt


class SqlAlchemyGeocodeCacheRepository(SqlAlchemyRepository[GeocodeCacheEntry]):
    def get(self, location_text: str) -> GeocodeCacheEntry | None:
        stmt = select(GeocodeCacheEntry).where(
            geocode_cache_table.c.location_text == location_text
        )
        return self.session.execute(stmt).scalar_one_or_none()
