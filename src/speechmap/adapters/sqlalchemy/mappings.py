"""SQLAlchemy mapping metadata for the speechmap domain model."""

from __future__ import annotations

import json
import uuid
from datetime import UTC, datetime
from functools import cache
from typing import Any, cast

from sqlalchemy import (
    Column,
    DateTime,
    Dialect,
    Float,
    ForeignKey,
    Index,
    MetaData,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    orm,
)
from sqlalchemy.orm import configure_mappers

from speechmap.domain.model import Candidate, GeocodeCacheEntry, Organization, Speech

UUIDColumnType = Uuid[uuid.UUID]


def _as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class UtcTimestamp(TypeDecorator[datetime]):
    """Timezone-aware column; naive values are read and written as UTC."""

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        return _as_utc(value)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        return _as_utc(value)


class StringSetType(TypeDecorator[set[str]]):
    """Persist a set of names as a sorted JSON array."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: set[str] | None, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        return json.dumps(sorted(value), ensure_ascii=False)

    def process_result_value(self, value: str | None, dialect: Dialect) -> set[str]:
        _ = dialect
        if value is None:
            return set()
        loaded = json.loads(value)
        if not isinstance(loaded, list):
            return set()
        items = cast(list[Any], loaded)
        return {item for item in items if isinstance(item, str)}


# Constraint names must match revision 0001.
mapper_registry = orm.registry(
    metadata=MetaData(
        naming_convention={
            "pk": "pk_%(table_name)s",
            "uq": "uq_%(table_name)s_%(column_0_name)s",
            "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
            "ix": "ix_%(table_name)s_%(column_0_name)s",
        }
    )
)


def _id_column() -> Column[uuid.UUID]:
    return Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4)

organization_table = Table(
    "organization",
    mapper_registry.metadata,
    _id_column(),
    Column("name", String, nullable=False, unique=True),
    Column("color", String(16), nullable=False),
)

candidate_table = Table(
    "candidate",
    mapper_registry.metadata,
    _id_column(),
    Column("name", String, nullable=False),
    Column(
        "organization_id",
        UUIDColumnType,
        ForeignKey("organization.id", ondelete="CASCADE"),
        nullable=False,
    ),
    UniqueConstraint("name", "organization_id", name="uq_candidate_identity"),
)

speech_table = Table(
    "speech",
    mapper_registry.metadata,
    _id_column(),
    Column(
        "candidate_id",
        UUIDColumnType,
        ForeignKey("candidate.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("start_at", UtcTimestamp(), nullable=False),
    Column("location_name", String, nullable=False),
    Column("address", String, nullable=True),
    Column("lat", Float, nullable=True),
    Column("lng", Float, nullable=True),
    Column("source_url", String, nullable=True),
    Column("speakers", StringSetType(), nullable=False, default="[]"),
    Column("created_at", UtcTimestamp(), nullable=False),
    Column("updated_at", UtcTimestamp(), nullable=False),
    UniqueConstraint("candidate_id", "start_at", name="uq_speech_identity"),
    Index("ix_speech_start_at", "start_at"),
)

geocode_cache_table = Table(
    "geocode_cache",
    mapper_registry.metadata,
    Column("location_text", String, primary_key=True),
    Column("lat", Float, nullable=True),
    Column("lng", Float, nullable=True),
    Column("formatted_address", String, nullable=True),
)


@cache
def start_mappers() -> orm.registry:
    """Map the domain dataclasses imperatively; safe to call more than once."""

    mapper_registry.map_imperatively(Organization, organization_table)
    mapper_registry.map_imperatively(Candidate, candidate_table)
    mapper_registry.map_imperatively(Speech, speech_table)
    mapper_registry.map_imperatively(GeocodeCacheEntry, geocode_cache_table)

    configure_mappers()
    return mapper_registry
