"""Canonical speech events and the raw records sources produce."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .base import Entity

if TYPE_CHECKING:
    from datetime import datetime, tzinfo
    from uuid import UUID

DEFAULT_SEARCH_LIMIT = 100


def normalize_start_at(value: datetime, timezone: tzinfo) -> datetime:
    """Return ``value`` at minute precision, interpreting naive values in ``timezone``."""

    truncated = value.replace(second=0, microsecond=0)
    if truncated.tzinfo is None:
        return truncated.replace(tzinfo=timezone)
    return truncated


@dataclass(frozen=True, slots=True)
class RawSpeechRecord:
    """Unvalidated announcement of one speech, as extracted by a source.

    ``start_at`` is local wall-clock time; naive values are resolved against the
    ingestion timezone when merged.
    """

    candidate_name: str
    start_at: datetime
    location_name: str
    source_url: str | None = None
    speakers: tuple[str, ...] = ()
    address: str | None = None

    def __post_init__(self) -> None:
        if not self.candidate_name or not self.candidate_name.strip():
            raise ValueError("candidate_name must be a non-empty string")
        object.__setattr__(
            self, "speakers", tuple(speaker for speaker in self.speakers if speaker.strip())
        )


@dataclass(eq=False, kw_only=True)
class Speech(Entity):
    """Deduplicated speech, identified by ``(candidate_id, start_at)``."""

    candidate_id: UUID
    start_at: datetime
    location_name: str
    created_at: datetime
    updated_at: datetime
    address: str | None = None
    lat: float | None = None
    lng: float | None = None
    source_url: str | None = None
    speakers: set[str] = field(default_factory=set[str])

    @property
    def has_location(self) -> bool:
        return self.lat is not None and self.lng is not None


@dataclass(frozen=True, slots=True)
class SpeechListing:
    """Read model joining a speech with its candidate and organization."""

    speech: Speech
    candidate_name: str
    organization_id: UUID
    organization_name: str
    organization_color: str

    def to_dict(self) -> dict[str, object]:
        speech = self.speech
        return {
            "id": str(speech.id),
            "candidate_id": str(speech.candidate_id),
            "candidate_name": self.candidate_name,
            "organization_id": str(self.organization_id),
            "organization_name": self.organization_name,
            "organization_color": self.organization_color,
            "start_at": speech.start_at.isoformat(),
            "location_name": speech.location_name,
            "address": speech.address,
            "lat": speech.lat,
            "lng": speech.lng,
            "source_url": speech.source_url,
            "speakers": sorted(speech.speakers),
            "created_at": speech.created_at.isoformat(),
        }


@dataclass(frozen=True, slots=True, kw_only=True)
class SpeechFilter:
    """Criteria for listing speeches; bounds are inclusive."""

    organization_ids: tuple[UUID, ...] = ()
    candidate_ids: tuple[UUID, ...] = ()
    start: datetime | None = None
    end: datetime | None = None
    has_location: bool | None = None
    limit: int | None = DEFAULT_SEARCH_LIMIT
    offset: int = 0

    def __post_init__(self) -> None:
        if self.limit is not None and self.limit < 0:
            raise ValueError("limit must be non-negative")
        if self.offset < 0:
            raise ValueError("offset must be non-negative")
        for name in ("organization_ids", "candidate_ids"):
            value = getattr(self, name)
            if isinstance(value, Iterable) and not isinstance(value, tuple):
                object.__setattr__(self, name, tuple(value))
