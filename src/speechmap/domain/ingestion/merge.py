"""Idempotent merge of raw speech records into canonical speeches.

A record either creates the speech identified by ``(candidate_id, start_at)``
or is diffed field by field against the stored one. Re-ingesting unchanged
upstream data writes nothing.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from speechmap.domain.clock import Clock, utcnow
from speechmap.domain.ingestion.normalization import strip_whitespace
from speechmap.domain.model import Speech, normalize_start_at

if TYPE_CHECKING:
    from datetime import datetime, tzinfo
    from uuid import UUID

    from speechmap.domain.model import RawSpeechRecord
    from speechmap.domain.ports import Geocoder, SpeechRepository

log = getLogger(__name__)


class MergeOutcome(StrEnum):
    INSERTED = "inserted"
    UPDATED = "updated"
    UNCHANGED = "unchanged"


@dataclass(frozen=True, slots=True)
class MergeResult:
    speech: Speech
    outcome: MergeOutcome
    changed_fields: tuple[str, ...] = ()


def needs_geocode(speech: Speech, record: RawSpeechRecord) -> str | None:
    """Return the text to re-geocode for ``record``, or ``None`` to keep coordinates."""

    if record.address:
        return record.address if record.address != speech.address else None
    if record.location_name and record.location_name != speech.location_name:
        return record.location_name
    return None


def diff_speech(
    speech: Speech,
    record: RawSpeechRecord,
    geocoder: Geocoder,
) -> dict[str, object]:
    """Compute the field updates ``record`` brings to ``speech``.

    Speakers only grow, and a speaker already stored in swept form is not new.
    Location and source URL are only replaced by non-empty values; coordinates
    are refreshed only when the geocodable text changed.
    """

    changes: dict[str, object] = {}

    added = {
        speaker
        for speaker in record.speakers
        if speaker not in speech.speakers and strip_whitespace(speaker) not in speech.speakers
    }
    if added:
        changes["speakers"] = speech.speakers | added

    if record.location_name and record.location_name != speech.location_name:
        changes["location_name"] = record.location_name
    if record.source_url and record.source_url != speech.source_url:
        changes["source_url"] = record.source_url

    search_text = needs_geocode(speech, record)
    if search_text is not None:
        location = geocoder.lookup(search_text)
        if location is not None:
            refreshed = {
                "lat": location.lat,
                "lng": location.lng,
                "address": location.address or record.address,
            }
            for name, value in refreshed.items():
                if getattr(speech, name) != value:
                    changes[name] = value

    return changes


@dataclass(slots=True)
class EventMerger:
    speeches: SpeechRepository
    geocoder: Geocoder
    timezone: tzinfo
    clock: Clock = utcnow

    def merge(self, record: RawSpeechRecord, candidate_id: UUID) -> MergeResult:
        start_at = normalize_start_at(record.start_at, self.timezone)
        existing = self.speeches.get_by_identity(candidate_id, start_at)
        if existing is None:
            return self._insert(record, candidate_id, start_at)
        return self._update(existing, record)

    def _insert(
        self,
        record: RawSpeechRecord,
        candidate_id: UUID,
        start_at: datetime,
    ) -> MergeResult:
        location = self.geocoder.lookup(record.address or record.location_name)
        now = self.clock()
        speech = Speech(
            candidate_id=candidate_id,
            start_at=start_at,
            location_name=record.location_name,
            source_url=record.source_url or None,
            speakers=set(record.speakers),
            address=(location.address if location else None) or record.address,
            lat=location.lat if location else None,
            lng=location.lng if location else None,
            created_at=now,
            updated_at=now,
        )
        self.speeches.add(speech)
        log.info("Saved speech: %s @ %s", record.candidate_name, record.location_name)
        return MergeResult(speech=speech, outcome=MergeOutcome.INSERTED)

    def _update(self, speech: Speech, record: RawSpeechRecord) -> MergeResult:
        changes = diff_speech(speech, record, self.geocoder)
        if not changes:
            return MergeResult(speech=speech, outcome=MergeOutcome.UNCHANGED)

        for name, value in changes.items():
            setattr(speech, name, value)
        speech.updated_at = self.clock()
        log.info(
            "Updated speech: %s @ %s (%s)",
            record.candidate_name,
            speech.location_name,
            ", ".join(sorted(changes)),
        )
        return MergeResult(
            speech=speech,
            outcome=MergeOutcome.UPDATED,
            changed_fields=tuple(sorted(changes)),
        )
