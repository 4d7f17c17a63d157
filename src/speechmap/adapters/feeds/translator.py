"""Translate feed payloads into raw speech records."""

from __future__ import annotations

from typing import TYPE_CHECKING

from speechmap.domain.model import RawSpeechRecord

if TYPE_CHECKING:
    from .schema import SpeechItemPayload


def parse_speech_record(payload: SpeechItemPayload) -> RawSpeechRecord:
    return RawSpeechRecord(
        candidate_name=payload.candidate_name,
        start_at=payload.start_at,
        location_name=payload.location_name,
        source_url=payload.source_url,
        speakers=tuple(payload.speakers),
        address=payload.address,
    )
