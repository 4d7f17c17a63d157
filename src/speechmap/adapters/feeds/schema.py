"""Pydantic models describing JSON speech feeds."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime  # noqa: TC003
from typing import cast

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class FeedBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class SpeechItemPayload(FeedBaseModel):
    candidate_name: str = Field(min_length=1)
    start_at: datetime
    location_name: str
    source_url: str | None = None
    speakers: list[str] = Field(default_factory=list[str])
    address: str | None = None

    _normalize_optional = field_validator("source_url", "address", mode="before")(_blank_to_none)

    @field_validator("candidate_name")
    @classmethod
    def _require_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("candidate_name must not be blank")
        return value

    @field_validator("speakers", mode="before")
    @classmethod
    def _coerce_speakers(cls, value: object) -> object:
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        if isinstance(value, list):
            items = cast(list[object], value)
            return [item for item in items if not isinstance(item, str) or item.strip()]
        return value


def feed_items(payload: object) -> list[object]:
    """Return the raw item list of a feed document, or an empty list."""

    if isinstance(payload, list):
        return list(cast(list[object], payload))
    if isinstance(payload, Mapping):
        items = cast(Mapping[str, object], payload).get("speeches")
        if isinstance(items, list):
            return list(cast(list[object], items))
    return []
