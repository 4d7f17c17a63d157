"""Pydantic models describing the Places API (New) text search payloads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class PlacesBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class LatLngPayload(PlacesBaseModel):
    latitude: float
    longitude: float


class PlacePayload(PlacesBaseModel):
    location: LatLngPayload | None = None
    formatted_address: str | None = Field(default=None, alias="formattedAddress")


class SearchTextRequest(PlacesBaseModel):
    text_query: str = Field(alias="textQuery")
    language_code: str = Field(alias="languageCode")
    region_code: str = Field(alias="regionCode")


class SearchTextResponse(PlacesBaseModel):
    places: list[PlacePayload] = Field(default_factory=list[PlacePayload])
