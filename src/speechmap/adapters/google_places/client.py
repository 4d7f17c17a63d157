"""Geocoding provider backed by the Google Places text search endpoint."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from speechmap.adapters.http_resilience import ResilientClient
from speechmap.config.geocoding import get_geocoding_config
from speechmap.domain.errors import GeocodeProviderError
from speechmap.domain.model import GeocodeResult

from .schema import SearchTextRequest, SearchTextResponse

if TYPE_CHECKING:
    from collections.abc import Callable

    from speechmap.config import GeocodingConfig, ResilienceConfig

log = getLogger(__name__)

SEARCH_TEXT_PATH = "/v1/places:searchText"
FIELD_MASK = "places.location,places.formattedAddress"


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


def first_result(response: SearchTextResponse) -> GeocodeResult | None:
    """Return the first place that carries both coordinates and an address."""

    for place in response.places:
        if place.location is not None and place.formatted_address:
            return GeocodeResult(
                lat=place.location.latitude,
                lng=place.location.longitude,
                address=place.formatted_address,
            )
    return None


@dataclass(slots=True)
class GooglePlacesGeocoder:
    config: GeocodingConfig = field(default_factory=get_geocoding_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )

    def __post_init__(self) -> None:
        if not self.config.api_key:
            raise ValueError("GooglePlacesGeocoder requires an API key")

    def lookup(self, query: str) -> GeocodeResult | None:
        return asyncio.run(self._lookup_async(query))

    async def _lookup_async(self, query: str) -> GeocodeResult | None:
        body = SearchTextRequest(
            text_query=query,
            language_code=self.config.language_code,
            region_code=self.config.region_code,
        )
        headers = {
            "X-Goog-Api-Key": self.config.api_key or "",
            "X-Goog-FieldMask": FIELD_MASK,
        }
        async with self.client_factory(self.config.resilience) as client:
            try:
                raw = await client.post_json(
                    SEARCH_TEXT_PATH,
                    body.model_dump(by_alias=True),
                    headers=headers,
                )
            except httpx.HTTPStatusError as exc:
                raise GeocodeProviderError(
                    f"Places API responded {exc.response.status_code} for {query!r}"
                ) from exc
            except httpx.HTTPError as exc:
                raise GeocodeProviderError(f"Places API request failed for {query!r}: {exc}") from exc
            except ValueError as exc:
                raise GeocodeProviderError(f"Places API returned non-JSON for {query!r}") from exc

        try:
            payload = SearchTextResponse.model_validate(raw)
        except ValidationError as exc:
            raise GeocodeProviderError(f"Unexpected Places API payload for {query!r}") from exc

        result = first_result(payload)
        if result is None:
            log.info("No place found for %r", query)
        return result
