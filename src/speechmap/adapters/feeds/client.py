"""Speech source reading a JSON feed over HTTP."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from speechmap.adapters.http_resilience import ResilientClient
from speechmap.config import CacheConfig, ResilienceConfig
from speechmap.domain.errors import SourceFetchError

from .schema import SpeechItemPayload, feed_items
from .translator import parse_speech_record

if TYPE_CHECKING:
    from collections.abc import Callable

    from speechmap.domain.model import RawSpeechRecord

log = getLogger(__name__)

FEED_TIMEOUT_SECONDS = 30.0
FEED_CACHE_TTL_SECONDS = 300.0


def _should_cache_payload(payload: object) -> bool:
    return bool(feed_items(payload))


def default_feed_resilience(name: str) -> ResilienceConfig:
    return ResilienceConfig(
        name=f"feed:{name}",
        timeout_seconds=FEED_TIMEOUT_SECONDS,
        cache=CacheConfig(
            ttl_seconds=FEED_CACHE_TTL_SECONDS,
            should_cache=_should_cache_payload,
        ),
        headers={"Accept": "application/json"},
    )


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


@dataclass(slots=True)
class JsonFeedSource:
    """Fetch one organization's speech feed; invalid items are skipped."""

    name: str
    organization: str
    url: str
    resilience: ResilienceConfig | None = None
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )

    def extract(self) -> list[RawSpeechRecord]:
        payload = asyncio.run(self._fetch_async())
        records: list[RawSpeechRecord] = []
        for index, item in enumerate(feed_items(payload)):
            try:
                records.append(parse_speech_record(SpeechItemPayload.model_validate(item)))
            except (ValidationError, ValueError) as exc:
                log.warning("Skipping invalid item %s from %s: %s", index, self.name, exc)
        log.info("Fetched %s records from %s", len(records), self.name)
        return records

    async def _fetch_async(self) -> object:
        config = self.resilience or default_feed_resilience(self.name)
        async with self.client_factory(config) as client:
            try:
                return await client.get_json(self.url)
            except httpx.HTTPError as exc:
                raise SourceFetchError(f"Failed to fetch {self.url}: {exc}") from exc
            except ValueError as exc:
                raise SourceFetchError(f"Feed {self.url} did not return JSON") from exc
