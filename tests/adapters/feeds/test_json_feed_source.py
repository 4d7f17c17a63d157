from __future__ import annotations

from collections.abc import Callable  # noqa: TC003
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from speechmap.adapters.feeds import JsonFeedSource, SpeechItemPayload, parse_speech_record
from speechmap.adapters.feeds.client import default_feed_resilience
from speechmap.adapters.http_resilience import ResilientClient
from speechmap.config import ResilienceConfig
from speechmap.config.http_resilience import RetryPolicy
from speechmap.domain.errors import SourceFetchError

FEED_URL = "https://example.org/feeds/a.json"

NO_CACHE = ResilienceConfig(name="feed:test", retry=RetryPolicy.disabled())


def _make_client_factory(
    handler: Callable[[httpx.Request], httpx.Response],
) -> Callable[[ResilienceConfig], ResilientClient]:
    async def async_handler(request: httpx.Request) -> httpx.Response:
        return handler(request)

    def factory(resilience: ResilienceConfig) -> ResilientClient:
        client = ResilientClient(resilience)
        client._client = httpx.AsyncClient(transport=httpx.MockTransport(async_handler))  # noqa: SLF001  # type: ignore[reportPrivateUsage]
        return client

    return factory


def _source(handler: Callable[[httpx.Request], httpx.Response]) -> JsonFeedSource:
    return JsonFeedSource(
        name="a-party",
        organization="A党",
        url=FEED_URL,
        resilience=NO_CACHE,
        client_factory=_make_client_factory(handler),
    )


@pytest.fixture
def sample_item() -> dict[str, object]:
    return {
        "candidate_name": "山田太郎",
        "start_at": "2025-07-01T10:00:00+09:00",
        "location_name": "渋谷駅前",
        "source_url": "https://example.org/speeches/1",
        "speakers": ["佐藤花子"],
        "address": "東京都渋谷区道玄坂",
    }


def test_extract_reads_list_payload(sample_item: dict[str, object]) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[sample_item])

    records = _source(handler).extract()

    assert [str(request.url) for request in seen] == [FEED_URL]
    assert len(records) == 1
    record = records[0]
    assert record.candidate_name == "山田太郎"
    assert record.start_at == datetime(2025, 7, 1, 10, 0, tzinfo=timezone(timedelta(hours=9)))
    assert record.speakers == ("佐藤花子",)
    assert record.address == "東京都渋谷区道玄坂"


def test_extract_reads_envelope_payload(sample_item: dict[str, object]) -> None:
    records = _source(
        lambda _request: httpx.Response(200, json={"speeches": [sample_item, sample_item]})
    ).extract()

    assert len(records) == 2


def test_extract_skips_invalid_items(sample_item: dict[str, object]) -> None:
    invalid = [
        {**sample_item, "candidate_name": "   "},
        {**sample_item, "start_at": "not a date"},
        {"location_name": "名前なし"},
        "not an object",
    ]

    records = _source(
        lambda _request: httpx.Response(200, json=[*invalid, sample_item])
    ).extract()

    assert [record.candidate_name for record in records] == ["山田太郎"]


def test_extract_unexpected_document_yields_nothing() -> None:
    records = _source(lambda _request: httpx.Response(200, json={"items": []})).extract()

    assert records == []


def test_extract_server_error_raises_fetch_error() -> None:
    source = _source(lambda _request: httpx.Response(503, text="maintenance"))

    with pytest.raises(SourceFetchError, match=FEED_URL):
        source.extract()


def test_extract_transport_error_raises_fetch_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(SourceFetchError):
        _source(handler).extract()


def test_extract_non_json_raises_fetch_error() -> None:
    source = _source(lambda _request: httpx.Response(200, text="<html>moved</html>"))

    with pytest.raises(SourceFetchError, match="JSON"):
        source.extract()


def test_payload_normalizes_optional_fields(sample_item: dict[str, object]) -> None:
    payload = SpeechItemPayload.model_validate(
        {**sample_item, "source_url": "  ", "address": "", "speakers": "伊藤"}
    )

    record = parse_speech_record(payload)

    assert record.source_url is None
    assert record.address is None
    assert record.speakers == ("伊藤",)


def test_default_resilience_caches_only_non_empty_feeds() -> None:
    config = default_feed_resilience("a-party")

    assert config.cache is not None
    should_cache = config.cache.should_cache
    assert should_cache is not None
    assert should_cache([{"candidate_name": "x"}])
    assert not should_cache([])
    assert not should_cache({"speeches": []})


def test_payload_drops_blank_speakers(sample_item: dict[str, object]) -> None:
    payload = SpeechItemPayload.model_validate({**sample_item, "speakers": ["鈴木 一郎", "", "  "]})

    assert payload.speakers == ["鈴木 一郎"]
    assert parse_speech_record(payload).speakers == ("鈴木 一郎",)
