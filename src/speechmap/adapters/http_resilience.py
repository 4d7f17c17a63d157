"""Async JSON client with retries, rate limiting and an optional hishel cache."""

from __future__ import annotations

import json
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from aiolimiter import AsyncLimiter
from hishel import AsyncSqliteStorage, FilterPolicy
from hishel import Response as CachedResponse
from hishel._policies import BaseFilter
from hishel.httpx import AsyncCacheClient
from httpx_retries import Retry, RetryTransport

from speechmap.config.storage import get_http_cache_path

if TYPE_CHECKING:
    from collections.abc import Mapping
    from types import TracebackType

    from speechmap.config.http_resilience import (
        CacheConfig,
        ResilienceConfig,
        RetryPolicy,
        ShouldCacheHook,
    )

log = getLogger(__name__)


def build_retry(policy: RetryPolicy) -> Retry:
    return Retry(
        total=policy.total,
        backoff_factor=policy.backoff_factor,
        max_backoff_wait=policy.max_backoff_wait,
        allowed_methods=tuple(sorted(policy.retry_methods)),
        status_forcelist=tuple(sorted(policy.retry_statuses)),
    )


class ResilientClient:
    """``httpx.AsyncClient`` configured from a ``ResilienceConfig``.

    ``get_json`` and ``post_json`` raise ``httpx.HTTPStatusError`` for non-2xx
    answers, ``httpx.HTTPError`` for transport failures after retries, and
    ``ValueError`` when the body is not JSON.
    """

    def __init__(self, config: ResilienceConfig) -> None:
        self.config = config
        self._limiter = (
            AsyncLimiter(config.ratelimit.max_calls, config.ratelimit.per_seconds)
            if config.ratelimit is not None
            else None
        )
        self._client = self._build_client(config)

    @staticmethod
    def _build_client(config: ResilienceConfig) -> httpx.AsyncClient:
        headers = {"User-Agent": config.user_agent, **dict(config.headers or {})}
        transport = RetryTransport(retry=build_retry(config.retry))
        base_url = config.base_url or ""
        storage, policy = _build_cache_components(config.cache)
        if storage is None:
            return httpx.AsyncClient(
                base_url=base_url,
                headers=headers,
                timeout=config.timeout_seconds,
                transport=transport,
                follow_redirects=True,
            )
        log.debug("HTTP cache enabled for %s", config.name)
        return AsyncCacheClient(
            base_url=base_url,
            headers=headers,
            timeout=config.timeout_seconds,
            transport=transport,
            follow_redirects=True,
            storage=storage,
            policy=policy,
        )

    async def __aenter__(self) -> ResilientClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        method: str,
        url: str,
        *,
        json_body: object = None,
        headers: Mapping[str, str] | None = None,
    ) -> httpx.Response:
        if self._limiter is None:
            return await self._client.request(method, url, json=json_body, headers=headers)
        async with self._limiter:
            return await self._client.request(method, url, json=json_body, headers=headers)

    async def get_json(self, url: str, *, headers: Mapping[str, str] | None = None) -> object:
        response = await self.request("GET", url, headers=headers)
        return _decode(response)

    async def post_json(
        self,
        url: str,
        payload: object,
        *,
        headers: Mapping[str, str] | None = None,
    ) -> object:
        response = await self.request("POST", url, json_body=payload, headers=headers)
        return _decode(response)


def _decode(response: httpx.Response) -> object:
    response.raise_for_status()
    return response.json()


class _JsonBodyFilter(BaseFilter[CachedResponse]):
    """Keep a response out of the cache when its JSON body fails ``predicate``."""

    def __init__(self, predicate: ShouldCacheHook) -> None:
        self._predicate = predicate

    def needs_body(self) -> bool:
        return True

    def apply(self, item: CachedResponse, body: bytes | None) -> bool:  # noqa: ARG002
        if body is None:
            return False
        try:
            payload = json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            return False
        return bool(self._predicate(payload))


def _build_cache_components(
    config: CacheConfig | None,
) -> tuple[AsyncSqliteStorage | None, FilterPolicy | None]:
    if config is None:
        return None, None

    if config.backend == "memory":
        database_path = ":memory:"
    else:
        database_path = config.path or str(get_http_cache_path())

    storage = AsyncSqliteStorage(database_path=database_path, default_ttl=config.ttl_seconds)
    policy = (
        FilterPolicy(response_filters=[_JsonBodyFilter(config.should_cache)])
        if config.should_cache is not None
        else None
    )
    return storage, policy
