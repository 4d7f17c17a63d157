"""Retry, rate-limit and cache settings shared by the outbound HTTP clients."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from collections.abc import Mapping

DEFAULT_USER_AGENT = "speechmap/0.1"

# Receives the decoded JSON body; returning False keeps the response out of the cache.
ShouldCacheHook = Callable[[object], bool]


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    """Bounded retries for idempotent calls and the Places search POST."""

    total: int = 3
    backoff_factor: float = 0.5
    max_backoff_wait: float = 10.0
    retry_methods: frozenset[str] = frozenset({"GET", "POST"})
    retry_statuses: frozenset[int] = frozenset({429, 500, 502, 503, 504})

    @classmethod
    def disabled(cls) -> RetryPolicy:
        return cls(total=0)


@dataclass(slots=True, frozen=True)
class RateLimit:
    max_calls: int
    per_seconds: float


@dataclass(slots=True, frozen=True)
class CacheConfig:
    """Response cache; ``backend="sqlite"`` stores under the data dir unless ``path`` is set."""

    ttl_seconds: float | None = None
    backend: Literal["sqlite", "memory"] = "sqlite"
    path: str | None = None
    should_cache: ShouldCacheHook | None = None


@dataclass(slots=True, frozen=True)
class ResilienceConfig:
    name: str
    base_url: str | None = None
    timeout_seconds: float = 30.0
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    ratelimit: RateLimit | None = None
    cache: CacheConfig | None = None
    headers: Mapping[str, str] | None = None
    user_agent: str = DEFAULT_USER_AGENT
