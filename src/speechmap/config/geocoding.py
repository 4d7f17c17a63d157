"""Geocoding provider configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

GOOGLE_PLACES_BASE_URL = "https://places.googleapis.com"
GEOCODE_TIMEOUT_SECONDS = 10.0
DEFAULT_COUNTRY_HINT = "Japan"
DEFAULT_LANGUAGE_CODE = "ja"
DEFAULT_REGION_CODE = "JP"


@dataclass(frozen=True, slots=True)
class GeocodingConfig:
    """Holds geocoding provider settings.

    ``api_key`` is optional: without it lookups are skipped and nothing is cached.
    """

    api_key: str | None
    resilience: ResilienceConfig
    country_hint: str = DEFAULT_COUNTRY_HINT
    language_code: str = DEFAULT_LANGUAGE_CODE
    region_code: str = DEFAULT_REGION_CODE

    @property
    def enabled(self) -> bool:
        return self.api_key is not None


def default_geocoding_resilience() -> ResilienceConfig:
    return ResilienceConfig(
        name="google-places",
        base_url=GOOGLE_PLACES_BASE_URL,
        timeout_seconds=GEOCODE_TIMEOUT_SECONDS,
        retry=RetryPolicy(total=2),
        ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
    )


def get_geocoding_config(*, resilience: ResilienceConfig | None = None) -> GeocodingConfig:
    return GeocodingConfig(
        api_key=optional_env_var("GOOGLE_PLACES_API_KEY"),
        resilience=resilience or default_geocoding_resilience(),
        country_hint=optional_env_var("SPEECHMAP_GEOCODE_COUNTRY_HINT") or DEFAULT_COUNTRY_HINT,
        language_code=optional_env_var("SPEECHMAP_GEOCODE_LANGUAGE") or DEFAULT_LANGUAGE_CODE,
        region_code=optional_env_var("SPEECHMAP_GEOCODE_REGION") or DEFAULT_REGION_CODE,
    )
