from __future__ import annotations

from datetime import timedelta
from zoneinfo import ZoneInfo

import pytest

from speechmap.config import ConfigurationError, get_geocoding_config, get_ingestion_config
from speechmap.config.env import env_float, optional_env_var


def test_optional_env_var_treats_blank_as_unset(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "   ")

    assert optional_env_var("EXAMPLE_VAR") is None


def test_optional_env_var_strips_value(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "  value ")

    assert optional_env_var("EXAMPLE_VAR") == "value"


def test_env_float_rejects_garbage(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_NUMBER", "soon")

    with pytest.raises(ConfigurationError, match="EXAMPLE_NUMBER"):
        env_float("EXAMPLE_NUMBER", 1.0)


def test_ingestion_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SPEECHMAP_TIMEZONE", raising=False)
    monkeypatch.delenv("SPEECHMAP_SCHEDULE_INTERVAL_MINUTES", raising=False)

    config = get_ingestion_config()

    assert config.timezone == ZoneInfo("Asia/Tokyo")
    assert config.schedule_interval == timedelta(hours=1)


def test_ingestion_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SPEECHMAP_TIMEZONE", "UTC")
    monkeypatch.setenv("SPEECHMAP_SCHEDULE_INTERVAL_MINUTES", "15")

    config = get_ingestion_config()

    assert config.timezone == ZoneInfo("UTC")
    assert config.schedule_interval == timedelta(minutes=15)


def test_ingestion_rejects_unknown_timezone(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SPEECHMAP_TIMEZONE", "Mars/Olympus_Mons")

    with pytest.raises(ConfigurationError, match="timezone"):
        get_ingestion_config()


def test_ingestion_rejects_non_positive_interval(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SPEECHMAP_TIMEZONE", raising=False)
    monkeypatch.setenv("SPEECHMAP_SCHEDULE_INTERVAL_MINUTES", "0")

    with pytest.raises(ConfigurationError, match="positive"):
        get_ingestion_config()


def test_geocoding_disabled_without_api_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("GOOGLE_PLACES_API_KEY", raising=False)

    config = get_geocoding_config()

    assert not config.enabled
    assert config.country_hint == "Japan"
    assert config.resilience.cache is None


def test_geocoding_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GOOGLE_PLACES_API_KEY", "secret")
    monkeypatch.setenv("SPEECHMAP_GEOCODE_COUNTRY_HINT", "日本")
    monkeypatch.setenv("SPEECHMAP_GEOCODE_LANGUAGE", "en")

    config = get_geocoding_config()

    assert config.enabled
    assert config.api_key == "secret"
    assert config.country_hint == "日本"
    assert config.language_code == "en"
    assert config.region_code == "JP"
