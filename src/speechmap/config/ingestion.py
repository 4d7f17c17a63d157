"""Ingestion and scheduling defaults."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .env import env_float, optional_env_var
from .errors import ConfigurationError

DEFAULT_TIMEZONE = "Asia/Tokyo"
DEFAULT_SCHEDULE_INTERVAL_MINUTES = 60.0


@dataclass(frozen=True, slots=True)
class IngestionConfig:
    timezone: ZoneInfo = field(default_factory=lambda: ZoneInfo(DEFAULT_TIMEZONE))
    schedule_interval: timedelta = timedelta(minutes=DEFAULT_SCHEDULE_INTERVAL_MINUTES)


def _load_timezone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ConfigurationError(f"Unknown timezone: {name}") from exc


def get_ingestion_config() -> IngestionConfig:
    timezone = _load_timezone(optional_env_var("SPEECHMAP_TIMEZONE") or DEFAULT_TIMEZONE)
    minutes = env_float("SPEECHMAP_SCHEDULE_INTERVAL_MINUTES", DEFAULT_SCHEDULE_INTERVAL_MINUTES)
    if minutes <= 0:
        raise ConfigurationError("SPEECHMAP_SCHEDULE_INTERVAL_MINUTES must be positive")
    return IngestionConfig(timezone=timezone, schedule_interval=timedelta(minutes=minutes))
