"""Application configuration helpers."""

from __future__ import annotations

from .env import optional_env_var
from .errors import ConfigurationError
from .geocoding import GeocodingConfig, get_geocoding_config
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .ingestion import IngestionConfig, get_ingestion_config
from .logging import configure_logging
from .sources import SourceDefinition, load_source_definitions
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "CacheConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "GeocodingConfig",
    "IngestionConfig",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "SourceDefinition",
    "StorageConfig",
    "configure_logging",
    "get_database_config",
    "get_geocoding_config",
    "get_ingestion_config",
    "get_storage_config",
    "load_source_definitions",
    "optional_env_var",
]
