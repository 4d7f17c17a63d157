"""Where speechmap keeps its files.

Everything lives in one data directory: ``SPEECHMAP_DATA_DIR`` when set,
otherwise ``$XDG_DATA_HOME/speechmap`` (``~/.local/share/speechmap``).
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import optional_env_var

APP_DIR_NAME: Final[str] = "speechmap"
DATABASE_FILENAME: Final[str] = "speechmap.db"
HTTP_CACHE_FILENAME: Final[str] = "http_cache.db"
SOURCES_FILENAME: Final[str] = "sources.toml"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path

    @property
    def root(self) -> Path:
        return self.data_dir.expanduser().resolve()

    def path_for(self, filename: str, *, create_dir: bool = False) -> Path:
        if create_dir:
            self.root.mkdir(parents=True, exist_ok=True)
        return self.root / filename

    @property
    def database_path(self) -> Path:
        return self.path_for(DATABASE_FILENAME, create_dir=True)

    @property
    def http_cache_path(self) -> Path:
        return self.path_for(HTTP_CACHE_FILENAME, create_dir=True)

    @property
    def sources_path(self) -> Path:
        return self.path_for(SOURCES_FILENAME)


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str


def _default_data_dir() -> Path:
    xdg_data_home = optional_env_var("XDG_DATA_HOME")
    base = Path(xdg_data_home) if xdg_data_home else Path.home() / ".local" / "share"
    return base / APP_DIR_NAME


def get_storage_config() -> StorageConfig:
    env_dir = optional_env_var("SPEECHMAP_DATA_DIR")
    return StorageConfig(data_dir=Path(env_dir) if env_dir else _default_data_dir())


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    """``DATABASE_URI`` wins; otherwise a SQLite file in the data directory."""

    env_uri = optional_env_var("DATABASE_URI")
    if env_uri:
        return DatabaseConfig(uri=env_uri)
    database_path = (storage or get_storage_config()).database_path
    return DatabaseConfig(uri=f"sqlite+pysqlite:///{database_path}")


def get_http_cache_path() -> Path:
    return get_storage_config().http_cache_path
