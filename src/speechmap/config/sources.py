"""Speech source definitions loaded from a TOML file.

The file lists one ``[[sources]]`` table per publisher::

    [[sources]]
    name = "LDP"
    organization = "自由民主党"
    url = "https://example.org/ldp/speeches.json"
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING, cast

from .env import optional_env_var
from .errors import ConfigurationError
from .storage import get_storage_config

if TYPE_CHECKING:
    from collections.abc import Mapping

log = getLogger(__name__)

_REQUIRED_KEYS = ("name", "organization", "url")


@dataclass(frozen=True, slots=True)
class SourceDefinition:
    name: str
    organization: str
    url: str


def get_sources_path() -> Path:
    env_path = optional_env_var("SPEECHMAP_SOURCES_FILE")
    if env_path:
        return Path(env_path).expanduser()
    return get_storage_config().sources_path


def load_source_definitions(path: Path | None = None) -> tuple[SourceDefinition, ...]:
    """Parse the sources file; a missing file means no sources are configured."""

    sources_path = path or get_sources_path()
    try:
        with sources_path.open("rb") as handle:
            document = tomllib.load(handle)
    except FileNotFoundError:
        log.warning("No sources file found at %s", sources_path)
        return ()
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(f"Invalid sources file {sources_path}: {exc}") from exc

    raw_sources = document.get("sources", [])
    if not isinstance(raw_sources, list):
        raise ConfigurationError(f"'sources' must be an array of tables in {sources_path}")

    definitions: list[SourceDefinition] = []
    seen: set[str] = set()
    for index, entry in enumerate(cast(list[object], raw_sources)):
        if not isinstance(entry, dict):
            raise ConfigurationError(f"sources[{index}] must be a table")
        definition = _parse_definition(index, cast("Mapping[str, object]", entry))
        if definition.name in seen:
            raise ConfigurationError(f"Duplicate source name: {definition.name}")
        seen.add(definition.name)
        definitions.append(definition)
    return tuple(definitions)


def _parse_definition(index: int, entry: Mapping[str, object]) -> SourceDefinition:
    values: dict[str, str] = {}
    for key in _REQUIRED_KEYS:
        value = entry.get(key)
        if not isinstance(value, str) or not value.strip():
            raise ConfigurationError(f"sources[{index}].{key} must be a non-empty string")
        values[key] = value.strip()
    return SourceDefinition(**values)
