"""Root logger setup for the command line."""

from __future__ import annotations

import logging

from .env import optional_env_var
from .errors import ConfigurationError

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
# httpx logs every request at INFO; ingestion runs issue hundreds of them.
NOISY_LOGGERS = ("httpx", "httpcore", "hishel")


def _resolve_level(level: int | str | None) -> int:
    name = level if level is not None else optional_env_var("SPEECHMAP_LOG_LEVEL") or "INFO"
    if isinstance(name, int):
        return name
    resolved = logging.getLevelNamesMapping().get(name.upper())
    if resolved is None:
        raise ConfigurationError(f"Unknown log level: {name}")
    return resolved


def configure_logging(*, level: int | str | None = None, force: bool = False) -> None:
    """Configure the root logger via ``basicConfig``.

    ``level`` defaults to ``SPEECHMAP_LOG_LEVEL`` (INFO when unset). Third-party
    HTTP loggers are capped at WARNING unless DEBUG is requested.
    """

    resolved = _resolve_level(level)
    logging.basicConfig(level=resolved, format=LOG_FORMAT, datefmt="%H:%M:%S", force=force)
    noisy_level = resolved if resolved <= logging.DEBUG else max(resolved, logging.WARNING)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(noisy_level)
