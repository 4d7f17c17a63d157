from __future__ import annotations

import logging
from collections.abc import Iterator  # noqa: TC003

import pytest

from speechmap.config import ConfigurationError, configure_logging


@pytest.fixture(autouse=True)
def _restore_root_logger() -> Iterator[None]:
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    httpx_level = logging.getLogger("httpx").level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.getLogger("httpx").setLevel(httpx_level)


def test_level_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SPEECHMAP_LOG_LEVEL", "debug")

    configure_logging(force=True)

    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.DEBUG


def test_http_loggers_are_quieted(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SPEECHMAP_LOG_LEVEL", raising=False)

    configure_logging(force=True)

    assert logging.getLogger().level == logging.INFO
    assert logging.getLogger("httpx").level == logging.WARNING


def test_unknown_level_is_rejected() -> None:
    with pytest.raises(ConfigurationError, match="log level"):
        configure_logging(level="chatty", force=True)
