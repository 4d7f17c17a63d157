"""Bundled Alembic revisions and helpers to apply them."""

from __future__ import annotations

from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING, Final

from alembic import command
from alembic.config import Config

from speechmap.config import get_database_config

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = getLogger(__name__)

MIGRATIONS_PATH: Final[Path] = Path(__file__).resolve().parent


def build_config(database_uri: str | None = None) -> Config:
    """Alembic config for the revisions in this package; no ``alembic.ini`` needed."""

    alembic_config = Config()
    alembic_config.set_main_option("script_location", str(MIGRATIONS_PATH))
    if database_uri:
        alembic_config.set_main_option("sqlalchemy.url", database_uri)
    return alembic_config


def upgrade_head(*, engine: Engine | None = None, database_uri: str | None = None) -> None:
    """Apply every pending revision, reusing ``engine`` when one is given."""

    if engine is None:
        command.upgrade(build_config(database_uri or get_database_config().uri), "head")
        return

    alembic_config = build_config()
    with engine.begin() as connection:
        alembic_config.attributes["connection"] = connection
        command.upgrade(alembic_config, "head")
    log.debug("Schema at head for %s", engine.url.render_as_string(hide_password=True))
