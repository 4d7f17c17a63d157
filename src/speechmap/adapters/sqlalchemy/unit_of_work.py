"""SQLAlchemy unit of work over the speech repositories.

``startup()`` must run once per process (or per test) before any unit of work
is created; it migrates the schema to head.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from speechmap.adapters.sqlalchemy.mappings import start_mappers
from speechmap.adapters.sqlalchemy.migrations import upgrade_head
from speechmap.adapters.sqlalchemy.repositories import (
    SqlAlchemyCandidateRepository,
    SqlAlchemyGeocodeCacheRepository,
    SqlAlchemyOrganizationRepository,
    SqlAlchemySpeechRepository,
)
from speechmap.config import get_database_config
from speechmap.domain.errors import PersistenceConflictError
from speechmap.domain.ports import SpeechRepositories

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine

log = getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when the database is used before ``startup()`` or configured twice."""


@dataclass(frozen=True, slots=True)
class _Database:
    engine: Engine
    sessions: sessionmaker[Session]


_database: _Database | None = None


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Bind the adapter to ``engine`` (or a new engine for ``database_uri``) and migrate it."""

    global _database  # noqa: PLW0603
    if _database is not None and not force:
        raise StartupError("Database already started. Pass force=True to reconfigure.")

    resolved = engine or create_engine(database_uri or get_database_config().uri, future=True)
    start_mappers()
    upgrade_head(engine=resolved)
    _database = _Database(
        engine=resolved,
        sessions=sessionmaker(bind=resolved, expire_on_commit=False),
    )
    log.debug("Database started: %s", resolved.url.render_as_string(hide_password=True))


def configured_engine() -> Engine | None:
    return _database.engine if _database is not None else None


def is_started() -> bool:
    return _database is not None


def shutdown() -> None:
    """Dispose the engine and forget it; ``startup()`` may be called again."""

    global _database  # noqa: PLW0603
    if _database is not None:
        _database.engine.dispose()
    _database = None


class SqlAlchemyUnitOfWork:
    """One session, one transaction; leaving the block without ``commit()`` discards changes."""

    def __init__(self) -> None:
        if _database is None:
            raise StartupError(
                "Database not started. Call speechmap.adapters.sqlalchemy.startup() first."
            )
        self._sessions = _database.sessions
        self._session: Session | None = None
        self._repositories: SpeechRepositories | None = None

    def __enter__(self) -> SqlAlchemyUnitOfWork:
        if self._session is not None:
            raise StartupError("Unit of work is already active")
        session = self._sessions()
        self._session = session
        self._repositories = SpeechRepositories(
            organizations=SqlAlchemyOrganizationRepository(session),
            candidates=SqlAlchemyCandidateRepository(session),
            speeches=SqlAlchemySpeechRepository(session),
            geocode_cache=SqlAlchemyGeocodeCacheRepository(session),
        )
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        session = self.session
        if exc_type is not None:
            session.rollback()
        # close() discards uncommitted work without expiring loaded instances
        session.close()
        self._session = None
        self._repositories = None
        return False

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work used outside its with-block")
        return self._session

    @property
    def repositories(self) -> SpeechRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work used outside its with-block")
        return self._repositories

    def commit(self) -> None:
        try:
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            log.warning("Commit rejected by a uniqueness constraint: %s", exc.orig)
            raise PersistenceConflictError(str(exc.orig)) from exc

    def rollback(self) -> None:
        self.session.rollback()


if TYPE_CHECKING:
    from speechmap.domain.ports import SpeechUnitOfWork

    _uow_check: SpeechUnitOfWork = SqlAlchemyUnitOfWork()
