from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest

from speechmap.adapters.sqlalchemy import SqlAlchemyUnitOfWork, StartupError
from speechmap.adapters.sqlalchemy.unit_of_work import (
    configured_engine,
    is_started,
    shutdown,
    startup,
)
from speechmap.domain.errors import PersistenceConflictError
from speechmap.domain.model import Candidate, Organization, Speech

if TYPE_CHECKING:
    from collections.abc import Callable

    from sqlalchemy.engine import Engine


def test_unit_of_work_requires_startup() -> None:
    shutdown()

    with pytest.raises(StartupError):
        SqlAlchemyUnitOfWork()


def test_startup_twice_requires_force(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)
    try:
        assert is_started()
        assert configured_engine() is sqlite_engine
        with pytest.raises(StartupError):
            startup(engine=sqlite_engine)
    finally:
        shutdown()
    assert not is_started()


def test_commit_persists_and_uncommitted_work_is_discarded(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    with sqlite_unit_of_work() as uow:
        uow.repositories.organizations.add(Organization(name="A党"))
        uow.commit()

    with sqlite_unit_of_work() as uow:
        uow.repositories.organizations.add(Organization(name="B党"))

    with sqlite_unit_of_work() as uow:
        names = [org.name for org in uow.repositories.organizations.list_all()]

    assert names == ["A党"]


def test_exception_inside_block_rolls_back(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    with pytest.raises(RuntimeError), sqlite_unit_of_work() as uow:
        uow.repositories.organizations.add(Organization(name="A党"))
        raise RuntimeError("boom")

    with sqlite_unit_of_work() as uow:
        assert uow.repositories.organizations.get_by_name("A党") is None


def test_repositories_unavailable_outside_block(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    uow = sqlite_unit_of_work()

    with pytest.raises(StartupError):
        _ = uow.repositories


def test_unique_violation_becomes_persistence_conflict(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    organization = Organization(name="A党")
    candidate = Candidate(name="山田太郎", organization_id=organization.id)
    at = datetime(2025, 7, 1, 1, 0, tzinfo=UTC)
    with sqlite_unit_of_work() as uow:
        uow.repositories.organizations.add(organization)
        uow.repositories.candidates.add(candidate)
        uow.repositories.speeches.add(
            Speech(candidate_id=candidate.id, start_at=at, location_name="駅", created_at=at, updated_at=at)
        )
        uow.commit()

    with pytest.raises(PersistenceConflictError), sqlite_unit_of_work() as uow:
        uow.repositories.speeches.add(
            Speech(candidate_id=candidate.id, start_at=at, location_name="別", created_at=at, updated_at=at)
        )
        uow.commit()

    with sqlite_unit_of_work() as uow:
        speeches = uow.repositories.speeches.list_all()

    assert [speech.location_name for speech in speeches] == ["駅"]
