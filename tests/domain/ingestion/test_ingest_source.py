from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

import pytest

from speechmap.domain.errors import OrganizationNotFoundError, PersistenceConflictError
from speechmap.domain.ingestion import GeocodeCache, ingest_source
from tests.helpers.speeches import (
    CountingGeocodeProvider,
    FakeUnitOfWork,
    FakeUnitOfWorkFactory,
    FetchErrorSource,
    FixedClock,
    InMemoryStore,
    StaticSource,
    make_record,
)

if TYPE_CHECKING:
    from zoneinfo import ZoneInfo

    from speechmap.domain.ports import SpeechRepositories


def _geocoder_factory(provider: CountingGeocodeProvider | None = None):  # noqa: ANN202
    def factory(repositories: SpeechRepositories) -> GeocodeCache:
        return GeocodeCache(entries=repositories.geocode_cache, provider=provider)

    return factory


def test_ingest_source_persists_every_record(
    store: InMemoryStore,
    fake_uow_factory: FakeUnitOfWorkFactory,
    clock: FixedClock,
    tokyo: ZoneInfo,
) -> None:
    organization = store.organization("A党")
    source = StaticSource(
        name="a",
        organization="A党",
        records=[
            make_record("山田太郎", start_at=datetime(2025, 7, 1, 10, 0)),  # noqa: DTZ001
            make_record("山田太郎", start_at=datetime(2025, 7, 1, 14, 0)),  # noqa: DTZ001
            make_record("佐藤花子", start_at=datetime(2025, 7, 1, 10, 0)),  # noqa: DTZ001
        ],
    )

    stats = ingest_source(
        source,
        unit_of_work_factory=fake_uow_factory,
        geocoder_factory=_geocoder_factory(),
        timezone=tokyo,
        clock=clock,
    )

    assert (stats.inserted, stats.updated, stats.unchanged, stats.skipped) == (3, 0, 0, 0)
    assert stats.count == 3
    assert len(store.speeches) == 3
    assert {candidate.name for candidate in store.candidates} == {"山田太郎", "佐藤花子"}
    assert all(candidate.organization_id == organization.id for candidate in store.candidates)
    # one unit of work for the organization, then one per record
    assert len(fake_uow_factory.created) == 4
    assert fake_uow_factory.commits == 3


def test_second_run_reports_unchanged(
    store: InMemoryStore,
    fake_uow_factory: FakeUnitOfWorkFactory,
    clock: FixedClock,
    tokyo: ZoneInfo,
) -> None:
    store.organization("A党")
    source = StaticSource(name="a", organization="A党", records=[make_record()])
    kwargs = {
        "unit_of_work_factory": fake_uow_factory,
        "geocoder_factory": _geocoder_factory(),
        "timezone": tokyo,
        "clock": clock,
    }

    ingest_source(source, **kwargs)  # type: ignore[arg-type]
    stats = ingest_source(source, **kwargs)  # type: ignore[arg-type]

    assert (stats.inserted, stats.unchanged) == (0, 1)
    assert stats.count == 1


def test_unknown_organization_aborts_before_extraction(
    fake_uow_factory: FakeUnitOfWorkFactory,
    clock: FixedClock,
    tokyo: ZoneInfo,
) -> None:
    source = StaticSource(name="a", organization="未登録党", records=[make_record()])

    with pytest.raises(OrganizationNotFoundError):
        ingest_source(
            source,
            unit_of_work_factory=fake_uow_factory,
            geocoder_factory=_geocoder_factory(),
            timezone=tokyo,
            clock=clock,
        )

    assert source.extract_calls == 0


def test_fetch_error_degrades_to_empty_run(
    store: InMemoryStore,
    fake_uow_factory: FakeUnitOfWorkFactory,
    clock: FixedClock,
    tokyo: ZoneInfo,
) -> None:
    store.organization("A党")

    stats = ingest_source(
        FetchErrorSource(name="a", organization="A党"),
        unit_of_work_factory=fake_uow_factory,
        geocoder_factory=_geocoder_factory(),
        timezone=tokyo,
        clock=clock,
    )

    assert stats.count == 0
    assert store.speeches == []


class _ConflictOnceUnitOfWork(FakeUnitOfWork):
    def commit(self) -> None:
        raise PersistenceConflictError("UNIQUE constraint failed: speech.candidate_id, speech.start_at")


def test_record_level_failures_are_skipped(
    store: InMemoryStore,
    clock: FixedClock,
    tokyo: ZoneInfo,
) -> None:
    store.organization("A党")
    created: list[FakeUnitOfWork] = []

    def uow_factory() -> FakeUnitOfWork:
        # the second record's unit of work fails at commit
        uow = _ConflictOnceUnitOfWork(store) if len(created) == 2 else FakeUnitOfWork(store)
        created.append(uow)
        return uow

    source = StaticSource(
        name="a",
        organization="A党",
        records=[
            make_record("一郎", start_at=datetime(2025, 7, 1, 9, 0)),  # noqa: DTZ001
            make_record("二郎", start_at=datetime(2025, 7, 1, 10, 0)),  # noqa: DTZ001
            make_record("三郎", start_at=datetime(2025, 7, 1, 11, 0)),  # noqa: DTZ001
        ],
    )

    stats = ingest_source(
        source,
        unit_of_work_factory=uow_factory,
        geocoder_factory=_geocoder_factory(),
        timezone=tokyo,
        clock=clock,
    )

    assert stats.skipped == 1
    assert stats.inserted == 2
    assert created[2].rollbacks == 1


def test_unexpected_record_errors_do_not_stop_the_source(
    store: InMemoryStore,
    fake_uow_factory: FakeUnitOfWorkFactory,
    clock: FixedClock,
    tokyo: ZoneInfo,
) -> None:
    store.organization("A党")
    calls: list[str] = []

    def geocoder_factory(repositories: SpeechRepositories) -> GeocodeCache:
        calls.append("geocoder")
        if len(calls) == 1:
            raise RuntimeError("geocoder wiring failed")
        return GeocodeCache(entries=repositories.geocode_cache, provider=None)

    source = StaticSource(
        name="a",
        organization="A党",
        records=[
            make_record("一郎", start_at=datetime(2025, 7, 1, 9, 0)),  # noqa: DTZ001
            make_record("二郎", start_at=datetime(2025, 7, 1, 10, 0)),  # noqa: DTZ001
        ],
    )

    stats = ingest_source(
        source,
        unit_of_work_factory=fake_uow_factory,
        geocoder_factory=geocoder_factory,
        timezone=tokyo,
        clock=clock,
    )

    assert (stats.inserted, stats.skipped) == (1, 1)
