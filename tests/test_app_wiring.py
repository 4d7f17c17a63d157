from __future__ import annotations

from datetime import timedelta

import pytest

from speechmap import app
from speechmap.adapters.feeds import JsonFeedSource
from speechmap.adapters.google_places import GooglePlacesGeocoder
from speechmap.config import GeocodingConfig, IngestionConfig, SourceDefinition
from speechmap.config.geocoding import default_geocoding_resilience
from speechmap.domain.errors import SourceConfigurationError
from speechmap.domain.ingestion import SourceRegistry
from speechmap.domain.model import GeocodeResult
from speechmap.scheduler import StartToken
from tests.helpers.speeches import (
    CountingGeocodeProvider,
    FakeUnitOfWorkFactory,
    InMemoryStore,
    StaticSource,
    make_record,
)


def _geocoding(api_key: str | None) -> GeocodingConfig:
    return GeocodingConfig(api_key=api_key, resilience=default_geocoding_resilience())


def test_build_source_registry_from_definitions() -> None:
    registry = app.build_source_registry(
        [
            SourceDefinition(name="a", organization="A党", url="https://example.org/a.json"),
            SourceDefinition(name="b", organization="B党", url="https://example.org/b.json"),
        ]
    )

    assert list(registry) == ["a", "b"]
    source = registry.get_source("b")
    assert isinstance(source, JsonFeedSource)
    assert source.organization == "B党"
    assert source.url == "https://example.org/b.json"


def test_build_source_registry_rejects_duplicates() -> None:
    definition = SourceDefinition(name="a", organization="A党", url="https://example.org/a.json")

    with pytest.raises(SourceConfigurationError, match="Duplicate source name"):
        app.build_source_registry([definition, definition])


def test_geocoder_factory_without_key_skips_lookups(store: InMemoryStore) -> None:
    factory = app.build_geocoder_factory(_geocoding(None))
    uow = FakeUnitOfWorkFactory(store)()

    geocoder = factory(uow.repositories)

    assert geocoder.lookup("渋谷駅前") is None
    assert store.geocode_cache == {}


def test_geocoder_factory_with_key_uses_places(store: InMemoryStore) -> None:
    factory = app.build_geocoder_factory(_geocoding("secret"))
    uow = FakeUnitOfWorkFactory(store)()

    geocoder = factory(uow.repositories)

    assert isinstance(geocoder.provider, GooglePlacesGeocoder)


def test_geocoder_factory_prefers_explicit_provider(store: InMemoryStore) -> None:
    provider = CountingGeocodeProvider(default=GeocodeResult(lat=1.0, lng=2.0, address="住所"))
    factory = app.build_geocoder_factory(_geocoding("secret"), provider=provider)
    uow = FakeUnitOfWorkFactory(store)()

    assert factory(uow.repositories).lookup("渋谷駅前") is not None
    assert provider.queries == ["渋谷駅前 Japan"]


def test_start_scheduler_runs_orchestrator_once_per_token(
    fake_uow_factory: FakeUnitOfWorkFactory,
) -> None:
    fake_uow_factory.store.organization("A党")
    source = StaticSource(name="a", organization="A党", records=[make_record()])
    orchestrator = app.build_orchestrator(
        registry=SourceRegistry.from_sources([source]),
        unit_of_work_factory=fake_uow_factory,
        geocoder_factory=app.build_geocoder_factory(_geocoding(None)),
        ingestion=IngestionConfig(),
    )
    token = StartToken()

    scheduler = app.start_scheduler(token, interval=timedelta(hours=1), orchestrator=orchestrator)
    assert scheduler is not None
    try:
        scheduler.join(0.5)
        again = app.start_scheduler(token, interval=timedelta(hours=1), orchestrator=orchestrator)
    finally:
        scheduler.stop(timeout=5.0)

    assert again is None
    assert source.extract_calls >= 1
    assert len(fake_uow_factory.store.speeches) == 1
