"""Application orchestration entry points."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from speechmap.adapters.feeds import JsonFeedSource
from speechmap.adapters.google_places import GooglePlacesGeocoder
from speechmap.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork, is_started, startup
from speechmap.config import (
    get_geocoding_config,
    get_ingestion_config,
    load_source_definitions,
)
from speechmap.domain.ingestion import (
    GeocodeCache,
    IngestionOrchestrator,
    NameNormalizer,
    SourceRegistry,
)
from speechmap.domain.queries import (
    load_candidates,
    load_organizations,
    search_around,
    search_speeches,
    speech_stats,
)
from speechmap.domain.seeding import DEFAULT_ORGANIZATIONS, seed_organizations
from speechmap.scheduler import IntervalScheduler, StartToken

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime, timedelta
    from uuid import UUID

    from speechmap.config import GeocodingConfig, IngestionConfig, SourceDefinition
    from speechmap.domain.ingestion import (
        IngestionReport,
        NormalizationReport,
        SourceRunReport,
    )
    from speechmap.domain.ingestion.pipeline import GeocoderFactory, UnitOfWorkFactory
    from speechmap.domain.model import Organization, SpeechFilter, SpeechListing
    from speechmap.domain.ports import GeocodeProvider, SpeechRepositories
    from speechmap.domain.queries import CandidateListing, SpeechStats
    from speechmap.domain.seeding import OrganizationSeed, SeedResult


log = getLogger(__name__)


def _ensure_started() -> None:
    if not is_started():
        startup()


def build_source_registry(
    definitions: Iterable[SourceDefinition] | None = None,
) -> SourceRegistry:
    """Build the registry of feed sources declared in the sources file."""

    resolved = load_source_definitions() if definitions is None else tuple(definitions)
    registry = SourceRegistry.from_sources(
        JsonFeedSource(name=definition.name, organization=definition.organization, url=definition.url)
        for definition in resolved
    )
    log.info("Registered %s sources: %s", len(registry), ", ".join(registry))
    return registry


def build_geocoder_factory(
    config: GeocodingConfig | None = None,
    *,
    provider: GeocodeProvider | None = None,
) -> GeocoderFactory:
    """Return a factory binding the geocode cache to each unit of work's repositories."""

    geocoding = config or get_geocoding_config()
    effective_provider = provider
    if effective_provider is None and geocoding.enabled:
        effective_provider = GooglePlacesGeocoder(config=geocoding)
    if effective_provider is None:
        log.warning("GOOGLE_PLACES_API_KEY is not configured; speeches will not be geocoded")

    def factory(repositories: SpeechRepositories) -> GeocodeCache:
        return GeocodeCache(
            entries=repositories.geocode_cache,
            provider=effective_provider,
            country_hint=geocoding.country_hint,
        )

    return factory


def build_orchestrator(
    *,
    registry: SourceRegistry | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    geocoder_factory: GeocoderFactory | None = None,
    ingestion: IngestionConfig | None = None,
) -> IngestionOrchestrator:
    if unit_of_work_factory is None:
        _ensure_started()
    effective_uow = unit_of_work_factory or SqlAlchemyUnitOfWork
    settings = ingestion or get_ingestion_config()
    return IngestionOrchestrator(
        registry=registry if registry is not None else build_source_registry(),
        unit_of_work_factory=effective_uow,
        geocoder_factory=geocoder_factory or build_geocoder_factory(),
        timezone=settings.timezone,
    )


def run_all_sources(*, orchestrator: IngestionOrchestrator | None = None) -> IngestionReport:
    """Ingest every registered source once."""

    effective = orchestrator or build_orchestrator()
    report = effective.run_all()
    for result in report.results:
        if result.error is not None:
            log.error("Source %s failed: %s", result.source_name, result.error)
        else:
            log.info("Source %s succeeded: %s records", result.source_name, result.count)
    return report


def run_source(
    source_name: str,
    *,
    orchestrator: IngestionOrchestrator | None = None,
) -> SourceRunReport:
    """Ingest a single source by name."""

    effective = orchestrator or build_orchestrator()
    report = effective.run_one(source_name)
    log.info("Source %s succeeded: %s records", report.source_name, report.count)
    return report


def start_scheduler(
    token: StartToken,
    *,
    interval: timedelta | None = None,
    align_to_interval: bool = True,
    orchestrator: IngestionOrchestrator | None = None,
) -> IntervalScheduler | None:
    """Start recurring ingestion; returns ``None`` when ``token`` was already claimed."""

    effective = orchestrator or build_orchestrator()
    scheduler = IntervalScheduler(
        lambda: run_all_sources(orchestrator=effective),
        interval or get_ingestion_config().schedule_interval,
        align_to_interval=align_to_interval,
    )
    if not scheduler.start(token):
        return None
    return scheduler


def seed(
    organizations: Iterable[OrganizationSeed] = DEFAULT_ORGANIZATIONS,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> SeedResult:
    if unit_of_work_factory is None:
        _ensure_started()
    return seed_organizations(unit_of_work_factory or SqlAlchemyUnitOfWork, organizations)


def normalize(*, unit_of_work_factory: UnitOfWorkFactory | None = None) -> NormalizationReport:
    if unit_of_work_factory is None:
        _ensure_started()
    return NameNormalizer(unit_of_work_factory or SqlAlchemyUnitOfWork).sweep()


def list_speeches(
    criteria: SpeechFilter | None = None,
    *,
    around: datetime | None = None,
    range_hours: float = 1.0,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[SpeechListing]:
    """List speeches matching ``criteria``, or located speeches near ``around``."""

    effective_uow = _query_uow(unit_of_work_factory)
    if around is not None:
        return search_around(effective_uow, around, range_hours=range_hours, criteria=criteria)
    return search_speeches(effective_uow, criteria)


def _query_uow(unit_of_work_factory: UnitOfWorkFactory | None) -> UnitOfWorkFactory:
    if unit_of_work_factory is None:
        _ensure_started()
    return unit_of_work_factory or SqlAlchemyUnitOfWork


def list_organizations(
    *, unit_of_work_factory: UnitOfWorkFactory | None = None
) -> list[Organization]:
    return load_organizations(_query_uow(unit_of_work_factory))


def list_candidates(
    organization_id: UUID | None = None,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[CandidateListing]:
    return load_candidates(_query_uow(unit_of_work_factory), organization_id)


def stats(*, unit_of_work_factory: UnitOfWorkFactory | None = None) -> SpeechStats:
    return speech_stats(_query_uow(unit_of_work_factory))
