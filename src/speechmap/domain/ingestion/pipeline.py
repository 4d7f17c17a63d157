"""Shared resolve -> merge -> persist template for any speech source."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from speechmap.domain.clock import Clock, utcnow
from speechmap.domain.errors import PersistenceConflictError, SourceFetchError

from .merge import EventMerger, MergeOutcome, MergeResult
from .resolution import EntityResolver

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import tzinfo
    from uuid import UUID

    from speechmap.domain.model import RawSpeechRecord
    from speechmap.domain.ports import (
        Geocoder,
        SpeechRepositories,
        SpeechSource,
        SpeechUnitOfWork,
    )

log = getLogger(__name__)

type UnitOfWorkFactory = Callable[[], SpeechUnitOfWork]
type GeocoderFactory = Callable[[SpeechRepositories], Geocoder]


@dataclass(slots=True)
class SourceRunStats:
    """Per-outcome counters for one source run."""

    source_name: str
    inserted: int = 0
    updated: int = 0
    unchanged: int = 0
    skipped: int = 0

    @property
    def count(self) -> int:
        """Records persisted or confirmed unchanged."""
        return self.inserted + self.updated + self.unchanged

    def record(self, outcome: MergeOutcome) -> None:
        if outcome is MergeOutcome.INSERTED:
            self.inserted += 1
        elif outcome is MergeOutcome.UPDATED:
            self.updated += 1
        else:
            self.unchanged += 1


def ingest_source(
    source: SpeechSource,
    *,
    unit_of_work_factory: UnitOfWorkFactory,
    geocoder_factory: GeocoderFactory,
    timezone: tzinfo,
    clock: Clock = utcnow,
) -> SourceRunStats:
    """Extract ``source`` and merge every record it yields.

    Raises ``OrganizationNotFoundError`` before extraction when the source's
    organization is unknown, and lets any extraction error other than
    ``SourceFetchError`` propagate. Record-level failures are logged and
    counted as skipped; each record is committed in its own unit of work.
    """

    log.info("Starting source: %s", source.name)
    organization_id = _resolve_organization_id(source, unit_of_work_factory)

    try:
        records = list(source.extract())
    except SourceFetchError as exc:
        log.warning("Source %s could not be fetched, treating as empty: %s", source.name, exc)
        records = []

    stats = SourceRunStats(source_name=source.name)
    for record in records:
        try:
            result = _ingest_record(
                record,
                organization_id,
                unit_of_work_factory=unit_of_work_factory,
                geocoder_factory=geocoder_factory,
                timezone=timezone,
                clock=clock,
            )
        except PersistenceConflictError as exc:
            log.warning(
                "Skipping conflicting speech (%s): %s @ %s: %s",
                source.name,
                record.candidate_name,
                record.start_at,
                exc,
            )
            stats.skipped += 1
            continue
        except Exception:  # noqa: BLE001
            log.exception(
                "Error saving speech (%s): %s @ %s",
                source.name,
                record.candidate_name,
                record.start_at,
            )
            stats.skipped += 1
            continue
        stats.record(result.outcome)

    log.info(
        "Source finished: %s (inserted=%s, updated=%s, unchanged=%s, skipped=%s)",
        source.name,
        stats.inserted,
        stats.updated,
        stats.unchanged,
        stats.skipped,
    )
    return stats


def _resolve_organization_id(
    source: SpeechSource,
    unit_of_work_factory: UnitOfWorkFactory,
) -> UUID:
    with unit_of_work_factory() as uow:
        repositories = uow.repositories
        resolver = EntityResolver(repositories.organizations, repositories.candidates)
        return resolver.resolve_organization(source.organization).id


def _ingest_record(
    record: RawSpeechRecord,
    organization_id: UUID,
    *,
    unit_of_work_factory: UnitOfWorkFactory,
    geocoder_factory: GeocoderFactory,
    timezone: tzinfo,
    clock: Clock,
) -> MergeResult:
    with unit_of_work_factory() as uow:
        repositories = uow.repositories
        resolver = EntityResolver(repositories.organizations, repositories.candidates)
        candidate = resolver.resolve_candidate(record.candidate_name, organization_id)
        merger = EventMerger(
            speeches=repositories.speeches,
            geocoder=geocoder_factory(repositories),
            timezone=timezone,
            clock=clock,
        )
        result = merger.merge(record, candidate.id)
        uow.commit()
    return result
