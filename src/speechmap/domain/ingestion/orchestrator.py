"""Run registered speech sources and aggregate a status report."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from speechmap.domain.clock import Clock, utcnow
from speechmap.domain.errors import (
    EmptyRegistryError,
    SourceConfigurationError,
    UnknownSourceError,
)

from .normalization import NameNormalizer, NormalizationReport
from .pipeline import GeocoderFactory, SourceRunStats, UnitOfWorkFactory, ingest_source

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import tzinfo

    from speechmap.domain.ports import SpeechSource

log = getLogger(__name__)

COMPLETED_MESSAGE = "Ingestion completed"


class SourceStatus(StrEnum):
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class SourceResult:
    source_name: str
    status: SourceStatus
    count: int | None = None
    error: str | None = None
    stats: SourceRunStats | None = None

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {"source_name": self.source_name, "status": str(self.status)}
        if self.count is not None:
            payload["count"] = self.count
        if self.error is not None:
            payload["error"] = self.error
        return payload


@dataclass(frozen=True, slots=True)
class IngestionReport:
    message: str
    results: tuple[SourceResult, ...]
    normalization: NormalizationReport | None = None

    @property
    def failed(self) -> tuple[SourceResult, ...]:
        return tuple(result for result in self.results if result.status is SourceStatus.FAILED)

    def to_dict(self) -> dict[str, object]:
        return {"message": self.message, "results": [result.to_dict() for result in self.results]}


@dataclass(frozen=True, slots=True)
class SourceRunReport:
    message: str
    source_name: str
    count: int
    stats: SourceRunStats
    normalization: NormalizationReport | None = None

    def to_dict(self) -> dict[str, object]:
        return {"message": self.message, "source_name": self.source_name, "count": self.count}


class SourceRegistry(Mapping[str, "SpeechSource"]):
    """Sources keyed by identifier, built once at startup."""

    def __init__(self, sources: Mapping[str, SpeechSource] | None = None) -> None:
        self._sources: dict[str, SpeechSource] = dict(sources or {})

    @classmethod
    def from_factories(
        cls,
        factories: Mapping[str, Callable[[], SpeechSource]],
    ) -> SourceRegistry:
        return cls({name: factory() for name, factory in factories.items()})

    @classmethod
    def from_sources(cls, sources: Iterable[SpeechSource]) -> SourceRegistry:
        registered: dict[str, SpeechSource] = {}
        for source in sources:
            if source.name in registered:
                raise SourceConfigurationError(f"Duplicate source name: {source.name}")
            registered[source.name] = source
        return cls(registered)

    def __getitem__(self, name: str) -> SpeechSource:
        return self._sources[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._sources)

    def __len__(self) -> int:
        return len(self._sources)

    def get_source(self, name: str) -> SpeechSource:
        try:
            return self._sources[name]
        except KeyError:
            raise UnknownSourceError(name) from None


@dataclass(slots=True)
class IngestionOrchestrator:
    """Sequentially ingest every source, isolating failures per source.

    Every invocation ends with exactly one name normalization sweep.
    """

    registry: SourceRegistry
    unit_of_work_factory: UnitOfWorkFactory
    geocoder_factory: GeocoderFactory
    timezone: tzinfo
    clock: Clock = utcnow
    normalizer: NameNormalizer | None = field(default=None)

    def __post_init__(self) -> None:
        if self.normalizer is None:
            self.normalizer = NameNormalizer(self.unit_of_work_factory, clock=self.clock)

    def run_all(self) -> IngestionReport:
        if not self.registry:
            raise EmptyRegistryError("No speech sources are registered")

        results: list[SourceResult] = []
        for name, source in self.registry.items():
            try:
                stats = self._ingest(source)
            except Exception as exc:  # noqa: BLE001
                log.exception("Failed to ingest %s", name)
                results.append(
                    SourceResult(
                        source_name=name,
                        status=SourceStatus.FAILED,
                        error=f"{type(exc).__name__}: {exc}",
                    )
                )
                continue
            results.append(
                SourceResult(
                    source_name=name,
                    status=SourceStatus.SUCCESS,
                    count=stats.count,
                    stats=stats,
                )
            )

        normalization = self._sweep()
        return IngestionReport(
            message=COMPLETED_MESSAGE,
            results=tuple(results),
            normalization=normalization,
        )

    def run_one(self, source_name: str) -> SourceRunReport:
        source = self.registry.get_source(source_name)
        stats = self._ingest(source)
        normalization = self._sweep()
        return SourceRunReport(
            message=COMPLETED_MESSAGE,
            source_name=source_name,
            count=stats.count,
            stats=stats,
            normalization=normalization,
        )

    def _ingest(self, source: SpeechSource) -> SourceRunStats:
        return ingest_source(
            source,
            unit_of_work_factory=self.unit_of_work_factory,
            geocoder_factory=self.geocoder_factory,
            timezone=self.timezone,
            clock=self.clock,
        )

    def _sweep(self) -> NormalizationReport | None:
        if self.normalizer is None:
            return None
        try:
            return self.normalizer.sweep()
        except Exception:  # noqa: BLE001
            log.exception("Name normalization failed")
            return None
