"""Speech ingestion: geocoding cache, entity resolution, merging, orchestration."""

from __future__ import annotations

from .geocoding import GeocodeCache
from .merge import EventMerger, MergeOutcome, MergeResult
from .normalization import NameNormalizer, NormalizationReport
from .orchestrator import (
    IngestionOrchestrator,
    IngestionReport,
    SourceRegistry,
    SourceResult,
    SourceRunReport,
    SourceStatus,
)
from .pipeline import SourceRunStats, ingest_source
from .resolution import EntityResolver

__all__ = [
    "EntityResolver",
    "EventMerger",
    "GeocodeCache",
    "IngestionOrchestrator",
    "IngestionReport",
    "MergeOutcome",
    "MergeResult",
    "NameNormalizer",
    "NormalizationReport",
    "SourceRegistry",
    "SourceResult",
    "SourceRunReport",
    "SourceRunStats",
    "SourceStatus",
    "ingest_source",
]
