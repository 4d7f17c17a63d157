"""Error taxonomy for the ingestion pipeline.

Source-level errors are isolated at the orchestrator boundary, record-level
errors at the record boundary.
"""

from __future__ import annotations


class IngestionError(RuntimeError):
    """Base class for ingestion failures."""


class SourceConfigurationError(IngestionError):
    """A source or the organization it publishes for is misconfigured."""


class UnknownSourceError(SourceConfigurationError):
    """Raised when a source name is not registered."""

    def __init__(self, source_name: str) -> None:
        super().__init__(f"No source registered under '{source_name}'")
        self.source_name = source_name


class OrganizationNotFoundError(SourceConfigurationError):
    """Raised when a source's organization was never seeded."""

    def __init__(self, organization_name: str) -> None:
        super().__init__(f"Organization '{organization_name}' not found")
        self.organization_name = organization_name


class EmptyRegistryError(SourceConfigurationError):
    """Raised when an orchestration is requested without any registered source."""


class SourceFetchError(IngestionError):
    """A source could not reach its publisher (network failure or timeout)."""


class PersistenceConflictError(IngestionError):
    """A write violated a uniqueness constraint, typically through a race."""


class GeocodeProviderError(IngestionError):
    """The geocoding provider failed to answer a query."""
