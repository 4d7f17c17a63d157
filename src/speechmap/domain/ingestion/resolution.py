"""Resolve freeform names into stable organization and candidate entities."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from speechmap.domain.errors import OrganizationNotFoundError
from speechmap.domain.ingestion.normalization import strip_whitespace
from speechmap.domain.model import Candidate

if TYPE_CHECKING:
    from uuid import UUID

    from speechmap.domain.model import Organization
    from speechmap.domain.ports import CandidateRepository, OrganizationRepository

log = getLogger(__name__)


@dataclass(slots=True)
class EntityResolver:
    """Exact-match entity resolution.

    A miss falls back to the whitespace-stripped name, which is the form the
    post-run name sweep leaves in storage. Otherwise no normalization is applied.
    """

    organizations: OrganizationRepository
    candidates: CandidateRepository

    def resolve_organization(self, name: str) -> Organization:
        organization = self.organizations.get_by_name(name)
        if organization is None:
            raise OrganizationNotFoundError(name)
        return organization

    def resolve_candidate(self, name: str, organization_id: UUID) -> Candidate:
        candidate = self.candidates.get_by_name(name, organization_id)
        if candidate is not None:
            return candidate
        swept = strip_whitespace(name)
        if swept and swept != name:
            candidate = self.candidates.get_by_name(swept, organization_id)
            if candidate is not None:
                return candidate
        candidate = Candidate(name=name, organization_id=organization_id)
        self.candidates.add(candidate)
        log.info("Created candidate %r (organization %s)", name, organization_id)
        return candidate
