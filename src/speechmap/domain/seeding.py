"""Reference data for organizations."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from speechmap.domain.model import Organization

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from speechmap.domain.ports import SpeechUnitOfWork

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class OrganizationSeed:
    name: str
    color: str


DEFAULT_ORGANIZATIONS: tuple[OrganizationSeed, ...] = (
    OrganizationSeed("自由民主党", "#314b9b"),
    OrganizationSeed("立憲民主党", "#1e4d8e"),
    OrganizationSeed("日本維新の会", "#38b16a"),
    OrganizationSeed("公明党", "#f39800"),
    OrganizationSeed("日本共産党", "#db0027"),
    OrganizationSeed("国民民主党", "#ffb700"),
    OrganizationSeed("れいわ新選組", "#ed6d8a"),
    OrganizationSeed("社会民主党", "#22a7e5"),
    OrganizationSeed("参政党", "#ff8c00"),
    OrganizationSeed("無所属", "#808080"),
)


@dataclass(frozen=True, slots=True)
class SeedResult:
    created: int
    updated: int


def seed_organizations(
    unit_of_work_factory: Callable[[], SpeechUnitOfWork],
    organizations: Iterable[OrganizationSeed] = DEFAULT_ORGANIZATIONS,
) -> SeedResult:
    """Upsert organizations by name, refreshing the colour of existing rows."""

    created = 0
    updated = 0
    with unit_of_work_factory() as uow:
        repository = uow.repositories.organizations
        for seed in organizations:
            existing = repository.get_by_name(seed.name)
            if existing is None:
                repository.add(Organization(name=seed.name, color=seed.color))
                created += 1
            elif existing.color != seed.color:
                existing.color = seed.color
                updated += 1
        uow.commit()

    log.info("Seeded organizations: created=%s, updated=%s", created, updated)
    return SeedResult(created=created, updated=updated)
