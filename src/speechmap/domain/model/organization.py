"""Organizations (parties) and the candidates who speak for them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .base import Entity

if TYPE_CHECKING:
    from uuid import UUID

DEFAULT_ORGANIZATION_COLOR = "#808080"


@dataclass(eq=False, kw_only=True)
class Organization(Entity):
    """Reference data, seeded out of band. ``name`` is unique."""

    name: str
    color: str = DEFAULT_ORGANIZATION_COLOR


@dataclass(eq=False, kw_only=True)
class Candidate(Entity):
    """A speaker identity, unique on ``(name, organization_id)``.

    Names are compared as exact strings: two spellings are two candidates.
    """

    name: str
    organization_id: UUID
