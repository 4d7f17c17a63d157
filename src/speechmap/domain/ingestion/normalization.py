"""Post-ingestion sweep canonicalizing whitespace in stored names."""

from __future__ import annotations

import re
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from speechmap.domain.clock import Clock, utcnow

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from uuid import UUID

    from speechmap.domain.model import Candidate, Speech
    from speechmap.domain.ports import SpeechUnitOfWork

log = getLogger(__name__)

# str patterns are unicode-aware, so this also matches U+3000 (ideographic space)
_WHITESPACE = re.compile(r"\s+")


def strip_whitespace(name: str) -> str:
    return _WHITESPACE.sub("", name)


def normalize_speakers(speakers: Iterable[str]) -> set[str]:
    return {cleaned for cleaned in map(strip_whitespace, speakers) if cleaned}


@dataclass(frozen=True, slots=True)
class NormalizationReport:
    candidates_renamed: int = 0
    candidates_skipped: int = 0
    speeches_updated: int = 0

    @property
    def changed(self) -> bool:
        return bool(self.candidates_renamed or self.speeches_updated)


class NameNormalizer:
    """Full-table pass over candidate names and speaker sets.

    A candidate whose cleaned name is already taken within its organization is
    left untouched: duplicates are reported, never merged.
    """

    def __init__(
        self,
        unit_of_work_factory: Callable[[], SpeechUnitOfWork],
        *,
        clock: Clock = utcnow,
    ) -> None:
        self._unit_of_work_factory = unit_of_work_factory
        self._clock = clock

    def sweep(self) -> NormalizationReport:
        log.info("Running name normalization sweep")
        with self._unit_of_work_factory() as uow:
            repositories = uow.repositories
            renamed, skipped = self._normalize_candidates(repositories.candidates.list_all())
            updated = self._normalize_speeches(repositories.speeches.list_all())
            uow.commit()

        report = NormalizationReport(
            candidates_renamed=renamed,
            candidates_skipped=skipped,
            speeches_updated=updated,
        )
        log.info(
            "Name normalization finished: renamed=%s, skipped=%s, speeches=%s",
            report.candidates_renamed,
            report.candidates_skipped,
            report.speeches_updated,
        )
        return report

    def _normalize_candidates(self, candidates: Iterable[Candidate]) -> tuple[int, int]:
        pending = list(candidates)
        taken: dict[tuple[UUID, str], Candidate] = {
            (candidate.organization_id, candidate.name): candidate for candidate in pending
        }
        renamed = 0
        skipped = 0
        for candidate in pending:
            cleaned = strip_whitespace(candidate.name)
            if cleaned == candidate.name:
                continue
            if not cleaned:
                log.warning("Skipping candidate %s: name is blank after normalization", candidate.id)
                skipped += 1
                continue
            holder = taken.get((candidate.organization_id, cleaned))
            if holder is not None and holder is not candidate:
                log.warning(
                    "Skipping candidate update for %r (ID: %s): %r already exists as %s",
                    candidate.name,
                    candidate.id,
                    cleaned,
                    holder.id,
                )
                skipped += 1
                continue
            log.info("Updating candidate: %r -> %r", candidate.name, cleaned)
            del taken[(candidate.organization_id, candidate.name)]
            candidate.name = cleaned
            taken[(candidate.organization_id, cleaned)] = candidate
            renamed += 1
        return renamed, skipped

    def _normalize_speeches(self, speeches: Iterable[Speech]) -> int:
        updated = 0
        for speech in speeches:
            cleaned = normalize_speakers(speech.speakers)
            if cleaned == speech.speakers:
                continue
            log.info(
                "Updating speech speakers (ID: %s): %s -> %s",
                speech.id,
                sorted(speech.speakers),
                sorted(cleaned),
            )
            speech.speakers = cleaned
            speech.updated_at = self._clock()
            updated += 1
        return updated
