"""Port for publishers of speech announcements."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from speechmap.domain.model import RawSpeechRecord


@runtime_checkable
class SpeechSource(Protocol):
    """One publisher's extraction routine.

    ``extract`` either returns every record it found or raises; there is no
    per-record error channel. Network failures should surface as
    ``SourceFetchError``.
    """

    @property
    def name(self) -> str: ...

    @property
    def organization(self) -> str: ...

    def extract(self) -> Sequence[RawSpeechRecord]: ...


__all__ = ["SpeechSource"]
