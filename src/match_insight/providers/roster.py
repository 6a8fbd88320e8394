"""Interface for roster, injury and suspension side-data."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, Sequence, Tuple

from match_insight.providers.models import RosterEntry


class RosterProvider(ABC):
    """Source of per-team availability rows.

    The rows come from a different provider than the fixture data, so team names
    are free text and must be normalised before matching.
    """

    @abstractmethod
    def load(self) -> Sequence[RosterEntry]:
        """Return every known roster row."""


class StaticRosterProvider(RosterProvider):
    """Roster provider backed by an in-memory list."""

    def __init__(self, entries: Iterable[RosterEntry] = ()) -> None:
        self._entries: Tuple[RosterEntry, ...] = tuple(entries)

    def load(self) -> Sequence[RosterEntry]:
        return self._entries


__all__ = ["RosterProvider", "StaticRosterProvider"]
