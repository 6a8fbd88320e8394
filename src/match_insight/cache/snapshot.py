"""In-process snapshot of upcoming fixtures, swapped wholesale on refresh."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Iterable, Mapping, Optional, Tuple

from match_insight.providers.models import FixtureSummary

logger = logging.getLogger(__name__)

FixtureLoader = Callable[[], Iterable[FixtureSummary]]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class _Snapshot:
    entries: Tuple[FixtureSummary, ...] = ()
    index: Mapping[str, FixtureSummary] = field(default_factory=dict)
    refreshed_at: Optional[datetime] = None


class FixtureCache:
    """Read-mostly fixture list with ``Empty -> Populated`` lifecycle.

    A refresh builds the complete new snapshot before taking the lock, so readers
    only ever see the previous snapshot or the next one. A failed refresh keeps the
    previous snapshot.
    """

    def __init__(self, clock: Callable[[], datetime] = _utcnow) -> None:
        self._lock = threading.Lock()
        self._snapshot = _Snapshot()
        self._clock = clock

    def _current(self) -> _Snapshot:
        with self._lock:
            return self._snapshot

    @property
    def is_populated(self) -> bool:
        return self._current().refreshed_at is not None

    @property
    def refreshed_at(self) -> Optional[datetime]:
        return self._current().refreshed_at

    def list(self) -> Tuple[FixtureSummary, ...]:
        return self._current().entries

    def lookup(self, match_id: str) -> Optional[FixtureSummary]:
        return self._current().index.get(str(match_id))

    def replace(self, entries: Iterable[FixtureSummary]) -> None:
        entries = tuple(entries)
        snapshot = _Snapshot(
            entries=entries,
            index={entry.match_id: entry for entry in entries},
            refreshed_at=self._clock(),
        )
        with self._lock:
            self._snapshot = snapshot

    def refresh(self, loader: FixtureLoader) -> bool:
        """Load a fresh fixture list and swap it in; return ``False`` on failure."""

        try:
            entries = tuple(loader())
        except Exception:
            # The serving path keeps the last good snapshot.
            logger.exception("fixture cache refresh failed; keeping %d cached fixtures", len(self.list()))
            return False
        self.replace(entries)
        logger.info("fixture cache refreshed with %d fixtures", len(entries))
        return True


__all__ = ["FixtureCache", "FixtureLoader"]
