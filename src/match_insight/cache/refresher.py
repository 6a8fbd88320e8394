"""Background thread that keeps a :class:`FixtureCache` current."""

from __future__ import annotations

import logging
import threading
from typing import Optional

from match_insight.cache.snapshot import FixtureCache, FixtureLoader

logger = logging.getLogger(__name__)

DEFAULT_REFRESH_SECONDS = 15 * 60.0


class FixtureCacheRefresher:
    """Refresh once synchronously on :meth:`start`, then every ``interval`` seconds."""

    def __init__(
        self,
        cache: FixtureCache,
        loader: FixtureLoader,
        *,
        interval: float = DEFAULT_REFRESH_SECONDS,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._cache = cache
        self._loader = loader
        self._interval = interval
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def cache(self) -> FixtureCache:
        return self._cache

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.is_running:
            return
        self._stop.clear()
        self._cache.refresh(self._loader)
        self._thread = threading.Thread(target=self._run, name="fixture-cache-refresher", daemon=True)
        self._thread.start()
        logger.info("fixture cache refresher started (every %.0fs)", self._interval)

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        self._stop.set()
        thread, self._thread = self._thread, None
        if thread is not None:
            thread.join(timeout)
            logger.info("fixture cache refresher stopped")

    def _run(self) -> None:
        while not self._stop.wait(self._interval):
            self._cache.refresh(self._loader)


__all__ = ["DEFAULT_REFRESH_SECONDS", "FixtureCacheRefresher"]
