"""Time-refreshed fixture cache feeding the listing endpoints."""

from match_insight.cache.refresher import DEFAULT_REFRESH_SECONDS, FixtureCacheRefresher
from match_insight.cache.snapshot import FixtureCache, FixtureLoader

__all__ = ["DEFAULT_REFRESH_SECONDS", "FixtureCache", "FixtureCacheRefresher", "FixtureLoader"]
