"""Fallback values substituted when a secondary source is unavailable."""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Mapping

from match_insight.providers.models import CompetitionInfo, HeadToHead

NO_RECENT_MATCHES = "No recent matches available."
NO_WEATHER = "Weather data not available."
NO_PROFILE = "Profile not available."

FALLBACKS: Mapping[str, Any] = MappingProxyType(
    {
        "competition": CompetitionInfo.placeholder(),
        "competition_stats": (),
        "recent_matches": NO_RECENT_MATCHES,
        "weather": NO_WEATHER,
        "presquad": (),
        "roster": (),
        "player_profile": NO_PROFILE,
        "lineup": None,
        "head_to_head": HeadToHead(),
    }
)


def fallback_for(source: str) -> Any:
    """Return the declared fallback for ``source``; unknown sources are a programming error."""

    try:
        return FALLBACKS[source]
    except KeyError as exc:
        raise KeyError(f"No fallback declared for source '{source}'") from exc


__all__ = ["FALLBACKS", "NO_PROFILE", "NO_RECENT_MATCHES", "NO_WEATHER", "fallback_for"]
