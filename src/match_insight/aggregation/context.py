"""Canonical, provider-agnostic view of one fixture."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple, Union

from match_insight.aggregation.errors import SecondaryDegraded
from match_insight.aggregation.history import FormEntry
from match_insight.providers.models import (
    CompetitionInfo,
    CompetitionPlayerStat,
    HeadToHead,
    Lineup,
    PlayerProfile,
    PresquadPlayer,
    RosterEntry,
    StandingRow,
    Venue,
    WeatherSnapshot,
)


@dataclass(frozen=True)
class SquadPlayer:
    """A presquad player together with their profile, or the profile fallback text."""

    player: PresquadPlayer
    profile: Union[PlayerProfile, str]


@dataclass(frozen=True)
class TeamContext:
    team_id: str
    name: str
    canonical_name: str
    lineup: Optional[Lineup]
    squad: Tuple[SquadPlayer, ...]
    recent_form: Union[Tuple[FormEntry, ...], str]
    standing: Optional[StandingRow]
    roster: Tuple[RosterEntry, ...]


@dataclass(frozen=True)
class CanonicalContext:
    """Everything the compiler needs for one match, built fresh per run.

    Fields typed ``X | str`` hold either live data or the documented fallback text
    for that source.
    """

    match_id: str
    kickoff: datetime
    kickoff_raw: str
    venue: Venue
    competition: CompetitionInfo
    home: TeamContext
    away: TeamContext
    weather: Union[WeatherSnapshot, str]
    head_to_head: HeadToHead
    competition_stats: Tuple[CompetitionPlayerStat, ...]
    degraded: Tuple[SecondaryDegraded, ...] = ()

    @property
    def degraded_sources(self) -> Tuple[str, ...]:
        return tuple(record.source for record in self.degraded)

    @property
    def is_degraded(self) -> bool:
        return bool(self.degraded)


__all__ = ["CanonicalContext", "SquadPlayer", "TeamContext"]
