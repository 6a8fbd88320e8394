"""Build a :class:`CanonicalContext` for one match from every provider."""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from match_insight.aggregation.context import CanonicalContext, SquadPlayer, TeamContext
from match_insight.aggregation.errors import PrimaryNotFoundError, SecondaryDegraded
from match_insight.aggregation.fallbacks import NO_RECENT_MATCHES, fallback_for
from match_insight.aggregation.history import summarise_recent_form
from match_insight.aggregation.team_names import normalize_team_name
from match_insight.providers.errors import FetchError
from match_insight.providers.fixtures import SoccerDataClient
from match_insight.providers.models import (
    CompetitionInfo,
    Lineup,
    MatchRecord,
    Presquad,
    PresquadPlayer,
    RosterEntry,
    StandingRow,
    TeamRef,
)
from match_insight.providers.roster import RosterProvider, StaticRosterProvider
from match_insight.providers.weather import WeatherClient

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 8


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class _DegradationLog:
    """Collects fallback substitutions for a single aggregation run."""

    def __init__(self, match_id: str) -> None:
        self._match_id = match_id
        self.records: List[SecondaryDegraded] = []

    def substitute(self, source: str, fallback_key: str, reason: str) -> Any:
        logger.warning(
            "match %s: %s unavailable (%s); using fallback", self._match_id, source, reason
        )
        self.records.append(SecondaryDegraded(source=source, reason=reason))
        return fallback_for(fallback_key)

    @property
    def sources(self) -> Tuple[str, ...]:
        return tuple(record.source for record in self.records)


class ContextAggregator:
    """Fan out to every provider for one match and normalise the results.

    The primary match record is fetched first and is the only fatal step. The
    remaining sources are independent of each other and are fetched concurrently on
    an executor that lives only for the duration of one :meth:`aggregate` call;
    player profiles are fetched in a second concurrent wave once the presquad is
    known. Failed secondary sources are replaced by their declared fallback.
    """

    def __init__(
        self,
        soccer: SoccerDataClient,
        weather: WeatherClient,
        roster: Optional[RosterProvider] = None,
        *,
        max_workers: int = DEFAULT_MAX_WORKERS,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self._soccer = soccer
        self._weather = weather
        self._roster = roster or StaticRosterProvider()
        self._max_workers = max_workers
        self._clock = clock

    def aggregate(self, match_id: str) -> CanonicalContext:
        try:
            record = self._soccer.fetch_match(match_id)
        except FetchError as exc:
            logger.warning("match %s: primary record unavailable: %s", match_id, exc)
            raise PrimaryNotFoundError(match_id, str(exc)) from exc

        log = _DegradationLog(match_id)
        secondary = self._fetch_secondary(record, log)

        competition = secondary["competition"]
        if "competition" in log.sources:
            competition = competition_placeholder(record)
        presquad = secondary["presquad"]
        if not isinstance(presquad, Presquad):
            presquad = Presquad()
        roster: Sequence[RosterEntry] = secondary["roster"]

        profiles = self._fetch_profiles(presquad.home + presquad.away, log)

        home = self._team_context(
            record.home,
            lineup=self._lineup(record.home_lineup, "lineup.home", log),
            presquad=presquad.home,
            profiles=profiles,
            recent=secondary["recent_matches.home"],
            competition=competition,
            roster=roster,
        )
        away = self._team_context(
            record.away,
            lineup=self._lineup(record.away_lineup, "lineup.away", log),
            presquad=presquad.away,
            profiles=profiles,
            recent=secondary["recent_matches.away"],
            competition=competition,
            roster=roster,
        )

        head_to_head = record.head_to_head
        if head_to_head is None:
            head_to_head = log.substitute("head_to_head", "head_to_head", "not provided")

        context = CanonicalContext(
            match_id=record.match_id,
            kickoff=record.kickoff,
            kickoff_raw=record.kickoff_raw,
            venue=record.venue,
            competition=competition,
            home=home,
            away=away,
            weather=secondary["weather"],
            head_to_head=head_to_head,
            competition_stats=tuple(secondary["competition_stats"]),
            degraded=tuple(log.records),
        )
        logger.info(
            "match %s: context aggregated (%d degraded source(s)%s)",
            match_id,
            len(context.degraded),
            ": " + ", ".join(context.degraded_sources) if context.degraded else "",
        )
        return context

    # -- fan-out --------------------------------------------------------------------

    def _fetch_secondary(self, record: MatchRecord, log: _DegradationLog) -> Dict[str, Any]:
        # (source, fallback key, call); order is fixed so degraded records are stable.
        jobs: List[Tuple[str, str, Callable[[], Any]]] = [
            ("competition", "competition", lambda: self._soccer.fetch_competition(record.competition_id)),
            (
                "competition_stats",
                "competition_stats",
                lambda: self._soccer.fetch_competition_stats(record.competition_id),
            ),
            (
                "recent_matches.home",
                "recent_matches",
                lambda: self._soccer.fetch_team_matches(record.home.team_id),
            ),
            (
                "recent_matches.away",
                "recent_matches",
                lambda: self._soccer.fetch_team_matches(record.away.team_id),
            ),
            ("weather", "weather", lambda: self._weather.fetch(record.venue.location)),
            ("presquad", "presquad", lambda: self._soccer.fetch_presquad(record.match_id)),
            ("roster", "roster", lambda: tuple(self._roster.load())),
        ]

        with ThreadPoolExecutor(
            max_workers=min(self._max_workers, len(jobs)),
            thread_name_prefix=f"aggregate-{record.match_id}",
        ) as pool:
            futures: List[Tuple[str, str, Future]] = [
                (source, key, pool.submit(call)) for source, key, call in jobs
            ]
            results: Dict[str, Any] = {}
            for source, key, future in futures:
                try:
                    results[source] = future.result()
                except FetchError as exc:
                    results[source] = log.substitute(source, key, str(exc))
        return results

    def _fetch_profiles(
        self, players: Sequence[PresquadPlayer], log: _DegradationLog
    ) -> Dict[str, Any]:
        player_ids: List[str] = []
        for player in players:
            if player.player_id and player.player_id not in player_ids:
                player_ids.append(player.player_id)
        if not player_ids:
            return {}

        current_year = self._clock().year
        profiles: Dict[str, Any] = {}
        with ThreadPoolExecutor(
            max_workers=min(self._max_workers, len(player_ids)),
            thread_name_prefix="player-profile",
        ) as pool:
            futures = [
                (
                    player_id,
                    pool.submit(
                        self._soccer.fetch_player_profile, player_id, current_year=current_year
                    ),
                )
                for player_id in player_ids
            ]
            for player_id, future in futures:
                try:
                    profiles[player_id] = future.result()
                except FetchError as exc:
                    profiles[player_id] = log.substitute(
                        f"player_profile.{player_id}", "player_profile", str(exc)
                    )
        return profiles

    # -- normalisation --------------------------------------------------------------

    @staticmethod
    def _lineup(lineup: Optional[Lineup], source: str, log: _DegradationLog) -> Optional[Lineup]:
        if lineup is None:
            return log.substitute(source, "lineup", "not provided")
        return lineup

    @staticmethod
    def _team_context(
        team: TeamRef,
        *,
        lineup: Optional[Lineup],
        presquad: Sequence[PresquadPlayer],
        profiles: Dict[str, Any],
        recent: Any,
        competition: CompetitionInfo,
        roster: Sequence[RosterEntry],
    ) -> TeamContext:
        canonical = normalize_team_name(team.name)
        if isinstance(recent, str):
            recent_form: Any = recent
        else:
            recent_form = summarise_recent_form(recent, team.team_id) or NO_RECENT_MATCHES
        squad = tuple(
            SquadPlayer(player=player, profile=profiles.get(player.player_id, fallback_for("player_profile")))
            for player in presquad
        )
        return TeamContext(
            team_id=team.team_id,
            name=team.name,
            canonical_name=canonical,
            lineup=lineup,
            squad=squad,
            recent_form=recent_form,
            standing=find_standing(competition.overall_table, team),
            roster=tuple(entry for entry in roster if normalize_team_name(entry.team) == canonical),
        )


def competition_placeholder(record: MatchRecord) -> CompetitionInfo:
    """Fallback competition carrying whatever the primary record already knows."""

    placeholder: CompetitionInfo = fallback_for("competition")
    return replace(
        placeholder,
        competition_id=record.competition_id,
        name=record.competition_name or placeholder.name,
    )


def find_standing(table: Sequence[StandingRow], team: TeamRef) -> Optional[StandingRow]:
    for row in table:
        if row.team_id and row.team_id == team.team_id:
            return row
    canonical = normalize_team_name(team.name)
    for row in table:
        if canonical and normalize_team_name(row.team_name) == canonical:
            return row
    return None


__all__ = ["ContextAggregator", "DEFAULT_MAX_WORKERS", "competition_placeholder", "find_standing"]
