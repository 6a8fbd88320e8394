"""Typed records parsed from provider payloads.

Provider responses are loosely typed JSON. Every record below is built through a
``from_payload`` classmethod which checks the fields the pipeline depends on and
raises :class:`MalformedPayloadError` naming the missing paths, so the rest of the
code never has to guess whether a key exists.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

from match_insight.providers.errors import MalformedPayloadError

_MISSING = object()
_YEAR_TOKEN = re.compile(r"\d{4}|\d{2}")


def lookup(payload: Any, path: str) -> Any:
    """Walk a dotted ``path`` (list indices allowed) and return the value or a sentinel."""

    current = payload
    for segment in path.split("."):
        if isinstance(current, Mapping):
            current = current.get(segment, _MISSING)
        elif isinstance(current, Sequence) and not isinstance(current, (str, bytes)):
            try:
                current = current[int(segment)]
            except (ValueError, IndexError):
                return _MISSING
        else:
            return _MISSING
        if current is _MISSING or current is None:
            return _MISSING
    return current


def require(payload: Any, paths: Iterable[str], what: str) -> None:
    missing = [path for path in paths if lookup(payload, path) is _MISSING]
    if missing:
        raise MalformedPayloadError(f"{what} payload is incomplete", missing)


def require_mapping(payload: Any, path: str, what: str) -> Mapping[str, Any]:
    """Return the object at ``path``; anything other than a JSON object is malformed."""

    value = lookup(payload, path)
    if not isinstance(value, Mapping):
        raise MalformedPayloadError(f"{what} payload is not an object at {path!r}")
    return value


def _get(payload: Any, path: str, default: Any = None) -> Any:
    value = lookup(payload, path)
    return default if value is _MISSING else value


def _text(value: Any, default: str = "N/A") -> str:
    if value is None:
        return default
    text = str(value).strip()
    return text or default


def _number(value: Any, default: float = 0) -> float:
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return int(number) if number.is_integer() else number


def _list(value: Any) -> List[Any]:
    if isinstance(value, list):
        return value
    return []


def parse_kickoff(value: Any) -> datetime:
    """Parse provider kickoff strings such as ``2024-09-28 14:00:00`` as UTC."""

    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as exc:
        raise MalformedPayloadError(f"Unrecognised kickoff timestamp {value!r}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


@dataclass(frozen=True)
class TeamRef:
    team_id: str
    name: str

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "TeamRef":
        require(payload, ("tid", "tname"), "team")
        return cls(team_id=str(payload["tid"]), name=str(payload["tname"]).strip())


@dataclass(frozen=True)
class Venue:
    name: str = "Unknown Venue"
    location: str = "Unknown Location"

    @classmethod
    def from_payload(cls, payload: Any) -> "Venue":
        if not isinstance(payload, Mapping):
            return cls()
        return cls(
            name=_text(payload.get("name"), "Unknown Venue"),
            location=_text(payload.get("location"), "Unknown Location"),
        )


@dataclass(frozen=True)
class LineupPlayer:
    player_id: str
    name: str
    position: str
    match_position: str

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "LineupPlayer":
        return cls(
            player_id=_text(payload.get("pid"), ""),
            name=_text(payload.get("pname"), "Unknown"),
            position=_text(payload.get("position")),
            match_position=_text(payload.get("matchposition")),
        )


@dataclass(frozen=True)
class Lineup:
    formation: str
    starters: Tuple[LineupPlayer, ...]
    substitutes: Tuple[LineupPlayer, ...]

    @classmethod
    def from_payload(cls, payload: Any) -> Optional["Lineup"]:
        """Return ``None`` when the side has no announced lineup."""

        if not isinstance(payload, Mapping):
            return None
        lineup = payload.get("lineup")
        if not isinstance(lineup, Mapping) or not _list(lineup.get("player")):
            return None
        return cls(
            formation=_text(lineup.get("formation"), "Unknown Formation"),
            starters=tuple(
                LineupPlayer.from_payload(item) for item in lineup["player"] if isinstance(item, Mapping)
            ),
            substitutes=tuple(
                LineupPlayer.from_payload(item)
                for item in _list(payload.get("substitutes"))
                if isinstance(item, Mapping)
            ),
        )


@dataclass(frozen=True)
class HeadToHead:
    home_wins: int = 0
    away_wins: int = 0
    draws: int = 0

    @classmethod
    def from_payload(cls, payload: Any) -> Optional["HeadToHead"]:
        if not isinstance(payload, Mapping):
            return None
        return cls(
            home_wins=int(_number(payload.get("totalhomewin"))),
            away_wins=int(_number(payload.get("totalawaywin"))),
            draws=int(_number(payload.get("totaldraw"))),
        )


@dataclass(frozen=True)
class MatchRecord:
    """Primary record of a fixture: the prerequisite for every other fetch."""

    match_id: str
    competition_id: str
    competition_name: Optional[str]
    home: TeamRef
    away: TeamRef
    venue: Venue
    kickoff: datetime
    kickoff_raw: str
    home_lineup: Optional[Lineup] = None
    away_lineup: Optional[Lineup] = None
    head_to_head: Optional[HeadToHead] = None

    @classmethod
    def from_payload(cls, items: Mapping[str, Any], match_id: str) -> "MatchRecord":
        require(
            items,
            (
                "match_info.0.competition.cid",
                "match_info.0.teams.home.tid",
                "match_info.0.teams.home.tname",
                "match_info.0.teams.away.tid",
                "match_info.0.teams.away.tname",
                "match_info.0.datestart",
            ),
            "match info",
        )
        info = require_mapping(items, "match_info.0", "match info")
        lineup = items.get("lineup") if isinstance(items.get("lineup"), Mapping) else {}
        return cls(
            match_id=match_id,
            competition_id=str(info["competition"]["cid"]),
            competition_name=_get(info, "competition.cname"),
            home=TeamRef.from_payload(info["teams"]["home"]),
            away=TeamRef.from_payload(info["teams"]["away"]),
            venue=Venue.from_payload(info.get("venue")),
            kickoff=parse_kickoff(info["datestart"]),
            kickoff_raw=str(info["datestart"]),
            home_lineup=Lineup.from_payload(lineup.get("home")),
            away_lineup=Lineup.from_payload(lineup.get("away")),
            head_to_head=HeadToHead.from_payload(items.get("headtohead")),
        )


@dataclass(frozen=True)
class StandingRow:
    team_name: str
    team_id: Optional[str]
    position: Any
    points: Any
    played: Any
    wins: Any
    draws: Any
    losses: Any
    goals_for: Any
    goals_against: Any
    goal_difference: Any
    promotion: str

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "StandingRow":
        require(payload, ("tname",), "standings row")
        promotion_type = _get(payload, "promotion.type")
        promotion_name = _get(payload, "promotion.name")
        if promotion_type or promotion_name:
            promotion = f"{_text(promotion_type)} ({_text(promotion_name)})"
        else:
            promotion = "None"
        tid = payload.get("tid")
        return cls(
            team_name=str(payload["tname"]).strip(),
            team_id=str(tid) if tid is not None else None,
            position=_number(payload.get("position")),
            points=_number(payload.get("pointstotal")),
            played=_number(payload.get("playedtotal")),
            wins=_number(payload.get("wintotal")),
            draws=_number(payload.get("drawtotal")),
            losses=_number(payload.get("losstotal")),
            goals_for=_number(payload.get("goalsfortotal")),
            goals_against=_number(payload.get("goalsagainsttotal")),
            goal_difference=_number(payload.get("goaldifftotal")),
            promotion=promotion,
        )


def _standings(rows: Any) -> Tuple[StandingRow, ...]:
    return tuple(StandingRow.from_payload(row) for row in _list(rows) if isinstance(row, Mapping))


@dataclass(frozen=True)
class CompetitionInfo:
    competition_id: str
    name: str
    abbreviation: str = ""
    team_names: Tuple[str, ...] = ()
    group_name: str = "N/A"
    overall_table: Tuple[StandingRow, ...] = ()
    home_table: Tuple[StandingRow, ...] = ()
    away_table: Tuple[StandingRow, ...] = ()

    @classmethod
    def placeholder(cls, competition_id: str = "", name: str = "Unknown Competition") -> "CompetitionInfo":
        return cls(competition_id=competition_id, name=name)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "CompetitionInfo":
        require(payload, ("cid",), "competition")
        point_table = _get(payload, "point_table.0", {})
        tables = point_table.get("tables") if isinstance(point_table, Mapping) else None
        if isinstance(tables, list):
            overall, home, away = _standings(tables), (), ()
        elif isinstance(tables, Mapping):
            overall = _standings(tables.get("total") or tables.get("overall"))
            home = _standings(tables.get("home"))
            away = _standings(tables.get("away"))
        else:
            overall, home, away = (), (), ()

        group = "N/A"
        if isinstance(point_table, Mapping) and (point_table.get("name") or point_table.get("groupname")):
            group = f"{_text(point_table.get('name'))} ({_text(point_table.get('groupname'))})"

        return cls(
            competition_id=str(payload["cid"]),
            name=_text(payload.get("cname"), "Unknown Competition"),
            abbreviation=_text(payload.get("abbr"), ""),
            team_names=tuple(
                _text(team.get("tname"), "Unknown")
                for team in _list(payload.get("teams"))
                if isinstance(team, Mapping)
            ),
            group_name=group,
            overall_table=overall,
            home_table=home,
            away_table=away,
        )


@dataclass(frozen=True)
class CompetitionPlayerStat:
    player_id: str
    name: str
    team_name: str
    goals: Any = 0
    assists: Any = 0
    shots_on_target: Any = 0
    shots_off_target: Any = 0
    big_chances_created: Any = 0
    passing_accuracy: Any = 0
    duels_won: Any = 0
    saves: Any = 0
    yellow_cards: Any = 0
    red_cards: Any = 0

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "CompetitionPlayerStat":
        require(payload, ("name",), "competition statistics row")
        team = payload.get("team")
        team_name = team.get("name") if isinstance(team, Mapping) else team
        return cls(
            player_id=_text(payload.get("pid"), ""),
            name=str(payload["name"]).strip(),
            team_name=_text(team_name, "Unknown"),
            goals=_number(payload.get("goals")),
            assists=_number(payload.get("assist")),
            shots_on_target=_number(payload.get("shotsontarget")),
            shots_off_target=_number(payload.get("shotsofftarget")),
            big_chances_created=_number(payload.get("bigchancecreated")),
            passing_accuracy=_number(payload.get("passingaccuracy")),
            duels_won=_number(payload.get("duelswon")),
            saves=_number(payload.get("saves")),
            yellow_cards=_number(payload.get("yellowcard")),
            red_cards=_number(payload.get("redcard")),
        )


@dataclass(frozen=True)
class PresquadPlayer:
    player_id: str
    name: str
    role: str
    rating: Any

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "PresquadPlayer":
        require(payload, ("pid",), "presquad player")
        return cls(
            player_id=str(payload["pid"]),
            name=_text(payload.get("pname"), "Unknown"),
            role=_text(payload.get("role")),
            rating=_number(payload.get("rating")),
        )


@dataclass(frozen=True)
class Presquad:
    home: Tuple[PresquadPlayer, ...] = ()
    away: Tuple[PresquadPlayer, ...] = ()

    @classmethod
    def from_payload(cls, items: Mapping[str, Any]) -> "Presquad":
        require(items, ("teams",), "presquad")
        teams = items["teams"]
        return cls(
            home=tuple(
                PresquadPlayer.from_payload(p) for p in _list(_get(teams, "home")) if isinstance(p, Mapping)
            ),
            away=tuple(
                PresquadPlayer.from_payload(p) for p in _list(_get(teams, "away")) if isinstance(p, Mapping)
            ),
        )


@dataclass(frozen=True)
class PeriodScore:
    home: int = 0
    away: int = 0

    @classmethod
    def from_payload(cls, payload: Any) -> "PeriodScore":
        if not isinstance(payload, Mapping):
            return cls()
        return cls(home=int(_number(payload.get("home"))), away=int(_number(payload.get("away"))))


@dataclass(frozen=True)
class RecentMatch:
    """A finished fixture as reported by the team-matches endpoint."""

    match_id: str
    home: TeamRef
    away: TeamRef
    home_score: Any
    away_score: Any
    winner: Optional[str]
    first_half: PeriodScore
    second_half: PeriodScore
    full_time: PeriodScore
    played_on: Optional[datetime]

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "RecentMatch":
        require(
            payload,
            ("teams.home.tid", "teams.home.tname", "teams.away.tid", "teams.away.tname", "result"),
            "team match",
        )
        result = payload["result"]
        periods = payload.get("periods") if isinstance(payload.get("periods"), Mapping) else {}
        played_on: Optional[datetime] = None
        if payload.get("datestart"):
            try:
                played_on = parse_kickoff(payload["datestart"])
            except MalformedPayloadError:
                played_on = None
        winner = result.get("winner") if isinstance(result, Mapping) else None
        return cls(
            match_id=_text(payload.get("mid"), ""),
            home=TeamRef.from_payload(payload["teams"]["home"]),
            away=TeamRef.from_payload(payload["teams"]["away"]),
            home_score=_number(_get(result, "home")),
            away_score=_number(_get(result, "away")),
            winner=str(winner).lower() if winner else None,
            first_half=PeriodScore.from_payload(periods.get("p1")),
            second_half=PeriodScore.from_payload(periods.get("p2")),
            full_time=PeriodScore.from_payload(periods.get("ft")),
            played_on=played_on,
        )


@dataclass(frozen=True)
class TeamSpell:
    team_name: str
    start_date: str
    end_date: str
    shirt: str


@dataclass(frozen=True)
class SeasonStat:
    team_name: str
    competition_name: str
    year: str
    goals: Any = 0
    assists: Any = 0
    yellow_cards: Any = 0
    red_cards: Any = 0
    matches: Any = 0
    minutes_played: Any = 0
    shots_on_goal: Any = 0
    shots_off_goal: Any = 0
    shots_blocked: Any = 0
    penalties: Any = 0
    corners: Any = 0
    offside: Any = 0

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "SeasonStat":
        data = payload.get("data") if isinstance(payload.get("data"), Mapping) else {}
        return cls(
            team_name=_text(payload.get("tname"), "Unknown"),
            competition_name=_text(payload.get("cname"), "Unknown"),
            year=_text(payload.get("year")),
            goals=_number(data.get("goals")),
            assists=_number(data.get("assists")),
            yellow_cards=_number(data.get("yellowcards")),
            red_cards=_number(data.get("redcards")),
            matches=_number(data.get("matches")),
            minutes_played=_number(data.get("minutesplayed")),
            shots_on_goal=_number(data.get("shotsongoal")),
            shots_off_goal=_number(data.get("shotsoffgoal")),
            shots_blocked=_number(data.get("shotsblocked")),
            penalties=_number(data.get("penalties")),
            corners=_number(data.get("corners")),
            offside=_number(data.get("offside")),
        )


def season_in_recent_years(year: Any, current_year: int, span: int = 3) -> bool:
    """Return True when a season label falls within the last ``span`` calendar years.

    Labels come as ``2024``, ``2023/24`` or ``23/24``; any 4-digit or 2-digit
    token matching one of the recent years counts.
    """

    if year is None:
        return False
    recent = [current_year - offset for offset in range(span)]
    full = {str(value) for value in recent}
    short = {str(value)[-2:] for value in recent}
    for token in _YEAR_TOKEN.findall(str(year)):
        if (len(token) == 4 and token in full) or (len(token) == 2 and token in short):
            return True
    return False


@dataclass(frozen=True)
class PlayerProfile:
    player_id: str
    full_name: str
    position: str
    height: str
    weight: str
    foot: str
    teams_played: Tuple[TeamSpell, ...] = ()
    seasons: Tuple[SeasonStat, ...] = ()

    @classmethod
    def from_payload(
        cls,
        items: Mapping[str, Any],
        player_id: str,
        *,
        current_year: int,
    ) -> "PlayerProfile":
        info = require_mapping(items, "player_info", "player profile")
        spells = tuple(
            TeamSpell(
                team_name=_text(_get(spell, "team.name"), "Unknown"),
                start_date=_text(spell.get("startdate")),
                end_date=_text(spell.get("enddate")),
                shirt=_text(spell.get("shirt")),
            )
            for spell in _list(items.get("team_played"))
            if isinstance(spell, Mapping)
        )
        seasons = tuple(
            SeasonStat.from_payload(season)
            for season in _list(_get(items, "stats.seasons"))
            if isinstance(season, Mapping) and season_in_recent_years(season.get("year"), current_year)
        )
        return cls(
            player_id=player_id,
            full_name=_text(info.get("fullname")),
            position=_text(info.get("positionname")),
            height=_text(info.get("height")),
            weight=_text(info.get("weight")),
            foot=_text(info.get("foot")),
            teams_played=spells,
            seasons=seasons,
        )


@dataclass(frozen=True)
class WeatherSnapshot:
    temperature: Any
    description: str
    wind_speed: Any
    humidity: Any

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "WeatherSnapshot":
        require(
            payload,
            ("main.temp", "main.humidity", "weather.0.description", "wind.speed"),
            "weather",
        )
        return cls(
            temperature=_number(payload["main"]["temp"]),
            description=str(lookup(payload, "weather.0.description")),
            wind_speed=_number(payload["wind"]["speed"]),
            humidity=_number(payload["main"]["humidity"]),
        )


@dataclass(frozen=True)
class RosterEntry:
    """Side-data row describing a player's availability for a team."""

    team: str
    name: str
    position: str = ""
    status: str = "available"


@dataclass(frozen=True)
class FixtureSummary:
    """Lightweight upcoming-fixture entry held by the fixture cache."""

    match_id: str
    status: str
    home_team: str
    away_team: str
    kickoff: str
    competition_name: str = ""
    raw: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "FixtureSummary":
        require(payload, ("mid", "teams.home.tname", "teams.away.tname"), "fixture")
        return cls(
            match_id=str(payload["mid"]),
            status=_text(payload.get("status_str") or payload.get("status"), "unknown"),
            home_team=str(payload["teams"]["home"]["tname"]),
            away_team=str(payload["teams"]["away"]["tname"]),
            kickoff=_text(payload.get("datestart"), ""),
            competition_name=_text(_get(payload, "competition.cname"), ""),
            raw=dict(payload),
        )


__all__ = [
    "CompetitionInfo",
    "CompetitionPlayerStat",
    "FixtureSummary",
    "HeadToHead",
    "Lineup",
    "LineupPlayer",
    "MatchRecord",
    "PeriodScore",
    "PlayerProfile",
    "Presquad",
    "PresquadPlayer",
    "RecentMatch",
    "RosterEntry",
    "SeasonStat",
    "StandingRow",
    "TeamRef",
    "TeamSpell",
    "Venue",
    "WeatherSnapshot",
    "lookup",
    "parse_kickoff",
    "require",
    "require_mapping",
    "season_in_recent_years",
]
