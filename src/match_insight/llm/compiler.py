"""Render a :class:`CanonicalContext` into the request sent to the model service.

Compilation is a pure function of the context: no I/O happens here, and the same
context always yields byte-identical :meth:`StructuredRequest.to_json` output.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Union

from match_insight.aggregation.context import CanonicalContext, SquadPlayer, TeamContext
from match_insight.aggregation.history import FormEntry
from match_insight.llm.schema import FUNCTION_DESCRIPTION, FUNCTION_NAME, strict_json_schema
from match_insight.prompts import load_template
from match_insight.providers.models import (
    CompetitionPlayerStat,
    Lineup,
    LineupPlayer,
    RosterEntry,
    StandingRow,
    WeatherSnapshot,
)

TEMPLATE_NAME = "match_prediction.md"
NOT_AVAILABLE = "Not Available"


def _canonical_json(value: Any) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


@dataclass(frozen=True)
class FunctionSpec:
    """A single callable function offered to the model, with its parameter schema.

    The schema is held as canonical JSON text so the function definition stays immutable.
    """

    name: str
    description: str
    parameters_json: str

    @property
    def parameters(self) -> Dict[str, Any]:
        return json.loads(self.parameters_json)

    def to_tool(self) -> Dict[str, Any]:
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }


PREDICTION_FUNCTION = FunctionSpec(
    name=FUNCTION_NAME,
    description=FUNCTION_DESCRIPTION,
    parameters_json=_canonical_json(strict_json_schema()),
)


@dataclass(frozen=True)
class StructuredRequest:
    match_id: str
    system_message: str
    user_message: str
    function: FunctionSpec

    def to_payload(self) -> Dict[str, Any]:
        """Return a fresh chat-completions payload; the model name is added by the client."""

        return {
            "messages": [
                {"role": "system", "content": self.system_message},
                {"role": "user", "content": self.user_message},
            ],
            "tools": [self.function.to_tool()],
            "tool_choice": {"type": "function", "function": {"name": self.function.name}},
        }

    def to_json(self) -> bytes:
        return _canonical_json(self.to_payload()).encode("utf-8")


def compile_context(context: CanonicalContext) -> StructuredRequest:
    template = load_template(TEMPLATE_NAME)
    user_message = template.render(build_prompt_view(context))
    return StructuredRequest(
        match_id=context.match_id,
        system_message=template.system_message,
        user_message=user_message.strip() + "\n",
        function=PREDICTION_FUNCTION,
    )


def build_prompt_view(context: CanonicalContext) -> Dict[str, Any]:
    """Flatten the context into pre-formatted strings and line lists for the template."""

    competition = context.competition
    return {
        "home_team": context.home.name,
        "away_team": context.away.name,
        "venue_name": context.venue.name,
        "venue_location": context.venue.location,
        "kickoff": context.kickoff_raw or context.kickoff.isoformat(),
        "competition_name": competition.name,
        "competition_teams": list(competition.team_names),
        "weather": format_weather(context.weather),
        "overall_table": [format_standing(row) for row in competition.overall_table],
        "home_table": [format_standing(row, "Home") for row in competition.home_table],
        "away_table": [format_standing(row, "Away") for row in competition.away_table],
        "group_name": competition.group_name,
        "head_to_head": {
            "home_wins": context.head_to_head.home_wins,
            "away_wins": context.head_to_head.away_wins,
            "draws": context.head_to_head.draws,
        },
        "home": _team_view(context.home, "Home"),
        "away": _team_view(context.away, "Away"),
        "competition_stats": [format_competition_stat(stat) for stat in context.competition_stats],
    }


def _team_view(team: TeamContext, label: str) -> Dict[str, Any]:
    recent: Union[str, List[str]]
    if isinstance(team.recent_form, str):
        recent = team.recent_form
    else:
        recent = [format_form_entry(entry) for entry in team.recent_form]
    return {
        "label": label,
        "name": team.name,
        "formation": _formation(team.lineup),
        "lineup": format_lineup(team.lineup),
        "substitutes": format_substitutes(team.lineup),
        "recent_form": recent,
        "roster": [format_roster_entry(entry) for entry in team.roster],
        "presquad": ", ".join(
            f"({squad.player.player_id},{squad.player.name}) ({squad.player.role}, {squad.player.rating})"
            for squad in team.squad
        )
        or NOT_AVAILABLE,
        "profiles": [format_profile(squad) for squad in team.squad],
    }


# -- line formatters ----------------------------------------------------------------


def format_weather(weather: Union[WeatherSnapshot, str]) -> str:
    if isinstance(weather, str):
        return weather
    return (
        f"Temperature: {weather.temperature}°C, Description: {weather.description}, "
        f"Wind Speed: {weather.wind_speed} m/s, Humidity: {weather.humidity}%"
    )


def format_standing(row: StandingRow, venue: str = "") -> str:
    prefix = f"{venue} " if venue else ""
    return (
        f"- {row.team_name}, Position: {row.position}, {prefix}Points: {row.points}, "
        f"Played: {row.played}, {prefix}Wins: {row.wins}, {prefix}Draws: {row.draws}, "
        f"{prefix}Losses: {row.losses}, {prefix}Goals For: {row.goals_for}, "
        f"{prefix}Goals Against: {row.goals_against}, {prefix}Goal Difference: {row.goal_difference}, "
        f"Promotion: {row.promotion}"
    )


def _formation(lineup: Optional[Lineup]) -> str:
    if lineup is None:
        return NOT_AVAILABLE
    return lineup.formation or "Unknown Formation"


def _player(player: LineupPlayer) -> str:
    return f"({player.player_id},{player.name}) ({player.position}, {player.match_position})"


def format_lineup(lineup: Optional[Lineup]) -> str:
    if lineup is None:
        return NOT_AVAILABLE
    players = ", ".join(_player(player) for player in lineup.starters)
    return f"Formation: {_formation(lineup)}, Players: {players or NOT_AVAILABLE}"


def format_substitutes(lineup: Optional[Lineup]) -> str:
    if lineup is None or not lineup.substitutes:
        return NOT_AVAILABLE
    return ", ".join(_player(player) for player in lineup.substitutes)


def format_form_entry(entry: FormEntry) -> str:
    def score(pair: Sequence[int]) -> str:
        return f"{pair[0]}-{pair[1]}"

    return "\n".join(
        (
            f"Team: {entry.team}",
            f"Opponent: {entry.opponent}",
            f"Date: {entry.played_on or 'Unknown Date'}",
            f"Result: {entry.team_score}-{entry.opponent_score} ({entry.outcome})",
            "Periods:",
            f"  First Half: {score(entry.first_half)}",
            f"  Second Half: {score(entry.second_half)}",
            f"  Full Time: {score(entry.full_time)}",
        )
    )


def format_roster_entry(entry: RosterEntry) -> str:
    status = entry.status.strip().lower()
    marker = {"injured": " (Injured)", "suspended": " (Suspended)"}.get(status, "")
    position = entry.position[:1] or "?"
    return f"{entry.name} ({position}){marker}"


def format_profile(squad: SquadPlayer) -> str:
    profile = squad.profile
    if isinstance(profile, str):
        return f"{squad.player.name}: {profile}"

    lines = [
        f"{profile.full_name} ({profile.position}), Height: {profile.height} cm, "
        f"Weight: {profile.weight} kg, Foot: {profile.foot}",
        "Stats:",
    ]
    if not profile.seasons:
        lines.append("Stats not available")
    for season in profile.seasons:
        lines.append(
            f"Team: {season.team_name}, Competition: {season.competition_name}, Year: {season.year}, "
            f"Goals: {season.goals}, Assists: {season.assists}, Yellow Cards: {season.yellow_cards}, "
            f"Red Cards: {season.red_cards}, Matches: {season.matches}, "
            f"Minutes Played: {season.minutes_played}, Shots On Goal: {season.shots_on_goal}, "
            f"Shots Off Goal: {season.shots_off_goal}, Shots Blocked: {season.shots_blocked}, "
            f"Penalties: {season.penalties}, Corners: {season.corners}, Offside: {season.offside}"
        )
    return "\n".join(lines)


def format_competition_stat(stat: CompetitionPlayerStat) -> str:
    return (
        f"Player: {stat.name}, Team: {stat.team_name}, Goals: {stat.goals}, "
        f"Assists: {stat.assists}, Shots On Target: {stat.shots_on_target}"
    )


__all__ = [
    "FunctionSpec",
    "PREDICTION_FUNCTION",
    "StructuredRequest",
    "build_prompt_view",
    "compile_context",
    "format_form_entry",
    "format_lineup",
    "format_profile",
    "format_standing",
    "format_weather",
]
