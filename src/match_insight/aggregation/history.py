"""Turn provider fixtures into a team's recent-form entries."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from match_insight.providers.models import PeriodScore, RecentMatch


@dataclass(frozen=True)
class FormEntry:
    """One finished fixture seen from a single team's side."""

    team: str
    opponent: str
    played_on: Optional[str]
    team_score: object
    opponent_score: object
    outcome: str
    first_half: Tuple[int, int]
    second_half: Tuple[int, int]
    full_time: Tuple[int, int]


def _orient(score: PeriodScore, is_home: bool) -> Tuple[int, int]:
    return (score.home, score.away) if is_home else (score.away, score.home)


def _outcome(winner: Optional[str], is_home: bool) -> str:
    if winner in (None, "", "draw"):
        return "Draw"
    if (winner == "home" and is_home) or (winner == "away" and not is_home):
        return "Win"
    return "Loss"


def summarise_recent_match(match: RecentMatch, team_id: str) -> FormEntry:
    is_home = match.home.team_id == str(team_id)
    team, opponent = (match.home, match.away) if is_home else (match.away, match.home)
    team_score, opponent_score = (
        (match.home_score, match.away_score) if is_home else (match.away_score, match.home_score)
    )
    return FormEntry(
        team=team.name,
        opponent=opponent.name,
        played_on=match.played_on.date().isoformat() if match.played_on else None,
        team_score=team_score,
        opponent_score=opponent_score,
        outcome=_outcome(match.winner, is_home),
        first_half=_orient(match.first_half, is_home),
        second_half=_orient(match.second_half, is_home),
        full_time=_orient(match.full_time, is_home),
    )


def summarise_recent_form(matches: Iterable[RecentMatch], team_id: str) -> Tuple[FormEntry, ...]:
    return tuple(summarise_recent_match(match, team_id) for match in matches)


__all__ = ["FormEntry", "summarise_recent_form", "summarise_recent_match"]
