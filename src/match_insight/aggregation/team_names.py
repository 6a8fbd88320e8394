"""
Team name canonicalisation shared by every cross-provider match.

Fixture data and roster side-data come from different providers that spell team
names differently ("Man Utd", "Manchester United"). Names are reduced to one
canonical form before comparison.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

TEAM_NAME_ALIASES: Mapping[str, str] = MappingProxyType(
    {
        "man united": "manchester united",
        "man utd": "manchester united",
        "man city": "manchester city",
        "nott’m forest": "nottingham forest",
        "nott'm forest": "nottingham forest",
        "notts forest": "nottingham forest",
        "wolves": "wolverhampton wanderers",
        "wolverhampton": "wolverhampton wanderers",
        "spurs": "tottenham hotspur",
        "tottenham": "tottenham hotspur",
        "west ham": "west ham united",
        "brighton": "brighton & hove albion",
        "brighton and hove albion": "brighton & hove albion",
        "leicester": "leicester city",
        "newcastle": "newcastle united",
        "sheffield utd": "sheffield united",
        "ipswich": "ipswich town",
    }
)


def normalize_team_name(name: object) -> str:
    """
    Reduce a free-text team name to its canonical form.

    Steps: trim, lower-case, collapse inner whitespace, then map known aliases.
    Names without an alias pass through trimmed and lower-cased.

    Examples:
        "Man Utd"      -> "manchester united"
        " MAN UNITED " -> "manchester united"
        "Arsenal"      -> "arsenal"
    """
    if not isinstance(name, str):
        return ""

    normalized = " ".join(name.strip().lower().split())
    return TEAM_NAME_ALIASES.get(normalized, normalized)


def same_team(left: object, right: object) -> bool:
    left_name = normalize_team_name(left)
    return bool(left_name) and left_name == normalize_team_name(right)


__all__ = ["TEAM_NAME_ALIASES", "normalize_team_name", "same_team"]
