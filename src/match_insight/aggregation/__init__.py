"""Turn one match identifier into a provider-agnostic :class:`CanonicalContext`."""

from match_insight.aggregation.aggregator import ContextAggregator
from match_insight.aggregation.context import CanonicalContext, SquadPlayer, TeamContext
from match_insight.aggregation.errors import AggregationError, PrimaryNotFoundError, SecondaryDegraded
from match_insight.aggregation.fallbacks import FALLBACKS, NO_PROFILE, NO_RECENT_MATCHES, NO_WEATHER, fallback_for
from match_insight.aggregation.history import FormEntry, summarise_recent_form, summarise_recent_match
from match_insight.aggregation.team_names import normalize_team_name, same_team

__all__ = [
    "AggregationError",
    "CanonicalContext",
    "ContextAggregator",
    "FALLBACKS",
    "FormEntry",
    "NO_PROFILE",
    "NO_RECENT_MATCHES",
    "NO_WEATHER",
    "PrimaryNotFoundError",
    "SecondaryDegraded",
    "SquadPlayer",
    "TeamContext",
    "fallback_for",
    "normalize_team_name",
    "same_team",
    "summarise_recent_form",
    "summarise_recent_match",
]
