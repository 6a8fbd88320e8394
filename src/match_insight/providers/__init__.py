"""Typed clients for the external data providers."""

from match_insight.providers.errors import (
    FetchError,
    FetchNotFoundError,
    FetchRejectedError,
    FetchTimeoutError,
    MalformedPayloadError,
)
from match_insight.providers.fixtures import SoccerDataClient
from match_insight.providers.roster import RosterProvider, StaticRosterProvider
from match_insight.providers.weather import WeatherClient

__all__ = [
    "FetchError",
    "FetchNotFoundError",
    "FetchRejectedError",
    "FetchTimeoutError",
    "MalformedPayloadError",
    "RosterProvider",
    "SoccerDataClient",
    "StaticRosterProvider",
    "WeatherClient",
]
