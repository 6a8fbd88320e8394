"""Client for the fixture/competition data provider."""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional, Tuple

import requests

from match_insight.providers.base import DEFAULT_TIMEOUT_SECONDS, ProviderClient
from match_insight.providers.errors import FetchNotFoundError, MalformedPayloadError
from match_insight.providers.models import (
    CompetitionInfo,
    CompetitionPlayerStat,
    FixtureSummary,
    MatchRecord,
    PlayerProfile,
    Presquad,
    RecentMatch,
    lookup,
)

logger = logging.getLogger(__name__)

# Status codes used by the provider for fixture listings.
STATUS_UPCOMING = 1
STATUS_COMPLETED = 2


class SoccerDataClient:
    """Typed wrapper around the soccer data API.

    Every response arrives in an envelope ``{"status": "ok", "response": {...}}``;
    anything else is reported as :class:`FetchNotFoundError`.
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._http = ProviderClient(base_url, token=token, timeout=timeout, session=session)

    def close(self) -> None:
        self._http.close()

    def _response(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Mapping[str, Any]:
        payload = self._http.get_json(path, params)
        if not isinstance(payload, Mapping):
            raise MalformedPayloadError(f"{path} returned a non-object body")
        if payload.get("status") != "ok" or not payload.get("response"):
            raise FetchNotFoundError(f"{path} returned status {payload.get('status')!r}")
        response = payload["response"]
        if not isinstance(response, Mapping):
            raise MalformedPayloadError(f"{path} returned a non-object response")
        return response

    def _items(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        response = self._response(path, params)
        if response.get("items") is None:
            raise FetchNotFoundError(f"{path} returned no items")
        return response["items"]

    def _item_list(self, path: str, params: Optional[Mapping[str, Any]] = None) -> List[Mapping[str, Any]]:
        items = self._items(path, params)
        if not isinstance(items, list):
            raise MalformedPayloadError(f"{path} returned items that are not a list")
        return [item for item in items if isinstance(item, Mapping)]

    # -- season / competition listings -------------------------------------------------

    def fetch_seasons(self) -> Mapping[str, Any]:
        return self._response("seasons/")

    def fetch_season_competitions(self, season_id: str, *, per_page: int = 10, paged: int = 1) -> Mapping[str, Any]:
        return self._response(
            f"season/{season_id}/competitions", {"per_page": per_page, "paged": paged}
        )

    def fetch_competitions(
        self, *, status: int = 3, per_page: int = 10, paged: int = 1
    ) -> Mapping[str, Any]:
        return self._response("competitions", {"status": status, "per_page": per_page, "paged": paged})

    def fetch_competition_matches(
        self, competition_id: str, *, per_page: int = 10, paged: int = 1
    ) -> List[Mapping[str, Any]]:
        return self._item_list(
            f"competition/{competition_id}/matches",
            {"status": STATUS_UPCOMING, "per_page": per_page, "paged": paged},
        )

    # -- competition ------------------------------------------------------------------

    def fetch_competition(self, competition_id: str) -> CompetitionInfo:
        """Competition metadata together with its standings tables."""

        items = self._item_list(f"competition/{competition_id}")
        if not items:
            raise FetchNotFoundError(f"Competition {competition_id} not found")
        return CompetitionInfo.from_payload(items[0])

    def fetch_competition_squad(
        self, competition_id: str, *, per_page: int = 10, paged: int = 1
    ) -> List[Mapping[str, Any]]:
        response = self._response(
            f"competition/{competition_id}/squad", {"per_page": per_page, "paged": paged}
        )
        teams = response.get("teams")
        if not isinstance(teams, list):
            raise MalformedPayloadError(f"Squad payload for competition {competition_id} has no teams")
        return teams

    def fetch_competition_stats(
        self, competition_id: str, *, per_page: int = 20, paged: int = 2
    ) -> Tuple[CompetitionPlayerStat, ...]:
        items = self._item_list(
            f"competition/{competition_id}/statsv2", {"per_page": per_page, "paged": paged}
        )
        return tuple(CompetitionPlayerStat.from_payload(item) for item in items)

    # -- match ------------------------------------------------------------------------

    def fetch_match(self, match_id: str) -> MatchRecord:
        """Primary record: teams, venue, kickoff, lineups and head-to-head."""

        items = self._items(f"matches/{match_id}/info")
        if not isinstance(items, Mapping):
            raise MalformedPayloadError(f"Match {match_id} info is not an object")
        record = MatchRecord.from_payload(items, match_id)
        provider_id = lookup(items, "match_info.0.mid")
        if isinstance(provider_id, (str, int)) and str(provider_id) != match_id:
            logger.info("match %s: provider reports it as mid %s", match_id, provider_id)
        return record

    def fetch_presquad(self, match_id: str) -> Presquad:
        """Provisional squads announced ahead of the fixture."""

        items = self._items(f"matches/{match_id}/newfantasy", {"fantasy": "new2point"})
        if not isinstance(items, Mapping):
            raise MalformedPayloadError(f"Presquad for match {match_id} is not an object")
        return Presquad.from_payload(items)

    def fetch_upcoming_matches(self, *, per_page: int = 50, paged: int = 1) -> Tuple[FixtureSummary, ...]:
        items = self._item_list(
            "matches",
            {"status": STATUS_UPCOMING, "per_page": per_page, "paged": paged, "pre_squad": "true"},
        )
        fixtures: List[FixtureSummary] = []
        for item in items:
            try:
                fixtures.append(FixtureSummary.from_payload(item))
            except MalformedPayloadError as exc:
                logger.warning("skipping malformed fixture entry: %s", exc)
        return tuple(fixtures)

    # -- team / player ----------------------------------------------------------------

    def fetch_team_matches(
        self,
        team_id: str,
        *,
        status: int = STATUS_COMPLETED,
        per_page: int = 7,
        paged: int = 1,
    ) -> Tuple[RecentMatch, ...]:
        items = self._item_list(
            f"team/{team_id}/matches", {"status": status, "per_page": per_page, "paged": paged}
        )
        return tuple(RecentMatch.from_payload(item) for item in items)

    def fetch_player_profile(self, player_id: str, *, current_year: int) -> PlayerProfile:
        """Player profile with season statistics limited to the last three years."""

        items = self._items(f"player/{player_id}/profile")
        if not isinstance(items, Mapping):
            raise MalformedPayloadError(f"Profile for player {player_id} is not an object")
        return PlayerProfile.from_payload(items, player_id, current_year=current_year)


__all__ = ["STATUS_COMPLETED", "STATUS_UPCOMING", "SoccerDataClient"]
