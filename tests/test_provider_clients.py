from typing import Any, Dict, List, Optional

import pytest
import requests

from fakes import competition_item, fixture_item, match_info_items, player_profile_items, weather_payload
from match_insight.providers import (
    FetchNotFoundError,
    FetchRejectedError,
    FetchTimeoutError,
    MalformedPayloadError,
    SoccerDataClient,
    WeatherClient,
)
from match_insight.providers.base import ProviderClient
from match_insight.providers.models import season_in_recent_years


class FakeResponse:
    def __init__(self, status_code: int = 200, body: Any = None, *, invalid_json: bool = False) -> None:
        self.status_code = status_code
        self._body = body
        self._invalid_json = invalid_json

    def json(self) -> Any:
        if self._invalid_json:
            raise ValueError("not json")
        return self._body


class FakeSession:
    """Records GET requests and replays queued responses or exceptions."""

    def __init__(self, *responses: Any) -> None:
        self._responses = list(responses)
        self.requests: List[Dict[str, Any]] = []
        self.closed = False

    def get(self, url: str, params: Optional[Dict[str, Any]] = None, timeout: Optional[float] = None):
        self.requests.append({"url": url, "params": dict(params or {}), "timeout": timeout})
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def close(self) -> None:
        self.closed = True


def ok(items: Any) -> FakeResponse:
    return FakeResponse(body={"status": "ok", "response": {"items": items}})


def test_provider_client_adds_token_and_timeout():
    session = FakeSession(FakeResponse(body={"hello": "world"}))
    client = ProviderClient("https://api.example.com/v2", token="secret", timeout=3.0, session=session)

    assert client.get_json("matches/1/info", {"per_page": 5}) == {"hello": "world"}
    request = session.requests[0]
    assert request["url"] == "https://api.example.com/v2/matches/1/info"
    assert request["params"] == {"per_page": 5, "token": "secret"}
    assert request["timeout"] == 3.0


@pytest.mark.parametrize(
    "response, error",
    [
        (FakeResponse(status_code=404), FetchNotFoundError),
        (FakeResponse(status_code=503), FetchTimeoutError),
        (FakeResponse(status_code=401), FetchRejectedError),
        (FakeResponse(status_code=429), FetchRejectedError),
        (requests.Timeout("slow"), FetchTimeoutError),
        (requests.ConnectionError("refused"), FetchTimeoutError),
        (FakeResponse(invalid_json=True), MalformedPayloadError),
    ],
)
def test_provider_client_maps_failures_to_fetch_errors(response, error):
    client = ProviderClient("https://api.example.com", session=FakeSession(response))

    with pytest.raises(error):
        client.get_json("anything")


def test_rejected_request_keeps_status_code():
    client = ProviderClient("https://api.example.com", session=FakeSession(FakeResponse(status_code=403)))

    with pytest.raises(FetchRejectedError) as excinfo:
        client.get_json("anything")

    assert excinfo.value.status_code == 403


def test_fetch_match_parses_primary_record():
    session = FakeSession(ok(match_info_items("12345")))
    client = SoccerDataClient("https://soccer.example.com", "tok", session=session)

    record = client.fetch_match("12345")

    assert session.requests[0]["url"] == "https://soccer.example.com/matches/12345/info"
    assert record.match_id == "12345"
    assert record.competition_id == "c-1"
    assert (record.home.name, record.away.name) == ("Man Utd", "Spurs")
    assert record.venue.location == "Manchester"
    assert record.kickoff.isoformat() == "2024-09-28T14:00:00+00:00"
    assert record.home_lineup is not None and record.home_lineup.formation == "4-2-3-1"
    assert record.away_lineup is None
    assert record.head_to_head.home_wins == 3


def test_fetch_match_keys_record_by_requested_id(caplog):
    client = SoccerDataClient(
        "https://soccer.example.com", "tok", session=FakeSession(ok(match_info_items("012345")))
    )

    with caplog.at_level("INFO", logger="match_insight.providers.fixtures"):
        record = client.fetch_match("12345")

    assert record.match_id == "12345"
    assert "provider reports it as mid 012345" in caplog.text


@pytest.mark.parametrize("match_info", [["not an object"], {"0": "garbled"}, "garbled"])
def test_fetch_match_rejects_non_object_match_info(match_info):
    items = match_info_items()
    items["match_info"] = match_info
    client = SoccerDataClient("https://soccer.example.com", "tok", session=FakeSession(ok(items)))

    with pytest.raises(MalformedPayloadError):
        client.fetch_match("12345")


def test_fetch_match_envelope_without_ok_status_is_not_found():
    session = FakeSession(FakeResponse(body={"status": "error", "response": "Invalid match"}))
    client = SoccerDataClient("https://soccer.example.com", "tok", session=session)

    with pytest.raises(FetchNotFoundError):
        client.fetch_match("99999")


def test_fetch_match_names_missing_fields():
    items = match_info_items()
    del items["match_info"][0]["teams"]["away"]["tid"]
    client = SoccerDataClient("https://soccer.example.com", "tok", session=FakeSession(ok(items)))

    with pytest.raises(MalformedPayloadError) as excinfo:
        client.fetch_match("12345")

    assert excinfo.value.missing == ("match_info.0.teams.away.tid",)


def test_fetch_team_matches_requests_last_completed_fixtures():
    session = FakeSession(ok([]))
    client = SoccerDataClient("https://soccer.example.com", "tok", session=session)

    assert client.fetch_team_matches("t-home") == ()
    assert session.requests[0]["params"] == {"status": 2, "per_page": 7, "paged": 1, "token": "tok"}


def test_fetch_competition_reads_standings_tables():
    client = SoccerDataClient("https://soccer.example.com", "tok", session=FakeSession(ok([competition_item()])))

    competition = client.fetch_competition("c-1")

    assert competition.name == "Premier League"
    assert competition.group_name == "Regular Season (Table)"
    assert [row.team_name for row in competition.overall_table] == ["Manchester United", "Tottenham"]
    assert competition.overall_table[0].promotion == "ucl (Champions League)"
    assert competition.home_table == ()


def test_fetch_competition_with_flat_table_list():
    item = competition_item()
    item["point_table"][0]["tables"] = item["point_table"][0]["tables"]["total"]
    client = SoccerDataClient("https://soccer.example.com", "tok", session=FakeSession(ok([item])))

    competition = client.fetch_competition("c-1")

    assert len(competition.overall_table) == 2
    assert competition.home_table == competition.away_table == ()


def test_fetch_player_profile_keeps_last_three_years_only():
    client = SoccerDataClient(
        "https://soccer.example.com", "tok", session=FakeSession(ok(player_profile_items("Bruno Fernandes")))
    )

    profile = client.fetch_player_profile("p1", current_year=2024)

    assert profile.full_name == "Bruno Fernandes"
    assert [season.year for season in profile.seasons] == ["2024", "23/24"]
    assert profile.teams_played[0].team_name == "Manchester United"


@pytest.mark.parametrize("player_info", [["not", "a", "mapping"], "garbled", 42])
def test_fetch_player_profile_rejects_non_object_player_info(player_info):
    items = player_profile_items("Bruno Fernandes")
    items["player_info"] = player_info
    client = SoccerDataClient("https://soccer.example.com", "tok", session=FakeSession(ok(items)))

    with pytest.raises(MalformedPayloadError, match="player_info"):
        client.fetch_player_profile("p1", current_year=2024)


@pytest.mark.parametrize(
    "label, expected",
    [("2024", True), ("2022", True), ("2021", False), ("23/24", True), ("2021/22", True), ("19/20", False), (None, False)],
)
def test_season_filter_accepts_two_and_four_digit_years(label, expected):
    assert season_in_recent_years(label, 2024) is expected


def test_fetch_upcoming_matches_skips_malformed_entries():
    broken = {"mid": "3", "teams": {"home": {"tname": "Only Home"}}}
    session = FakeSession(ok([fixture_item("1"), broken, fixture_item("2", "Everton", "Fulham")]))
    client = SoccerDataClient("https://soccer.example.com", "tok", session=session)

    fixtures = client.fetch_upcoming_matches()

    assert [fixture.match_id for fixture in fixtures] == ["1", "2"]
    assert fixtures[1].home_team == "Everton"
    assert session.requests[0]["params"]["status"] == 1


def test_listing_endpoints_pass_pagination():
    session = FakeSession(
        FakeResponse(body={"status": "ok", "response": {"items": [{"sid": "2024"}]}}),
        FakeResponse(body={"status": "ok", "response": {"items": [], "total_items": 0}}),
        FakeResponse(body={"status": "ok", "response": {"teams": [{"tid": "t-home"}]}}),
        FakeResponse(body={"status": "ok", "response": {"items": [{"cid": "c-1"}], "total_items": 1}}),
        ok([fixture_item("7"), "not a fixture"]),
    )
    client = SoccerDataClient("https://soccer.example.com", "tok", session=session)

    assert client.fetch_seasons()["items"] == [{"sid": "2024"}]
    client.fetch_season_competitions("2024", per_page=25, paged=2)
    assert client.fetch_competition_squad("c-1") == [{"tid": "t-home"}]

    assert session.requests[1]["url"].endswith("season/2024/competitions")
    assert session.requests[1]["params"]["per_page"] == 25
    assert session.requests[1]["params"]["paged"] == 2

    assert client.fetch_competitions(per_page=5)["items"] == [{"cid": "c-1"}]
    assert session.requests[3]["url"].endswith("/competitions")
    assert session.requests[3]["params"] == {"status": 3, "per_page": 5, "paged": 1, "token": "tok"}

    matches = client.fetch_competition_matches("c-1", paged=3)
    assert [match["mid"] for match in matches] == ["7"]
    assert session.requests[4]["url"].endswith("competition/c-1/matches")
    assert session.requests[4]["params"]["status"] == 1
    assert session.requests[4]["params"]["paged"] == 3


def test_weather_client_queries_metric_units():
    session = FakeSession(FakeResponse(body=weather_payload()))
    client = WeatherClient("https://weather.example.com/data/2.5/weather", "owm-key", session=session)

    snapshot = client.fetch(" Manchester ")

    request = session.requests[0]
    assert request["url"] == "https://weather.example.com/data/2.5/weather"
    assert request["params"] == {"q": "Manchester", "units": "metric", "appid": "owm-key"}
    assert (snapshot.temperature, snapshot.description, snapshot.wind_speed, snapshot.humidity) == (
        14.5,
        "light rain",
        5.1,
        81,
    )


def test_weather_client_rejects_incomplete_payload():
    payload = weather_payload()
    del payload["wind"]
    client = WeatherClient("https://weather.example.com", "owm-key", session=FakeSession(FakeResponse(body=payload)))

    with pytest.raises(MalformedPayloadError, match="wind.speed"):
        client.fetch("Manchester")


@pytest.mark.parametrize("conditions", [["light rain"], {"0": "light rain"}, "light rain"])
def test_weather_client_rejects_non_object_conditions(conditions):
    payload = weather_payload()
    payload["weather"] = conditions
    client = WeatherClient("https://weather.example.com", "owm-key", session=FakeSession(FakeResponse(body=payload)))

    with pytest.raises(MalformedPayloadError, match="weather.0.description"):
        client.fetch("Manchester")


def test_weather_client_without_location_does_not_call_provider():
    session = FakeSession()
    client = WeatherClient("https://weather.example.com", "owm-key", session=session)

    with pytest.raises(FetchNotFoundError):
        client.fetch("  ")
    assert session.requests == []
