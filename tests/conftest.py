import pytest

from fakes import FakeLLM, FakeSoccerClient, FakeWeatherClient, fixed_clock
from match_insight.aggregation import ContextAggregator
from match_insight.providers import StaticRosterProvider
from match_insight.providers.models import RosterEntry
from match_insight.service import PredictionService
from match_insight.storage import PredictionStore


@pytest.fixture()
def soccer() -> FakeSoccerClient:
    return FakeSoccerClient()


@pytest.fixture()
def weather() -> FakeWeatherClient:
    return FakeWeatherClient()


@pytest.fixture()
def roster() -> StaticRosterProvider:
    return StaticRosterProvider(
        [
            RosterEntry(team="Manchester United", name="Luke Shaw", position="Defender", status="Injured"),
            RosterEntry(team="  MAN UNITED ", name="Kobbie Mainoo", position="Midfielder"),
            RosterEntry(team="Tottenham Hotspur", name="Cristian Romero", position="Defender", status="suspended"),
            RosterEntry(team="Arsenal", name="Bukayo Saka", position="Forward"),
        ]
    )


@pytest.fixture()
def aggregator(soccer, weather, roster) -> ContextAggregator:
    return ContextAggregator(soccer, weather, roster, max_workers=4, clock=fixed_clock)


@pytest.fixture()
def llm() -> FakeLLM:
    return FakeLLM()


@pytest.fixture()
def store(tmp_path) -> PredictionStore:
    return PredictionStore(tmp_path / "predictions.sqlite")


@pytest.fixture()
def service(soccer, aggregator, llm, store) -> PredictionService:
    return PredictionService(soccer, aggregator, llm, store, clock=fixed_clock)
