import threading

import pytest

from fakes import FakeLLM, FakeSoccerClient, FakeWeatherClient, fixed_clock, valid_prediction
from match_insight.aggregation import NO_WEATHER, ContextAggregator, PrimaryNotFoundError
from match_insight.llm.client import MissingFunctionCallError, ModelUnavailableError
from match_insight.llm.validator import PredictionValidationError
from match_insight.providers import FetchTimeoutError
from match_insight.service import PredictionService


def test_end_to_end_with_weather_outage(soccer, roster, llm, store):
    weather = FakeWeatherClient(error=FetchTimeoutError("weather provider timed out"))
    aggregator = ContextAggregator(soccer, weather, roster, clock=fixed_clock)
    service = PredictionService(soccer, aggregator, llm, store, clock=fixed_clock)

    run = service.run("12345")

    assert run.artifact.prediction.analysis.strip()
    assert run.context.weather == NO_WEATHER
    assert "weather" in run.context.degraded_sources
    assert "Weather:\nWeather data not available." in llm.user_messages()[0]

    stored = store.get("12345")
    assert stored is not None
    assert stored.competition_name == "Premier League"
    assert (stored.home_team, stored.away_team) == ("Man Utd", "Spurs")
    assert stored.match_date.isoformat() == "2024-09-28T14:00:00+00:00"
    assert stored.prediction == run.artifact.prediction


def test_unknown_match_leaves_store_untouched(service, soccer, llm, store):
    with pytest.raises(PrimaryNotFoundError):
        service.predict("99999")

    assert store.count("99999") == 0
    assert llm.payloads == []
    assert [name for name, _ in soccer.calls] == ["fetch_match"]


def test_concurrent_predictions_for_same_match_converge(service, store):
    barrier = threading.Barrier(2)
    results = []

    def worker():
        barrier.wait()
        results.append(service.predict("12345"))

    threads = [threading.Thread(target=worker) for _ in range(2)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(results) == 2
    assert store.count("12345") == 1


def test_repeated_runs_overwrite_the_artifact(soccer, aggregator, store):
    PredictionService(soccer, aggregator, FakeLLM(), store).predict("12345")

    updated = valid_prediction()
    updated["analysis"] = "Spurs counter-attack wins it."
    PredictionService(soccer, aggregator, FakeLLM(updated), store).predict("12345")

    assert store.count("12345") == 1
    assert store.get("12345").prediction.analysis == "Spurs counter-attack wins it."


def test_artifact_is_stored_under_the_requested_match_id(store, weather, roster):
    soccer = FakeSoccerClient(provider_mid="012345")
    aggregator = ContextAggregator(soccer, weather, roster, clock=fixed_clock)
    service = PredictionService(soccer, aggregator, FakeLLM(), store)

    service.predict("12345")
    service.predict("12345")

    assert store.count() == 1
    assert store.get("12345").match_id == "12345"
    assert store.count("012345") == 0


def test_invalid_model_output_is_never_persisted(soccer, aggregator, store, caplog):
    payload = valid_prediction()
    payload["expectedOutcome"]["confidence"] = 0.9
    service = PredictionService(soccer, aggregator, FakeLLM(payload), store)

    with pytest.raises(PredictionValidationError) as excinfo:
        service.predict("12345")

    assert excinfo.value.violations == ["expectedOutcome.confidence: Extra inputs are not permitted"]
    assert store.count() == 0
    assert "expectedOutcome.confidence" in caplog.text


def test_wrong_function_name_counts_as_missing_call(soccer, aggregator, store):
    service = PredictionService(soccer, aggregator, FakeLLM(name="somethingElse"), store)

    with pytest.raises(MissingFunctionCallError):
        service.predict("12345")
    assert store.count() == 0


def test_model_errors_propagate_without_writes(soccer, aggregator, store):
    service = PredictionService(soccer, aggregator, FakeLLM(error=ModelUnavailableError("down")), store)

    with pytest.raises(ModelUnavailableError):
        service.predict("12345")
    assert store.count() == 0


def test_describe_match_returns_normalised_record(service):
    details = service.describe_match("12345")

    assert details["home"] == {"team_id": "t-home", "name": "Man Utd"}
    assert details["kickoff"] == "2024-09-28T14:00:00+00:00"
    assert details["venue"]["name"] == "Old Trafford"

    with pytest.raises(PrimaryNotFoundError):
        service.describe_match("99999")


def test_player_profile_uses_service_clock(service):
    profile = service.player_profile("p1")

    assert [season.year for season in profile.seasons] == ["2024", "23/24"]


def test_competition_statistics(service):
    stats = service.competition_statistics("c-1")

    assert [stat.name for stat in stats] == ["Bruno Fernandes", "Son Heung-min"]


def test_payload_sent_to_model_is_the_compiled_request(service, llm):
    run = service.run("12345")

    assert llm.payloads == [run.request.to_payload()]
    assert run.model_used == "fake-primary"
