import copy
import json
from dataclasses import replace

from fakes import FakeSoccerClient, FakeWeatherClient, fixed_clock
from match_insight.aggregation import NO_WEATHER, ContextAggregator
from match_insight.llm.compiler import PREDICTION_FUNCTION, compile_context, format_form_entry
from match_insight.llm.schema import strict_json_schema
from match_insight.providers import FetchTimeoutError


def _object_nodes(node):
    if isinstance(node, dict):
        if node.get("type") == "object":
            yield node
        for value in node.values():
            yield from _object_nodes(value)
    elif isinstance(node, list):
        for item in node:
            yield from _object_nodes(item)


def test_compile_is_deterministic_for_equal_contexts(aggregator):
    context = aggregator.aggregate("12345")
    twin = copy.deepcopy(context)

    first = compile_context(context)
    second = compile_context(twin)

    assert twin == context
    assert first == second
    assert first.to_json() == second.to_json()


def test_compile_does_not_touch_providers(soccer, weather, aggregator):
    context = aggregator.aggregate("12345")
    calls_before = list(soccer.calls)

    compile_context(context)

    assert soccer.calls == calls_before


def test_payload_forces_the_prediction_function(aggregator):
    request = compile_context(aggregator.aggregate("12345"))
    payload = request.to_payload()

    assert payload["messages"][0] == {"role": "system", "content": "You are a sports Analyst AI."}
    assert payload["tool_choice"] == {"type": "function", "function": {"name": "generateAnalysis"}}
    assert payload["tools"][0]["function"]["name"] == "generateAnalysis"
    assert "model" not in payload

    # Each call hands out a fresh payload.
    payload["messages"].clear()
    assert request.to_payload()["messages"]


def test_user_message_renders_every_section(aggregator):
    message = compile_context(aggregator.aggregate("12345")).user_message

    assert "Teams: Man Utd vs Spurs" in message
    assert "Venue: Old Trafford, Location: Manchester" in message
    assert "Date: 2024-09-28 14:00:00" in message
    assert "featuring teams like Manchester United, Tottenham Hotspur" in message
    assert "Temperature: 14.5°C, Description: light rain, Wind Speed: 5.1 m/s, Humidity: 81%" in message
    assert "- Manchester United, Position: 4, Points: 10" in message
    assert "Competition Group: Regular Season (Table)" in message
    assert "Home: 4-2-3-1," in message
    assert "(p1,Bruno Fernandes) (M, CAM)" in message
    assert "Away: Not Available" in message
    assert "Home wins: 3," in message
    assert "Result: 2-1 (Win)" in message
    assert "Luke Shaw (D) (Injured)" in message
    assert "Cristian Romero (D) (Suspended)" in message
    assert "Pre Squad Home: (p1,Bruno Fernandes) (mid, 9.5)" in message
    assert "Year: 23/24" in message
    assert "Year: 2018/2019" not in message
    assert "Player: Son Heung-min, Team: Tottenham Hotspur, Goals: 4, Assists: 1, Shots On Target: 9" in message
    assert "{{" not in message


def test_fallback_text_reaches_the_prompt(roster):
    soccer = FakeSoccerClient(failures={"fetch_team_matches": FetchTimeoutError("down")})
    weather = FakeWeatherClient(error=FetchTimeoutError("down"))
    context = ContextAggregator(soccer, weather, roster, clock=fixed_clock).aggregate("12345")

    message = compile_context(context).user_message

    assert "Weather:\n" + NO_WEATHER in message
    assert message.count("No recent matches available.") == 2


def test_changed_context_changes_the_request(aggregator):
    context = aggregator.aggregate("12345")

    changed = replace(context, weather=NO_WEATHER)

    assert compile_context(changed).to_json() != compile_context(context).to_json()


def test_schema_forbids_extra_keys_at_every_level():
    schema = strict_json_schema()
    objects = list(_object_nodes(schema))

    assert "$defs" not in json.dumps(schema)
    assert "$ref" not in json.dumps(schema)
    assert len(objects) >= 10
    for node in objects:
        assert node["additionalProperties"] is False
        assert sorted(node["required"]) == sorted(node["properties"])

    assert schema["properties"]["expectedOutcome"]["properties"]["goals"]["properties"]["home"]["type"] == "number"
    assert schema["properties"]["keyFactors"] == {"type": "array", "items": {"type": "string"}}


def test_function_spec_holds_canonical_schema_text():
    assert PREDICTION_FUNCTION.parameters == strict_json_schema()
    assert PREDICTION_FUNCTION.parameters_json == json.dumps(
        strict_json_schema(), sort_keys=True, separators=(",", ":")
    )


def test_form_entry_lines(aggregator):
    entry = aggregator.aggregate("12345").home.recent_form[1]

    assert format_form_entry(entry).splitlines() == [
        "Team: Team t-home",
        "Opponent: Team t-other",
        "Date: 2024-09-14",
        "Result: 1-2 (Draw)",
        "Periods:",
        "  First Half: 0-1",
        "  Second Half: 1-1",
        "  Full Time: 1-2",
    ]
