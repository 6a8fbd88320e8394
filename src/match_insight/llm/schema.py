"""Pydantic models describing the structured prediction returned by the model."""

from __future__ import annotations

import copy
from typing import Any, Dict, List, Type

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

FUNCTION_NAME = "generateAnalysis"
FUNCTION_DESCRIPTION = (
    "You are an expert sports analyst, with insights sharper than those of betting "
    "bookmakers. Analyse the upcoming football match using the data provided, look for "
    "opportunities and safer bets, and return your predictions."
)


class _StrictModel(BaseModel):
    """Base for every object in the contract: camelCase keys, no extras, no coercion."""

    model_config = ConfigDict(extra="forbid", strict=True, alias_generator=to_camel, frozen=True)


class ScoreLine(_StrictModel):
    home: float
    away: float


class GoalsByPeriod(_StrictModel):
    first_half: ScoreLine
    second_half: ScoreLine
    full_time: ScoreLine


class ExpectedOutcome(_StrictModel):
    goals: ScoreLine
    corners: ScoreLine
    goals_by_period: GoalsByPeriod


class KeyPlayer(_StrictModel):
    name: str
    shots: float
    shots_on_target: float
    assists: float


class KeyPlayers(_StrictModel):
    home: List[KeyPlayer]
    away: List[KeyPlayer]


class TotalGoalsOverUnder(_StrictModel):
    first_half: str
    second_half: str


class AdditionalPredictions(_StrictModel):
    total_goals_over_under: TotalGoalsOverUnder
    most_probable_single_bet_outcome: str


class PredictionArgs(_StrictModel):
    """Arguments of the ``generateAnalysis`` function call."""

    home_team: str
    away_team: str
    expected_outcome: ExpectedOutcome
    key_players: KeyPlayers
    same_game_parlay_suggestions: List[str]
    additional_predictions: AdditionalPredictions
    analysis: str
    key_factors: List[str]
    betting_tips: List[str]

    def to_wire(self) -> Dict[str, Any]:
        """Return the camelCase mapping exactly as the model produced it."""

        return self.model_dump(mode="json", by_alias=True)


def strict_json_schema(model: Type[BaseModel] = PredictionArgs) -> Dict[str, Any]:
    """JSON schema for ``model`` with every ``$ref`` inlined and titles removed.

    Nested objects carry ``additionalProperties: false`` and a full ``required`` list,
    so the schema can be handed to the model service as a self-contained contract.
    """

    raw = model.model_json_schema(by_alias=True)
    definitions = raw.pop("$defs", {})
    return _inline(raw, definitions)


def _inline(node: Any, definitions: Dict[str, Any]) -> Any:
    if isinstance(node, dict):
        ref = node.get("$ref")
        if isinstance(ref, str):
            name = ref.rsplit("/", 1)[-1]
            return _inline(copy.deepcopy(definitions[name]), definitions)
        return {
            key: _inline(value, definitions)
            for key, value in node.items()
            if key != "title"
        }
    if isinstance(node, list):
        return [_inline(item, definitions) for item in node]
    return node


__all__ = [
    "AdditionalPredictions",
    "ExpectedOutcome",
    "FUNCTION_DESCRIPTION",
    "FUNCTION_NAME",
    "GoalsByPeriod",
    "KeyPlayer",
    "KeyPlayers",
    "PredictionArgs",
    "ScoreLine",
    "TotalGoalsOverUnder",
    "strict_json_schema",
]
