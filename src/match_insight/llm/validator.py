"""Gate between raw model output and anything that gets persisted."""

from __future__ import annotations

import json
from typing import Any, List, Mapping, Sequence, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from match_insight.llm.schema import PredictionArgs

ModelT = TypeVar("ModelT", bound=BaseModel)


class PredictionValidationError(ValueError):
    """The model's reply does not satisfy the declared contract."""

    def __init__(self, violations: Sequence[str]) -> None:
        self.violations: List[str] = list(violations)
        super().__init__(f"{len(self.violations)} schema violation(s): " + "; ".join(self.violations))


def _location(loc: Sequence[Union[str, int]]) -> str:
    return ".".join(str(part) for part in loc) or "<root>"


def validate_prediction(
    raw_output: Union[str, bytes, Mapping[str, Any]],
    model: Type[ModelT] = PredictionArgs,  # type: ignore[assignment]
) -> ModelT:
    """Parse and validate ``raw_output`` against ``model``.

    Missing keys, undeclared keys at any depth and wrong JSON types are reported as
    ``"<dotted.path>: <message>"`` violations.
    """

    if isinstance(raw_output, Mapping):
        raw_output = json.dumps(dict(raw_output))
    if not isinstance(raw_output, (str, bytes, bytearray)):
        raise PredictionValidationError([f"<root>: expected a JSON object, got {type(raw_output).__name__}"])

    try:
        return model.model_validate_json(raw_output)
    except ValidationError as exc:
        violations = [f"{_location(error['loc'])}: {error['msg']}" for error in exc.errors()]
        raise PredictionValidationError(violations) from exc


__all__ = ["PredictionValidationError", "validate_prediction"]
