"""Structured generation: compile the request, call the model, validate the reply."""

from match_insight.llm.client import (
    ChatCompletionsConfig,
    ChatCompletionsLLM,
    FunctionCallResult,
    MissingFunctionCallError,
    ModelResponseError,
    ModelUnavailableError,
)
from match_insight.llm.compiler import PREDICTION_FUNCTION, FunctionSpec, StructuredRequest, compile_context
from match_insight.llm.schema import PredictionArgs, strict_json_schema
from match_insight.llm.validator import PredictionValidationError, validate_prediction

__all__ = [
    "ChatCompletionsConfig",
    "ChatCompletionsLLM",
    "FunctionCallResult",
    "FunctionSpec",
    "MissingFunctionCallError",
    "ModelResponseError",
    "ModelUnavailableError",
    "PREDICTION_FUNCTION",
    "PredictionArgs",
    "PredictionValidationError",
    "StructuredRequest",
    "compile_context",
    "strict_json_schema",
    "validate_prediction",
]
