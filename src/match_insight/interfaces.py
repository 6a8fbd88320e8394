"""Interfaces for plugging a generative model into the prediction pipeline."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping, TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - imported only for type checking
    from match_insight.llm.client import FunctionCallResult


class FunctionCallingModel(ABC):
    """A model service that answers a chat payload with one forced function call."""

    @abstractmethod
    def call_function(self, payload: Mapping[str, Any]) -> "FunctionCallResult":
        """Submit ``payload`` and return the function call the model produced.

        Implementations raise :class:`~match_insight.llm.client.ModelUnavailableError`
        when the service cannot be reached and
        :class:`~match_insight.llm.client.MissingFunctionCallError` when the reply
        carries no function call.
        """


__all__ = ["FunctionCallingModel"]
