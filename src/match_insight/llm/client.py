"""HTTP client for an OpenAI-compatible chat completions endpoint with function calling."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence

import requests

from match_insight.interfaces import FunctionCallingModel

logger = logging.getLogger(__name__)

DEFAULT_LLM_TIMEOUT_SECONDS = 120.0


class ModelResponseError(RuntimeError):
    """Base class for failures talking to the generative model service."""


class ModelUnavailableError(ModelResponseError):
    """No configured model produced a usable HTTP response."""


class MissingFunctionCallError(ModelResponseError):
    """The model answered but did not call the requested function."""


@dataclass
class ChatCompletionsConfig:
    """Configuration for calling a chat completions service."""

    primary_model: str
    api_key: str = ""
    fallback_models: Sequence[str] = field(default_factory=tuple)
    base_url: str = "https://api.openai.com/v1"
    timeout: float = DEFAULT_LLM_TIMEOUT_SECONDS
    default_options: Dict[str, object] = field(default_factory=dict)


@dataclass(frozen=True)
class FunctionCallResult:
    """Function name and raw JSON arguments returned by the model."""

    name: str
    arguments: str
    model_used: str


class ChatCompletionsLLM(FunctionCallingModel):
    """Send a structured request to the configured models, primary first."""

    def __init__(self, config: ChatCompletionsConfig, session: Optional[requests.Session] = None):
        self._config = config
        self._models: Sequence[str] = (config.primary_model, *config.fallback_models)
        self._default_options: Dict[str, object] = dict(config.default_options)
        self._endpoint = f"{config.base_url.rstrip('/')}/chat/completions"
        self._session = session or requests.Session()

    @property
    def models(self) -> Sequence[str]:
        """Return the configured model preference order."""

        return self._models

    def call_function(
        self,
        payload: Mapping[str, Any],
        *,
        model: Optional[str] = None,
    ) -> FunctionCallResult:
        """Submit ``payload`` (messages + tools) and return the forced function call.

        Transport failures move on to the next configured model; a reply without a
        function call is final and raises :class:`MissingFunctionCallError`.
        """

        models_to_try: Iterable[str]
        if model:
            models_to_try = (model,)
        else:
            models_to_try = self._models

        last_error: Optional[Exception] = None
        for model_name in models_to_try:
            try:
                response = self._post(model_name, payload)
            except ModelUnavailableError as exc:
                logger.warning("model %s failed: %s", model_name, exc)
                last_error = exc
                continue
            return _extract_function_call(response, model_name)

        raise ModelUnavailableError("All configured models failed to respond") from last_error

    def _post(self, model_name: str, payload: Mapping[str, Any]) -> Mapping[str, Any]:
        body = {**self._default_options, **payload, "model": model_name}
        headers = {"Content-Type": "application/json"}
        if self._config.api_key:
            headers["Authorization"] = f"Bearer {self._config.api_key}"

        try:
            resp = self._session.post(
                self._endpoint, json=body, headers=headers, timeout=self._config.timeout
            )
        except requests.RequestException as exc:
            raise ModelUnavailableError(f"Unable to reach model service: {exc}") from exc

        if resp.status_code >= 400:
            raise ModelUnavailableError(f"Model service returned HTTP {resp.status_code}: {resp.text[:200]}")
        try:
            response = resp.json()
        except ValueError as exc:
            raise ModelUnavailableError("Model service returned a non-JSON body") from exc
        if not isinstance(response, Mapping):
            raise ModelUnavailableError("Model service returned a non-object body")
        if response.get("error"):
            raise ModelUnavailableError(str(response["error"]))
        return response


def _extract_function_call(response: Mapping[str, Any], model_name: str) -> FunctionCallResult:
    choices = response.get("choices") or []
    message = choices[0].get("message") if choices and isinstance(choices[0], Mapping) else None
    if not isinstance(message, Mapping):
        raise MissingFunctionCallError("Assistant did not return a function call.")

    call: Any = None
    tool_calls = message.get("tool_calls") or []
    for tool_call in tool_calls:
        if isinstance(tool_call, Mapping) and tool_call.get("type", "function") == "function":
            call = tool_call.get("function")
            break
    if call is None:
        # Older replies use the single ``function_call`` field.
        call = message.get("function_call")

    if not isinstance(call, Mapping) or not call.get("name"):
        raise MissingFunctionCallError("Assistant did not return a function call.")

    arguments = call.get("arguments")
    if isinstance(arguments, Mapping):
        arguments = json.dumps(dict(arguments))
    elif not isinstance(arguments, str):
        arguments = ""
    return FunctionCallResult(
        name=str(call["name"]),
        arguments=arguments,
        model_used=str(response.get("model") or model_name),
    )


__all__ = [
    "ChatCompletionsConfig",
    "ChatCompletionsLLM",
    "DEFAULT_LLM_TIMEOUT_SECONDS",
    "FunctionCallResult",
    "MissingFunctionCallError",
    "ModelResponseError",
    "ModelUnavailableError",
]
