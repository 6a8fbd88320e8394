"""Runtime configuration read from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

SOCCER_API_BASE_URL_ENV = "SOCCER_API_BASE_URL"
SOCCER_API_KEY_ENV = "SOCCER_API_KEY"
WEATHER_API_BASE_URL_ENV = "WEATHER_API_BASE_URL"
WEATHER_API_KEY_ENV = "WEATHER_API_KEY"
LLM_BASE_URL_ENV = "LLM_BASE_URL"
LLM_API_KEY_ENV = "OPENAI_API_KEY"
LLM_MODEL_ENV = "LLM_MODEL"
LLM_FALLBACK_MODELS_ENV = "LLM_FALLBACK_MODELS"
LLM_TIMEOUT_ENV = "LLM_TIMEOUT_SECONDS"
PROVIDER_TIMEOUT_ENV = "PROVIDER_TIMEOUT_SECONDS"
FIXTURE_REFRESH_ENV = "FIXTURE_REFRESH_SECONDS"
DATABASE_PATH_ENV = "DATABASE_PATH"
MAX_WORKERS_ENV = "AGGREGATION_MAX_WORKERS"
LOG_LEVEL_ENV = "LOG_LEVEL"

DEFAULT_SOCCER_API_BASE_URL = "https://soccer.entitysport.com"
DEFAULT_WEATHER_API_BASE_URL = "https://api.openweathermap.org/data/2.5/weather"
DEFAULT_LLM_BASE_URL = "https://api.openai.com/v1"
DEFAULT_LLM_MODEL = "gpt-4o-2024-08-06"
DEFAULT_LLM_TIMEOUT_SECONDS = 120.0
DEFAULT_PROVIDER_TIMEOUT_SECONDS = 10.0
DEFAULT_FIXTURE_REFRESH_SECONDS = 15 * 60.0
DEFAULT_DATABASE_PATH = "match-insight.sqlite"
DEFAULT_MAX_WORKERS = 8


def _read_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {raw!r}")
    return value


def _read_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {raw!r}")
    return value


def _read_str(env: Mapping[str, str], name: str, default: str = "") -> str:
    value = env.get(name)
    if value is None or not value.strip():
        return default
    return value.strip()


def _split_models(raw: str) -> Tuple[str, ...]:
    return tuple(part.strip() for part in raw.split(",") if part.strip())


@dataclass(frozen=True)
class Settings:
    """Endpoints, credentials and tuning knobs for the prediction engine."""

    soccer_api_base_url: str = DEFAULT_SOCCER_API_BASE_URL
    soccer_api_key: str = ""
    weather_api_base_url: str = DEFAULT_WEATHER_API_BASE_URL
    weather_api_key: str = ""
    llm_base_url: str = DEFAULT_LLM_BASE_URL
    llm_api_key: str = ""
    llm_model: str = DEFAULT_LLM_MODEL
    llm_fallback_models: Tuple[str, ...] = field(default_factory=tuple)
    llm_timeout_seconds: float = DEFAULT_LLM_TIMEOUT_SECONDS
    provider_timeout_seconds: float = DEFAULT_PROVIDER_TIMEOUT_SECONDS
    fixture_refresh_seconds: float = DEFAULT_FIXTURE_REFRESH_SECONDS
    database_path: str = DEFAULT_DATABASE_PATH
    max_workers: int = DEFAULT_MAX_WORKERS
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from ``env`` (defaults to :data:`os.environ`)."""

        source: Mapping[str, str] = os.environ if env is None else env
        return cls(
            soccer_api_base_url=_read_str(source, SOCCER_API_BASE_URL_ENV, DEFAULT_SOCCER_API_BASE_URL),
            soccer_api_key=_read_str(source, SOCCER_API_KEY_ENV),
            weather_api_base_url=_read_str(source, WEATHER_API_BASE_URL_ENV, DEFAULT_WEATHER_API_BASE_URL),
            weather_api_key=_read_str(source, WEATHER_API_KEY_ENV),
            llm_base_url=_read_str(source, LLM_BASE_URL_ENV, DEFAULT_LLM_BASE_URL),
            llm_api_key=_read_str(source, LLM_API_KEY_ENV),
            llm_model=_read_str(source, LLM_MODEL_ENV, DEFAULT_LLM_MODEL),
            llm_fallback_models=_split_models(_read_str(source, LLM_FALLBACK_MODELS_ENV)),
            llm_timeout_seconds=_read_float(source, LLM_TIMEOUT_ENV, DEFAULT_LLM_TIMEOUT_SECONDS),
            provider_timeout_seconds=_read_float(
                source, PROVIDER_TIMEOUT_ENV, DEFAULT_PROVIDER_TIMEOUT_SECONDS
            ),
            fixture_refresh_seconds=_read_float(
                source, FIXTURE_REFRESH_ENV, DEFAULT_FIXTURE_REFRESH_SECONDS
            ),
            database_path=_read_str(source, DATABASE_PATH_ENV, DEFAULT_DATABASE_PATH),
            max_workers=_read_int(source, MAX_WORKERS_ENV, DEFAULT_MAX_WORKERS),
            log_level=_read_str(source, LOG_LEVEL_ENV, "INFO").upper(),
        )


__all__ = ["Settings"]
