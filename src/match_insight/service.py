"""Prediction pipeline: aggregate, compile, call the model, validate, persist."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, Tuple

from match_insight.aggregation import CanonicalContext, ContextAggregator, PrimaryNotFoundError
from match_insight.config import Settings
from match_insight.interfaces import FunctionCallingModel
from match_insight.llm.client import (
    ChatCompletionsConfig,
    ChatCompletionsLLM,
    FunctionCallResult,
    MissingFunctionCallError,
)
from match_insight.llm.compiler import StructuredRequest, compile_context
from match_insight.llm.validator import PredictionValidationError, validate_prediction
from match_insight.providers import (
    FetchError,
    RosterProvider,
    SoccerDataClient,
    StaticRosterProvider,
    WeatherClient,
)
from match_insight.providers.models import CompetitionPlayerStat, PlayerProfile
from match_insight.storage import PredictionArtifact, PredictionStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PredictionRun:
    """Everything one successful pipeline run produced."""

    artifact: PredictionArtifact
    context: CanonicalContext
    request: StructuredRequest
    model_used: str


class PredictionService:
    """Facade wiring the aggregator, the model and the store together.

    Each call to :meth:`run` is independent: the context and the compiled request
    are local to the call, so concurrent runs share nothing but the store.
    """

    def __init__(
        self,
        soccer: SoccerDataClient,
        aggregator: ContextAggregator,
        language_model: FunctionCallingModel,
        store: PredictionStore,
        *,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._soccer = soccer
        self._aggregator = aggregator
        self._language_model = language_model
        self._store = store
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    @property
    def soccer(self) -> SoccerDataClient:
        return self._soccer

    @property
    def aggregator(self) -> ContextAggregator:
        return self._aggregator

    @property
    def store(self) -> PredictionStore:
        return self._store

    def run(self, match_id: str) -> PredictionRun:
        context = self._aggregator.aggregate(match_id)
        request = compile_context(context)
        result = self._language_model.call_function(request.to_payload())
        arguments = self._check_call(match_id, request, result)

        artifact = PredictionArtifact(
            match_id=context.match_id,
            competition_name=context.competition.name,
            match_date=context.kickoff,
            home_team=context.home.name,
            away_team=context.away.name,
            prediction=arguments,
        )
        stored = self._store.upsert(artifact)
        logger.info("match %s: prediction generated by %s", match_id, result.model_used)
        return PredictionRun(artifact=stored, context=context, request=request, model_used=result.model_used)

    def predict(self, match_id: str) -> PredictionArtifact:
        """Run the whole pipeline for ``match_id`` and return the stored artifact."""

        return self.run(match_id).artifact

    @staticmethod
    def _check_call(match_id: str, request: StructuredRequest, result: FunctionCallResult):
        if result.name != request.function.name:
            logger.error("match %s: model called unexpected function %r", match_id, result.name)
            raise MissingFunctionCallError(f"Expected a call to {request.function.name}, got {result.name!r}")
        try:
            return validate_prediction(result.arguments)
        except PredictionValidationError as exc:
            logger.error(
                "match %s: %s returned invalid data: %s",
                match_id,
                result.model_used,
                "; ".join(exc.violations),
            )
            raise

    # -- read-only lookups ------------------------------------------------------------

    def describe_match(self, match_id: str) -> Dict[str, Any]:
        """Normalised primary record for ``match_id``."""

        try:
            record = self._soccer.fetch_match(match_id)
        except FetchError as exc:
            raise PrimaryNotFoundError(match_id, str(exc)) from exc
        details = asdict(record)
        details["kickoff"] = record.kickoff.isoformat()
        return details

    def player_profile(self, player_id: str) -> PlayerProfile:
        return self._soccer.fetch_player_profile(player_id, current_year=self._clock().year)

    def competition_statistics(self, competition_id: str) -> Tuple[CompetitionPlayerStat, ...]:
        return self._soccer.fetch_competition_stats(competition_id)


def build_service(
    settings: Settings,
    *,
    roster: Optional[RosterProvider] = None,
) -> PredictionService:
    """Create the production pipeline from ``settings``."""

    soccer = SoccerDataClient(
        settings.soccer_api_base_url,
        settings.soccer_api_key,
        timeout=settings.provider_timeout_seconds,
    )
    weather = WeatherClient(
        settings.weather_api_base_url,
        settings.weather_api_key,
        timeout=settings.provider_timeout_seconds,
    )
    aggregator = ContextAggregator(
        soccer,
        weather,
        roster or StaticRosterProvider(),
        max_workers=settings.max_workers,
    )
    language_model = ChatCompletionsLLM(
        ChatCompletionsConfig(
            primary_model=settings.llm_model,
            api_key=settings.llm_api_key,
            fallback_models=settings.llm_fallback_models,
            base_url=settings.llm_base_url,
            timeout=settings.llm_timeout_seconds,
        )
    )
    return PredictionService(soccer, aggregator, language_model, PredictionStore(settings.database_path))


__all__ = ["PredictionRun", "PredictionService", "build_service"]
