"""FastAPI application exposing the match prediction endpoints."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from dataclasses import asdict
from typing import Any, AsyncIterator, Dict, List, Optional

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request, status
from fastapi.concurrency import run_in_threadpool

from match_insight.aggregation import PrimaryNotFoundError
from match_insight.cache import FixtureCache, FixtureCacheRefresher
from match_insight.config import Settings
from match_insight.llm.client import MissingFunctionCallError, ModelUnavailableError
from match_insight.llm.validator import PredictionValidationError
from match_insight.providers import FetchError, FetchNotFoundError
from match_insight.service import PredictionService, build_service

logger = logging.getLogger(__name__)

MATCH_DETAILS_NOT_FOUND = "Match details not found."
INVALID_ASSISTANT_DATA = "Assistant returned invalid data."
MISSING_FUNCTION_CALL = "Assistant did not return a function call."
MODEL_UNAVAILABLE = "Prediction model is unavailable."
INTERNAL_ERROR = "Unable to generate a prediction due to an internal error."
PROVIDER_UNAVAILABLE = "Data provider is unavailable."


def create_app(
    settings: Optional[Settings] = None,
    *,
    service: Optional[PredictionService] = None,
    fixture_cache: Optional[FixtureCache] = None,
    refresher: Optional[FixtureCacheRefresher] = None,
) -> FastAPI:
    """Instantiate the application.

    Without an explicit ``service`` the production pipeline is built from
    ``settings`` (or the environment) together with a fixture cache refresher that
    runs for the lifetime of the application.
    """

    if service is None:
        settings = settings or Settings.from_env()
        service = build_service(settings)
        if refresher is None:
            refresher = FixtureCacheRefresher(
                fixture_cache or FixtureCache(),
                service.soccer.fetch_upcoming_matches,
                interval=settings.fixture_refresh_seconds,
            )
    cache = refresher.cache if refresher is not None else (fixture_cache or FixtureCache())

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        if refresher is not None:
            await run_in_threadpool(refresher.start)
        try:
            yield
        finally:
            if refresher is not None:
                await run_in_threadpool(refresher.stop)

    app = FastAPI(title="Match Insight Prediction Service", version="0.1.0", lifespan=lifespan)
    app.state.prediction_service = service
    app.state.fixture_cache = cache

    router = APIRouter()

    def get_service(request: Request) -> PredictionService:
        return request.app.state.prediction_service

    def get_cache(request: Request) -> FixtureCache:
        return request.app.state.fixture_cache

    @router.get("/predict-match-outcome/{match_id}")
    def predict_match_outcome(
        match_id: str,
        service: PredictionService = Depends(get_service),
    ) -> Dict[str, Any]:
        try:
            artifact = service.predict(match_id)
        except PrimaryNotFoundError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=MATCH_DETAILS_NOT_FOUND) from exc
        except PredictionValidationError as exc:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=INVALID_ASSISTANT_DATA
            ) from exc
        except MissingFunctionCallError as exc:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=MISSING_FUNCTION_CALL
            ) from exc
        except ModelUnavailableError as exc:
            logger.error("match %s: %s", match_id, exc)
            raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=MODEL_UNAVAILABLE) from exc
        except Exception as exc:
            logger.exception("match %s: prediction failed", match_id)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=INTERNAL_ERROR
            ) from exc
        return artifact.to_response()

    @router.get("/upcoming-matches")
    def upcoming_matches(cache: FixtureCache = Depends(get_cache)) -> List[Dict[str, Any]]:
        return [dict(entry.raw) for entry in cache.list()]

    @router.get("/matches/{match_id}")
    def cached_match(match_id: str, cache: FixtureCache = Depends(get_cache)) -> Dict[str, Any]:
        entry = cache.lookup(match_id)
        if entry is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Match not found")
        return dict(entry.raw)

    @router.get("/match-details/{match_id}")
    def match_details(match_id: str, service: PredictionService = Depends(get_service)) -> Dict[str, Any]:
        try:
            return service.describe_match(match_id)
        except PrimaryNotFoundError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=MATCH_DETAILS_NOT_FOUND) from exc

    @router.get("/player/{player_id}/profile")
    def player_profile(player_id: str, service: PredictionService = Depends(get_service)) -> Dict[str, Any]:
        try:
            return asdict(service.player_profile(player_id))
        except FetchError as exc:
            raise _provider_error(exc, "Player profile not found.") from exc

    @router.get("/competition-statistics/{competition_id}")
    def competition_statistics(
        competition_id: str,
        service: PredictionService = Depends(get_service),
    ) -> List[Dict[str, Any]]:
        try:
            return [asdict(stat) for stat in service.competition_statistics(competition_id)]
        except FetchError as exc:
            raise _provider_error(exc, "Competition statistics not found.") from exc

    @router.get("/health")
    def health(cache: FixtureCache = Depends(get_cache)) -> Dict[str, Any]:
        refreshed_at = cache.refreshed_at
        return {
            "status": "ok",
            "cachePopulated": cache.is_populated,
            "cachedFixtures": len(cache.list()),
            "cacheRefreshedAt": refreshed_at.isoformat() if refreshed_at else None,
        }

    app.include_router(router)
    return app


def _provider_error(exc: FetchError, not_found_detail: str) -> HTTPException:
    if isinstance(exc, FetchNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=not_found_detail)
    logger.warning("provider request failed: %s", exc)
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=PROVIDER_UNAVAILABLE)


app = create_app()

__all__ = ["app", "create_app"]
