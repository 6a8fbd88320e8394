"""Persistence of validated prediction artifacts."""

from match_insight.storage.errors import ConstraintViolationError, PersistenceError, StoreUnavailableError
from match_insight.storage.models import PredictionArtifact
from match_insight.storage.store import PredictionStore

__all__ = [
    "ConstraintViolationError",
    "PersistenceError",
    "PredictionArtifact",
    "PredictionStore",
    "StoreUnavailableError",
]
