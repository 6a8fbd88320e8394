"""SQLite-backed prediction store with one row per match."""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, Optional, Union

from match_insight.storage.errors import ConstraintViolationError, StoreUnavailableError
from match_insight.storage.models import PredictionArtifact

logger = logging.getLogger(__name__)

DEFAULT_BUSY_TIMEOUT_SECONDS = 30.0

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS match_predictions (
      id INTEGER PRIMARY KEY AUTOINCREMENT,
      match_id TEXT NOT NULL UNIQUE,
      competition_name TEXT NOT NULL,
      match_date TEXT NOT NULL,
      home_team TEXT NOT NULL,
      away_team TEXT NOT NULL,
      prediction_json TEXT NOT NULL,
      created_at TEXT NOT NULL,
      updated_at TEXT NOT NULL
    );
    """,
    "CREATE INDEX IF NOT EXISTS idx_predictions_date ON match_predictions(match_date);",
)

_UPSERT = """
    INSERT INTO match_predictions (
        match_id, competition_name, match_date, home_team, away_team,
        prediction_json, created_at, updated_at
    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
    ON CONFLICT(match_id) DO UPDATE SET
        competition_name = excluded.competition_name,
        match_date = excluded.match_date,
        home_team = excluded.home_team,
        away_team = excluded.away_team,
        prediction_json = excluded.prediction_json,
        updated_at = excluded.updated_at
"""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _format_timestamp(dt: datetime) -> str:
    return dt.isoformat(timespec="microseconds").replace("+00:00", "Z")


class PredictionStore:
    """Insert-or-update store keyed by match identifier.

    Every operation opens its own connection, so the store can be shared between
    request threads; SQLite serialises concurrent writers and the ``UNIQUE``
    constraint on ``match_id`` guarantees a single row per match (last writer wins).
    """

    def __init__(
        self,
        path: Union[str, Path],
        *,
        busy_timeout: float = DEFAULT_BUSY_TIMEOUT_SECONDS,
    ) -> None:
        self._path = str(path)
        self._busy_timeout = busy_timeout

    @property
    def path(self) -> str:
        return self._path

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        try:
            connection = sqlite3.connect(self._path, timeout=self._busy_timeout)
        except sqlite3.Error as exc:
            raise StoreUnavailableError(f"Unable to open prediction store at {self._path}") from exc

        connection.row_factory = sqlite3.Row
        try:
            for statement in _SCHEMA:
                connection.execute(statement)
            yield connection
        except sqlite3.IntegrityError as exc:
            raise ConstraintViolationError(str(exc)) from exc
        except sqlite3.DatabaseError as exc:
            raise StoreUnavailableError(str(exc)) from exc
        finally:
            connection.close()

    def upsert(self, artifact: PredictionArtifact) -> PredictionArtifact:
        """Create or replace the row for ``artifact.match_id`` in one transaction."""

        now = _format_timestamp(_utcnow())
        with self._connect() as conn:
            with conn:
                conn.execute(
                    _UPSERT,
                    (
                        artifact.match_id,
                        artifact.competition_name,
                        artifact.match_date.isoformat(),
                        artifact.home_team,
                        artifact.away_team,
                        artifact.prediction_json(),
                        now,
                        now,
                    ),
                )
                row = conn.execute(
                    "SELECT * FROM match_predictions WHERE match_id = ?", (artifact.match_id,)
                ).fetchone()

        logger.info("stored prediction for match %s", artifact.match_id)
        return PredictionArtifact.from_row(row)

    def get(self, match_id: str) -> Optional[PredictionArtifact]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM match_predictions WHERE match_id = ?", (match_id,)
            ).fetchone()
        if row is None:
            return None
        return PredictionArtifact.from_row(row)

    def count(self, match_id: Optional[str] = None) -> int:
        with self._connect() as conn:
            if match_id is None:
                row = conn.execute("SELECT COUNT(*) FROM match_predictions").fetchone()
            else:
                row = conn.execute(
                    "SELECT COUNT(*) FROM match_predictions WHERE match_id = ?", (match_id,)
                ).fetchone()
        return int(row[0])


__all__ = ["DEFAULT_BUSY_TIMEOUT_SECONDS", "PredictionStore"]
