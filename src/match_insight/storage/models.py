"""The persisted unit: a validated prediction plus its provenance."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Mapping, Optional

from match_insight.llm.schema import PredictionArgs
from match_insight.llm.validator import validate_prediction


@dataclass(frozen=True)
class PredictionArtifact:
    match_id: str
    competition_name: str
    match_date: datetime
    home_team: str
    away_team: str
    prediction: PredictionArgs
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def prediction_json(self) -> str:
        return json.dumps(self.prediction.to_wire(), sort_keys=True, ensure_ascii=False)

    def to_response(self) -> Dict[str, Any]:
        """Public shape of an artifact, as consumed by the listing endpoints."""

        return {
            "matchId": self.match_id,
            "competitionName": self.competition_name,
            "matchDate": self.match_date.isoformat(),
            "homeTeam": self.home_team,
            "awayTeam": self.away_team,
            "prediction": self.prediction.to_wire(),
        }

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "PredictionArtifact":
        return cls(
            match_id=row["match_id"],
            competition_name=row["competition_name"],
            match_date=datetime.fromisoformat(row["match_date"]),
            home_team=row["home_team"],
            away_team=row["away_team"],
            prediction=validate_prediction(row["prediction_json"]),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )


__all__ = ["PredictionArtifact"]
