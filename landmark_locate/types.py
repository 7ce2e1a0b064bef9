from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Coordinates(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)


class LandmarkRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    landmark_id: int
    name: str
    info: str = ""
    latitude: float
    longitude: float
    category: str = ""
    supercategory: str = ""
    hierarchical_label: str = ""
    natural_or_human_made: str = ""
    info_language: str = ""
    country: str = ""


class ScoreBundle(BaseModel):
    """Per-attempt scores. `confidence` is not clamped; alpha + beta + bonus may exceed 1.0."""

    gps_landmark_id: Optional[int] = None
    visual_landmark_id: Optional[int] = None
    gps_score: float = Field(0.0, ge=0.0, le=1.0)
    visual_score: float = Field(0.0, ge=0.0, le=1.0)
    bonus_applied: bool = False
    confidence: float = 0.0
    landmark_id: Optional[int] = None  # after tie-break


class Outcome(str, Enum):
    SUCCESS = "success"
    NO_MATCH = "no_match"
    LOW_CONFIDENCE = "low_confidence"
    LANDMARK_NOT_FOUND = "landmark_not_found"
    ERROR = "error"


class RecognitionResult(BaseModel):
    outcome: Outcome
    landmark_id: Optional[int] = None
    landmark_name: Optional[str] = None
    description: Optional[str] = None
    message: Optional[str] = None
    confidence: float = 0.0
    visual_score: float = 0.0
    gps_score: float = 0.0
    bonus_applied: bool = False

    @property
    def success(self) -> bool:
        return self.outcome is Outcome.SUCCESS

    @classmethod
    def from_scores(cls, outcome: Outcome, scores: ScoreBundle, **kwargs) -> "RecognitionResult":
        return cls(
            outcome=outcome,
            confidence=scores.confidence,
            visual_score=scores.visual_score,
            gps_score=scores.gps_score,
            bonus_applied=scores.bonus_applied,
            **kwargs,
        )
