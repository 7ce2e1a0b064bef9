from __future__ import annotations

import os

from pydantic import BaseModel, ConfigDict, Field


GEMINI_DEFAULT_MODEL = os.environ.get("LANDMARK_LOCATE_GEMINI_MODEL", "gemini-2.5-flash-lite")
OPENAI_DEFAULT_MODEL = os.environ.get("LANDMARK_LOCATE_OPENAI_MODEL", "gpt-5-nano")
DEFAULT_PROVIDER = os.environ.get("LANDMARK_LOCATE_PROVIDER", "gemini")  # gemini, openai or none


class RecognitionConfig(BaseModel):
    """Scoring weights and acceptance thresholds for hybrid recognition."""

    model_config = ConfigDict(frozen=True)

    alpha: float = Field(0.4, description="visual score weight")
    beta: float = Field(0.3, description="GPS score weight")
    gamma: float = Field(8.0, gt=0, description="sigmoid steepness of the proximity score")
    bonus: float = Field(0.3, description="added when GPS and visual pick the same landmark")

    confidence_threshold: float = 0.7
    visual_score_threshold: float = 0.6
    min_cosine_similarity: float = 0.2

    cache_ttl_seconds: float = Field(120.0, gt=0)
    default_radius_km: float = Field(10.0, gt=0)
    radius_expansion: float = Field(2.0, ge=1.0)


DEFAULT_CONFIG = RecognitionConfig()
