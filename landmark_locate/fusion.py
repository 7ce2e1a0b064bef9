from __future__ import annotations

import logging
from typing import Optional

from .config import DEFAULT_CONFIG, RecognitionConfig
from .types import ScoreBundle

logger = logging.getLogger(__name__)


def agreement(gps_landmark_id: Optional[int], visual_landmark_id: Optional[int]) -> bool:
    return gps_landmark_id is not None and visual_landmark_id is not None and gps_landmark_id == visual_landmark_id


def select_landmark(
    gps_landmark_id: Optional[int],
    gps_score: float,
    visual_landmark_id: Optional[int],
    visual_score: float,
) -> Optional[int]:
    """Visual identity wins whenever it scores at least as high as GPS, ties included."""
    if visual_score >= gps_score:
        return visual_landmark_id
    return gps_landmark_id if gps_landmark_id is not None else visual_landmark_id


def fuse(
    gps_landmark_id: Optional[int],
    gps_score: float,
    visual_landmark_id: Optional[int],
    visual_score: float,
    config: RecognitionConfig = DEFAULT_CONFIG,
) -> ScoreBundle:
    """Combine both signals: alpha*visual + beta*gps, plus a flat bonus when they agree.

    The result is left unclamped, so an agreeing pair scores up to
    alpha + beta + bonus even when that sum is above 1.0.
    """
    bonus_applied = agreement(gps_landmark_id, visual_landmark_id)
    confidence = config.alpha * visual_score + config.beta * gps_score
    if bonus_applied:
        confidence += config.bonus
    bundle = ScoreBundle(
        gps_landmark_id=gps_landmark_id,
        visual_landmark_id=visual_landmark_id,
        gps_score=gps_score,
        visual_score=visual_score,
        bonus_applied=bonus_applied,
        confidence=confidence,
        landmark_id=select_landmark(gps_landmark_id, gps_score, visual_landmark_id, visual_score),
    )
    logger.debug(
        "Fused scores: visual=%.3f gps=%.3f bonus=%s confidence=%.3f",
        visual_score,
        gps_score,
        bonus_applied,
        confidence,
    )
    return bundle
