from __future__ import annotations

import logging
from enum import Enum
from typing import Optional, Tuple

from .config import DEFAULT_CONFIG, RecognitionConfig
from .distance import gps_proximity_score, planar_distance_km
from .fusion import fuse
from .interfaces import (
    Embedder,
    ImageInput,
    LandmarkProvider,
    LocationProvider,
    PreferenceStore,
    TextEnricher,
)
from .nearby import NearbyLandmarkCache
from .types import LandmarkRecord, Outcome, RecognitionResult, ScoreBundle
from .visual import VisualMatcher

logger = logging.getLogger(__name__)


MESSAGES = {
    Outcome.NO_MATCH: "Sorry, no matching landmark found.",
    Outcome.LOW_CONFIDENCE: "Landmark detected but confidence is too low.",
    Outcome.LANDMARK_NOT_FOUND: "Could not identify landmark.",
    Outcome.ERROR: "Recognition failed.",
}
MISSING_RECORD_MESSAGE = "Landmark data not found."


class Stage(str, Enum):
    IDLE = "idle"
    GPS_SCORING = "gps_scoring"
    VISUAL_SCORING = "visual_scoring"
    FUSING = "fusing"
    THRESHOLD_CHECK = "threshold_check"
    ENRICHING = "enriching"


def fallback_description(record: LandmarkRecord) -> str:
    return (
        f"{record.name} is a notable landmark in {record.country}. "
        "This site holds historical or cultural significance."
    )


class RecognitionPipeline:
    """Hybrid GPS + visual landmark recognition.

    All collaborators are injected. `recognize` never raises: provider
    failures degrade to zero scores, and anything unexpected becomes an
    `Outcome.ERROR` result.
    """

    def __init__(
        self,
        landmarks: LandmarkProvider,
        matcher: VisualMatcher,
        embedder: Embedder,
        location: LocationProvider,
        preferences: PreferenceStore,
        enricher: Optional[TextEnricher] = None,
        config: RecognitionConfig = DEFAULT_CONFIG,
        nearby: Optional[NearbyLandmarkCache] = None,
    ) -> None:
        self.landmarks = landmarks
        self.matcher = matcher
        self.embedder = embedder
        self.location = location
        self.preferences = preferences
        self.enricher = enricher
        self.config = config
        self.nearby = nearby or NearbyLandmarkCache(
            landmarks,
            ttl_seconds=config.cache_ttl_seconds,
            expansion=config.radius_expansion,
        )

    def _enter(self, stage: Stage) -> None:
        """Stages are only traced in the debug log; no state is kept between calls."""
        logger.debug("stage: %s", stage.value)

    def recognize(self, image: ImageInput) -> RecognitionResult:
        try:
            return self._recognize(image)
        except Exception:
            logger.exception("Unexpected failure during landmark recognition")
            return RecognitionResult(outcome=Outcome.ERROR, message=MESSAGES[Outcome.ERROR])

    def _recognize(self, image: ImageInput) -> RecognitionResult:
        self._enter(Stage.GPS_SCORING)
        gps_id, gps_score = self.gps_scoring()

        self._enter(Stage.VISUAL_SCORING)
        visual_id, visual_score = self.visual_scoring(image)

        self._enter(Stage.FUSING)
        scores = fuse(gps_id, gps_score, visual_id, visual_score, self.config)

        self._enter(Stage.THRESHOLD_CHECK)
        outcome = self.check_thresholds(scores)
        if outcome is not None:
            logger.info("Recognition rejected (%s), confidence=%.3f", outcome.value, scores.confidence)
            return RecognitionResult.from_scores(outcome, scores, message=MESSAGES[outcome])

        self._enter(Stage.ENRICHING)
        return self._enrich(scores)

    def radius_km(self) -> float:
        try:
            radius = float(self.preferences.get_radius_km())
        except Exception as e:
            logger.warning("Could not read search radius, using default: %s", e)
            return self.config.default_radius_km
        if radius <= 0:
            return self.config.default_radius_km
        return radius

    def gps_scoring(self) -> Tuple[Optional[int], float]:
        try:
            position = self.location.current()
        except Exception as e:
            logger.warning("Location unavailable: %s", e)
            position = None
        if position is None:
            return None, 0.0

        radius = self.radius_km()
        self.nearby.refresh_if_stale(position, radius)
        nearest: Optional[LandmarkRecord] = None
        nearest_km = float("inf")
        for record in self.nearby.landmarks():
            d = planar_distance_km(position.latitude, position.longitude, record.latitude, record.longitude)
            if d < nearest_km:
                nearest, nearest_km = record, d
        if nearest is None:
            logger.info("No cached nearby landmarks")
            return None, 0.0

        score = gps_proximity_score(nearest_km, radius, self.config.gamma)
        logger.debug("GPS nearest %s (%s) at %.2f km, score=%.3f", nearest.landmark_id, nearest.name, nearest_km, score)
        return nearest.landmark_id, score

    def visual_scoring(self, image: ImageInput) -> Tuple[Optional[int], float]:
        try:
            embedding = self.embedder.embed(image)
        except Exception as e:
            logger.warning("Embedding failed: %s", e)
            embedding = None
        if embedding is None:
            return None, 0.0
        return self.matcher.match(embedding, self.nearby.ids())

    def check_thresholds(self, scores: ScoreBundle) -> Optional[Outcome]:
        """Return the rejecting outcome, or None when the attempt may proceed to enrichment."""
        if scores.confidence < self.config.confidence_threshold:
            return Outcome.NO_MATCH
        if not (scores.bonus_applied or scores.visual_score >= self.config.visual_score_threshold):
            return Outcome.LOW_CONFIDENCE
        if scores.landmark_id is None:
            return Outcome.LANDMARK_NOT_FOUND
        return None

    def _enrich(self, scores: ScoreBundle) -> RecognitionResult:
        record = self.landmarks.get_by_id(scores.landmark_id)
        if record is None:
            logger.warning("Landmark %s matched but missing from the landmark store", scores.landmark_id)
            return RecognitionResult.from_scores(
                Outcome.LANDMARK_NOT_FOUND, scores, message=MISSING_RECORD_MESSAGE
            )
        return RecognitionResult.from_scores(
            Outcome.SUCCESS,
            scores,
            landmark_id=record.landmark_id,
            landmark_name=record.name,
            description=self.describe(record),
        )

    def describe(self, record: LandmarkRecord) -> str:
        """Enriched text for `record`, falling back to its raw info and then to a template."""
        text = ""
        if self.enricher is not None:
            try:
                if record.info.strip():
                    text = self.enricher.format(record.name, record.info)
                else:
                    text = self.enricher.generate(record.name)
            except Exception as e:
                logger.warning("Text enrichment failed for %s, using fallback: %s", record.name, e)
                text = ""
        if text and text.strip():
            return text.strip()
        if record.info.strip():
            return record.info
        return fallback_description(record)

    def close(self) -> None:
        for part in (self.embedder, self.enricher):
            close = getattr(part, "close", None)
            if callable(close):
                close()
