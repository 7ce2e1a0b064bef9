from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence, Tuple

import numpy as np

from .prototypes import PrototypeTable

logger = logging.getLogger(__name__)


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity of two L2-normalised vectors, i.e. their dot product clamped to [-1, 1]."""
    va = np.asarray(a, dtype=np.float64).reshape(-1)
    vb = np.asarray(b, dtype=np.float64).reshape(-1)
    if va.shape != vb.shape:
        logger.debug("Vector length mismatch: %d vs %d", va.size, vb.size)
        return 0.0
    return float(np.clip(np.dot(va, vb), -1.0, 1.0))


def to_visual_score(raw_similarity: float) -> float:
    """Map a cosine similarity in [-1, 1] onto [0, 1]."""
    return (raw_similarity + 1.0) / 2.0


class VisualMatcher:
    def __init__(self, prototypes: PrototypeTable, min_cosine_similarity: float = 0.2) -> None:
        self.prototypes = prototypes
        self.min_cosine_similarity = min_cosine_similarity

    def _scope_rows(self, scope_ids: Optional[Iterable[int]]) -> Tuple[list[int], list[int]]:
        if scope_ids:
            ids: list[int] = []
            seen: set[int] = set()
            for lid in scope_ids:
                if lid in self.prototypes and lid not in seen:
                    seen.add(lid)
                    ids.append(lid)
            if ids:
                return ids, [self.prototypes.row(lid) for lid in ids]
            logger.debug("No prototypes for the nearby landmarks, searching globally")
        return list(self.prototypes.ids), list(range(len(self.prototypes)))

    def best_match(
        self, embedding: Sequence[float], scope_ids: Optional[Iterable[int]] = None
    ) -> Tuple[Optional[int], float]:
        """Return the prototype id most similar to `embedding` and the raw cosine similarity.

        The search is limited to `scope_ids` that have a prototype; when none
        do (or no scope is given) the whole table is searched.
        """
        if not len(self.prototypes):
            return None, 0.0
        query = np.asarray(embedding, dtype=np.float64).reshape(-1)
        if query.size != self.prototypes.dim:
            logger.warning("Embedding has %d dims, prototypes have %d", query.size, self.prototypes.dim)
            return None, 0.0
        if not np.all(np.isfinite(query)):
            logger.warning("Embedding contains non-finite values")
            return None, 0.0
        ids, rows = self._scope_rows(scope_ids)
        sims = np.clip(self.prototypes.matrix[rows].astype(np.float64) @ query, -1.0, 1.0)
        best = int(np.argmax(sims))
        logger.debug("Searched %d prototypes", len(ids))
        return ids[best], float(sims[best])

    def match(
        self, embedding: Optional[Sequence[float]], scope_ids: Optional[Iterable[int]] = None
    ) -> Tuple[Optional[int], float]:
        """Best match gated by the minimum similarity, as (landmark_id, visual_score)."""
        if embedding is None:
            return None, 0.0
        try:
            landmark_id, raw = self.best_match(embedding, scope_ids)
        except (TypeError, ValueError) as e:
            logger.warning("Visual matching failed: %s", e)
            return None, 0.0
        if landmark_id is None:
            return None, 0.0
        if raw < self.min_cosine_similarity:
            logger.info("Visual match too weak: %.3f < %.2f", raw, self.min_cosine_similarity)
            return None, 0.0
        score = to_visual_score(raw)
        logger.debug("Visual match %s: similarity=%.3f score=%.3f", landmark_id, raw, score)
        return landmark_id, score
