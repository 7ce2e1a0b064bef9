from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from .cache import Cache
from .config import DEFAULT_CONFIG, DEFAULT_PROVIDER, RecognitionConfig
from .embedding import TorchScriptEmbedder
from .enrichment import build_enricher
from .errors import ServiceInitError
from .interfaces import Embedder, LocationProvider, PreferenceStore, TextEnricher
from .landmarks import CsvLandmarkStore
from .location import StaticLocation
from .pipeline import RecognitionPipeline
from .preferences import Preferences
from .prototypes import load_prototypes
from .visual import VisualMatcher

logger = logging.getLogger(__name__)


def build_pipeline(
    landmarks_csv: str | os.PathLike[str],
    prototypes_json: str | os.PathLike[str],
    embedder: Embedder | str | os.PathLike[str],
    *,
    location: Optional[LocationProvider] = None,
    preferences: Optional[PreferenceStore] = None,
    enricher: Optional[TextEnricher] = None,
    provider: str = DEFAULT_PROVIDER,
    model_name: Optional[str] = None,
    cache: Optional[Cache] = None,
    config: RecognitionConfig = DEFAULT_CONFIG,
) -> RecognitionPipeline:
    """Load every resource once and wire up a pipeline.

    The landmark table, the prototypes and the embedding model are required;
    a missing text backend only degrades descriptions to their fallbacks.
    `embedder` may be an object with an `embed` method or a TorchScript path.
    """
    store = CsvLandmarkStore.from_csv(landmarks_csv)
    if not len(store):
        raise ServiceInitError(f"No landmarks loaded from {landmarks_csv}")

    table = load_prototypes(prototypes_json)
    if not len(table):
        raise ServiceInitError(f"No prototypes loaded from {prototypes_json}")

    if isinstance(embedder, (str, os.PathLike, Path)):
        embedder = TorchScriptEmbedder(embedder)

    cache = cache or Cache()
    if enricher is None:
        enricher = build_enricher(provider, model_name, cache)
    if enricher is None:
        logger.warning("No text backend available; descriptions will use stored landmark info")

    logger.info("Recognition service ready: %d landmarks, %d prototypes", len(store), len(table))
    return RecognitionPipeline(
        landmarks=store,
        matcher=VisualMatcher(table, config.min_cosine_similarity),
        embedder=embedder,
        location=location or StaticLocation(),
        preferences=preferences or Preferences(cache, config.default_radius_km),
        enricher=enricher,
        config=config,
    )
