from __future__ import annotations

import logging
from typing import Any, Optional

from .cache import Cache

logger = logging.getLogger(__name__)

PREFERENCES_KEY = "preferences"
RADIUS_KEY = "landmark_recognition_radius"
DEFAULT_RADIUS_KM = 10.0


class Preferences:
    """Small persisted key-value store for user settings, kept in the cache directory."""

    def __init__(self, cache: Optional[Cache] = None, default_radius_km: float = DEFAULT_RADIUS_KM) -> None:
        self.cache = cache or Cache()
        self.default_radius_km = default_radius_km

    def _load(self) -> dict[str, Any]:
        data = self.cache.get(PREFERENCES_KEY)
        return data if isinstance(data, dict) else {}

    def get(self, key: str, default: Any = None) -> Any:
        return self._load().get(key, default)

    def set(self, key: str, value: Any) -> None:
        data = self._load()
        data[key] = value
        self.cache.set(PREFERENCES_KEY, data)

    def get_radius_km(self) -> float:
        value = self.get(RADIUS_KEY)
        if value is None:
            return self.default_radius_km
        try:
            radius = float(value)
        except (TypeError, ValueError):
            logger.warning("Ignoring invalid stored radius %r", value)
            return self.default_radius_km
        return radius if radius > 0 else self.default_radius_km

    def set_radius_km(self, radius_km: float) -> None:
        if radius_km <= 0:
            raise ValueError(f"radius must be positive, got {radius_km}")
        self.set(RADIUS_KEY, float(radius_km))


class FixedRadius:
    """Search radius for a single run; never read from or written to disk."""

    def __init__(self, radius_km: float) -> None:
        if radius_km <= 0:
            raise ValueError(f"radius must be positive, got {radius_km}")
        self.radius_km = float(radius_km)

    def get_radius_km(self) -> float:
        return self.radius_km
