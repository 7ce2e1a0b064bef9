from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional

from .interfaces import LandmarkProvider
from .types import Coordinates, LandmarkRecord

logger = logging.getLogger(__name__)


class NearbyLandmarkCache:
    """Landmarks around the last known position, refreshed at most once per TTL.

    Refreshes are single-flight: the staleness check, the provider query and
    the write of the new list and timestamp all happen under one lock.
    """

    def __init__(
        self,
        provider: LandmarkProvider,
        ttl_seconds: float = 120.0,
        expansion: float = 2.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._provider = provider
        self._ttl = ttl_seconds
        self._expansion = expansion
        self._clock = clock
        self._lock = threading.Lock()
        self._landmarks: list[LandmarkRecord] = []
        self._refreshed_at: Optional[float] = None

    def _is_stale(self) -> bool:
        return self._refreshed_at is None or (self._clock() - self._refreshed_at) > self._ttl

    @property
    def is_stale(self) -> bool:
        with self._lock:
            return self._is_stale()

    def refresh_if_stale(self, position: Coordinates, base_radius_km: float) -> bool:
        """Query the provider if the cache is stale. Returns True when a query was issued."""
        with self._lock:
            if not self._is_stale():
                return False
            try:
                found = self._provider.get_nearby(position.latitude, position.longitude, base_radius_km)
                if not found:
                    expanded = base_radius_km * self._expansion
                    logger.info("No landmarks within %.1f km, expanding to %.1f km", base_radius_km, expanded)
                    found = self._provider.get_nearby(position.latitude, position.longitude, expanded)
                self._landmarks = list(found)
            except Exception as e:
                logger.warning("Nearby landmark lookup failed, continuing without GPS scope: %s", e)
                self._landmarks = []
            # stamped even when empty so a bad area does not hit the provider on every call
            self._refreshed_at = self._clock()
            logger.debug("Nearby cache refreshed: %d landmarks", len(self._landmarks))
            return True

    def landmarks(self) -> list[LandmarkRecord]:
        with self._lock:
            if self._is_stale():
                return []
            return list(self._landmarks)

    def ids(self) -> list[int]:
        return [lm.landmark_id for lm in self.landmarks()]

    def invalidate(self) -> None:
        with self._lock:
            self._landmarks = []
            self._refreshed_at = None
