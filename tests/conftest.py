from __future__ import annotations

import math
from typing import Optional

import pytest

from landmark_locate.config import RecognitionConfig
from landmark_locate.nearby import NearbyLandmarkCache
from landmark_locate.pipeline import RecognitionPipeline
from landmark_locate.prototypes import PrototypeTable
from landmark_locate.types import Coordinates, LandmarkRecord
from landmark_locate.visual import VisualMatcher

BASE_LAT = 27.1751
BASE_LON = 78.0421


def unit(*values: float) -> list[float]:
    norm = math.sqrt(sum(v * v for v in values))
    return [v / norm for v in values]


def with_similarity(cos: float) -> list[float]:
    """2-d unit vector whose dot product with [1, 0] is `cos`."""
    return [cos, math.sqrt(1.0 - cos * cos)]


def north_of(km: float) -> float:
    return BASE_LAT + km / 111.0


def make_record(landmark_id: int, km_north: float = 0.0, info: str = "", country: str = "India", name: str = "") -> LandmarkRecord:
    return LandmarkRecord(
        landmark_id=landmark_id,
        name=name or f"Landmark {landmark_id}",
        info=info,
        latitude=north_of(km_north),
        longitude=BASE_LON,
        country=country,
    )


class FakeLandmarks:
    def __init__(self, records: list[LandmarkRecord], fail: bool = False) -> None:
        self.records = {r.landmark_id: r for r in records}
        self.fail = fail
        self.nearby_calls: list[float] = []

    def get_by_id(self, landmark_id: int) -> Optional[LandmarkRecord]:
        return self.records.get(landmark_id)

    def get_nearby(self, latitude: float, longitude: float, radius_km: float) -> list[LandmarkRecord]:
        self.nearby_calls.append(radius_km)
        if self.fail:
            raise ConnectionError("landmark source offline")
        out = []
        for r in self.records.values():
            if abs(r.latitude - latitude) * 111.0 <= radius_km and abs(r.longitude - longitude) < 1e-9:
                out.append(r)
        return out


class FakeEmbedder:
    def __init__(self, vector: Optional[list[float]] = None, error: Optional[Exception] = None) -> None:
        self.vector = vector
        self.error = error
        self.calls = 0

    def embed(self, image):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.vector


class FakeLocation:
    def __init__(self, coordinates: Optional[Coordinates] = None, error: Optional[Exception] = None) -> None:
        self.coordinates = coordinates
        self.error = error

    def current(self) -> Optional[Coordinates]:
        if self.error is not None:
            raise self.error
        return self.coordinates


class FakePreferences:
    def __init__(self, radius_km: float = 10.0) -> None:
        self.radius_km = radius_km

    def get_radius_km(self) -> float:
        return self.radius_km


class FakeEnricher:
    def __init__(self, text: str = "Enriched text.", error: Optional[Exception] = None) -> None:
        self.text = text
        self.error = error
        self.calls: list[tuple] = []

    def format(self, name: str, raw_text: str) -> str:
        self.calls.append(("format", name, raw_text))
        if self.error is not None:
            raise self.error
        return self.text

    def generate(self, name: str) -> str:
        self.calls.append(("generate", name))
        if self.error is not None:
            raise self.error
        return self.text


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def here() -> Coordinates:
    return Coordinates(latitude=BASE_LAT, longitude=BASE_LON)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def build(here, clock):
    """Factory for a pipeline wired entirely with fakes."""

    def _build(
        records: list[LandmarkRecord],
        prototypes: dict[int, list[float]],
        embedding: Optional[list[float]] = None,
        location=None,
        enricher=None,
        radius_km: float = 10.0,
        landmarks: Optional[FakeLandmarks] = None,
        embedder=None,
    ) -> RecognitionPipeline:
        config = RecognitionConfig()
        provider = landmarks or FakeLandmarks(records)
        table = PrototypeTable.from_pairs(prototypes.items())
        return RecognitionPipeline(
            landmarks=provider,
            matcher=VisualMatcher(table, config.min_cosine_similarity),
            embedder=embedder or FakeEmbedder(embedding),
            location=location or FakeLocation(here),
            preferences=FakePreferences(radius_km),
            enricher=enricher,
            config=config,
            nearby=NearbyLandmarkCache(provider, ttl_seconds=config.cache_ttl_seconds, clock=clock),
        )

    return _build
