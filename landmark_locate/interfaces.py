"""Contracts of the collaborators the recognition pipeline depends on."""
from __future__ import annotations

from pathlib import Path
from typing import Optional, Protocol, Sequence, Union, runtime_checkable

from .types import Coordinates, LandmarkRecord

ImageInput = Union[str, Path]


@runtime_checkable
class LandmarkProvider(Protocol):
    def get_by_id(self, landmark_id: int) -> Optional[LandmarkRecord]: ...

    def get_nearby(self, latitude: float, longitude: float, radius_km: float) -> list[LandmarkRecord]: ...


@runtime_checkable
class Embedder(Protocol):
    def embed(self, image: ImageInput) -> Optional[Sequence[float]]: ...


@runtime_checkable
class LocationProvider(Protocol):
    def current(self) -> Optional[Coordinates]: ...


@runtime_checkable
class PreferenceStore(Protocol):
    def get_radius_km(self) -> float: ...


@runtime_checkable
class TextEnricher(Protocol):
    """May raise on any call; callers keep a fallback text."""

    def format(self, name: str, raw_text: str) -> str: ...

    def generate(self, name: str) -> str: ...
