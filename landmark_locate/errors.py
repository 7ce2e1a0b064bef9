from __future__ import annotations


class LandmarkLocateError(RuntimeError):
    pass


class ServiceInitError(LandmarkLocateError):
    """A required resource (prototypes, embedding model, landmark table) failed to load."""


class EnrichmentError(LandmarkLocateError):
    """The text backend is unavailable or returned something unusable."""
