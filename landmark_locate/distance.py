"""Short-range distance and proximity scoring."""
from __future__ import annotations

import math

KM_PER_DEGREE = 111.0


def planar_distance_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Equirectangular approximation of the distance between two points in km.

    Latitude degrees are converted at 111 km/degree, longitude degrees are
    additionally scaled by the cosine of the mean latitude. Good enough below
    ~50 km; it ignores curvature, so do not use it for long ranges.
    """
    mean_lat = math.radians((lat1 + lat2) / 2)
    dlat = (lat2 - lat1) * KM_PER_DEGREE
    dlon = (lon2 - lon1) * KM_PER_DEGREE * math.cos(mean_lat)
    return math.sqrt(dlat * dlat + dlon * dlon)


def gps_proximity_score(distance_km: float, radius_km: float, gamma: float = 8.0) -> float:
    """Sigmoid proximity score in (0, 1): 0.5 at half the radius, decreasing with distance."""
    if radius_km <= 0:
        raise ValueError(f"radius_km must be positive, got {radius_km}")
    exponent = gamma * ((distance_km / radius_km) - 0.5)
    try:
        return 1.0 / (1.0 + math.exp(exponent))
    except OverflowError:
        return 0.0
