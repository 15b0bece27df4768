"""Geospatial helper functions."""

from __future__ import annotations

import math
import random
from typing import Sequence

import numpy as np

EARTH_RADIUS_KM = 6371.0
KM_PER_DEGREE = 111.32


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute distance between two coordinates using the Haversine formula."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def segment_distances(lat: float, lon: float, segments: np.ndarray) -> np.ndarray:
    """Planar distance, in degrees, from a point to each row of an (n, 4) segment array.

    Rows are ``[lat1, lon1, lat2, lon2]``. The point is projected onto each
    segment with a dot product in raw degree space and the projection parameter
    is clamped to ``[0, 1]``. Zero-length segments measure to their endpoint.
    """

    rows = np.asarray(segments, dtype=np.float64).reshape(-1, 4)
    lat1, lon1, lat2, lon2 = rows[:, 0], rows[:, 1], rows[:, 2], rows[:, 3]
    d_lon = lon2 - lon1
    d_lat = lat2 - lat1
    length_sq = d_lon * d_lon + d_lat * d_lat

    numerator = (lat - lat1) * d_lat + (lon - lon1) * d_lon
    t = np.divide(numerator, length_sq, out=np.zeros_like(numerator), where=length_sq > 0)
    t = np.clip(t, 0.0, 1.0)

    proj_lat = lat1 + t * d_lat
    proj_lon = lon1 + t * d_lon
    return np.hypot(lat - proj_lat, lon - proj_lon)


def point_segment_distance(
    lat: float, lon: float, lat1: float, lon1: float, lat2: float, lon2: float
) -> float:
    """Planar degree distance from a point to a single segment."""

    return float(segment_distances(lat, lon, np.array([lat1, lon1, lat2, lon2]))[0])


def interpolate(segment: Sequence[float], t: float) -> tuple[float, float]:
    """Linear (not geodesic) interpolation along a ``[lat1, lon1, lat2, lon2]`` segment."""

    lat1, lon1, lat2, lon2 = (float(value) for value in segment)
    return (lat1 + (lat2 - lat1) * t, lon1 + (lon2 - lon1) * t)


def random_offset(
    lat: float, lon: float, radius_km: float, rng: random.Random | None = None
) -> tuple[float, float]:
    """Return a point uniformly distributed within ``radius_km`` of (lat, lon)."""

    rng = rng or random.Random()
    distance = radius_km * math.sqrt(rng.random())
    angle = 2 * math.pi * rng.random()
    delta_lat = distance / EARTH_RADIUS_KM * math.cos(angle)
    delta_lon = distance / (EARTH_RADIUS_KM * math.cos(math.radians(lat))) * math.sin(angle)
    return (lat + math.degrees(delta_lat), lon + math.degrees(delta_lon))
