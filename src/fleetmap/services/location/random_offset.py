"""Uniform random placement, ignoring the road network."""

from __future__ import annotations

import random

from ..geospatial import random_offset
from .base import DEFAULT_RADIUS_KM, PositionSampler


class RandomOffsetSampler(PositionSampler):
    def __init__(self, rng: random.Random | None = None) -> None:
        self.rng = rng or random.Random()

    def sample(self, lat: float, lng: float, radius_km: float = DEFAULT_RADIUS_KM) -> tuple[float, float]:
        return random_offset(lat, lng, radius_km, self.rng)
