"""Place drivers on cached road segments near a point."""

from __future__ import annotations

import logging
import random
import time
from typing import Callable, Literal

import numpy as np

from ...cache.base import CacheUnavailableError, TileCache
from ...cache.codec import decode_segments
from ..geospatial import KM_PER_DEGREE, interpolate, segment_distances
from ..roads.tiles import neighborhood_keys
from .base import DEFAULT_RADIUS_KM, PositionSampler

# Candidates examined per call before scanning stops.
SCAN_BUDGET = 100

logger = logging.getLogger(__name__)


class RoadSampler(PositionSampler):
    """Pick a uniformly random road segment near a point and a random spot along it.

    Segments are read from the 5x5 tile neighborhood in shuffled order and
    filtered by planar distance to the query point. One segment is kept with
    reservoir sampling, so whenever the scan budget cuts the search short the
    choice is still uniform over the candidates seen.

    With ``radius_units="degrees"`` the radius is compared directly with the
    degree-space distance, which is how tiles have always been filtered. A
    radius of 5 therefore admits every segment in the neighborhood. Use
    ``radius_units="km"`` to convert the radius before filtering.
    """

    def __init__(
        self,
        cache: TileCache,
        *,
        rng: random.Random | None = None,
        radius_units: Literal["degrees", "km"] = "degrees",
        scan_budget: int = SCAN_BUDGET,
        deadline_seconds: float | None = None,
        prefix: str | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if scan_budget < 1:
            raise ValueError("scan_budget must be >= 1")
        self.cache = cache
        self.rng = rng or random.Random()
        self.radius_units = radius_units
        self.scan_budget = scan_budget
        self.deadline_seconds = deadline_seconds
        self.prefix = prefix
        self.clock = clock

    def _threshold(self, radius_km: float) -> float:
        if self.radius_units == "km":
            return radius_km / KM_PER_DEGREE
        return radius_km

    def _read_tile(self, key: str) -> np.ndarray | None:
        try:
            payload = self.cache.get(key)
        except CacheUnavailableError as exc:
            logger.warning(f"Treating tile {key} as absent: {exc}")
            return None
        if not payload:
            return None
        try:
            return decode_segments(payload)
        except ValueError as exc:
            logger.warning(f"Skipping undecodable tile {key}: {exc}")
            return None

    def sample(self, lat: float, lng: float, radius_km: float = DEFAULT_RADIUS_KM) -> tuple[float, float] | None:
        keys = neighborhood_keys(lat, lng, self.prefix)
        self.rng.shuffle(keys)

        threshold = self._threshold(radius_km)
        started = self.clock()
        chosen: np.ndarray | None = None
        seen = 0

        for key in keys:
            if self.deadline_seconds is not None and self.clock() - started > self.deadline_seconds:
                logger.debug(f"Road sampling deadline reached after {seen} candidates")
                break

            segments = self._read_tile(key)
            if segments is None or not len(segments):
                continue

            distances = segment_distances(lat, lng, segments)
            for index in np.flatnonzero(distances <= threshold):
                seen += 1
                if self.rng.randint(1, seen) == 1:
                    chosen = segments[index]
                if seen >= self.scan_budget:
                    break
            if seen >= self.scan_budget:
                break

        if chosen is None:
            return None
        return interpolate(chosen, self.rng.uniform(0.0, 1.0))
