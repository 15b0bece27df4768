"""Factory for driver placement strategies based on configuration."""

from __future__ import annotations

import random

from ...cache.base import TileCache
from ...cache.memory import InMemoryTileCache
from ...cache.redis_cache import RedisTileCache
from ...config import settings
from ...db.redis_client import get_redis_client
from .base import PositionSampler
from .osrm import OSRMNearestSampler
from .random_offset import RandomOffsetSampler
from .roads import RoadSampler


def default_tile_cache() -> TileCache:
    client = get_redis_client()
    if client is None:
        return InMemoryTileCache()
    return RedisTileCache(client)


def get_sampler(
    method: str | None = None,
    *,
    cache: TileCache | None = None,
    rng: random.Random | None = None,
) -> PositionSampler:
    match method or settings.position_sampler:
        case "roads":
            return RoadSampler(
                cache if cache is not None else default_tile_cache(),
                rng=rng,
                radius_units=settings.sampler_radius_units,
                deadline_seconds=settings.sampler_deadline_seconds,
            )
        case "random":
            return RandomOffsetSampler(rng=rng)
        case "osrm":
            return OSRMNearestSampler(rng=rng)
        case other:
            raise ValueError(f"Unknown position sampler '{other}'.")
