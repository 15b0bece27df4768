"""Fixed-size lat/lng grid used to bucket road segments."""

from __future__ import annotations

import math

from ...config import settings

TILE_SIZE = 0.02
NEIGHBORHOOD_RADIUS = 2


def tile_index(lat: float, lng: float) -> tuple[int, int]:
    return (math.floor(lat / TILE_SIZE), math.floor(lng / TILE_SIZE))


def tile_id(lat: float, lng: float) -> str:
    row, col = tile_index(lat, lng)
    return f"{row}_{col}"


def tile_key(lat: float, lng: float, prefix: str | None = None) -> str:
    """Cache key of the tile containing (lat, lng), e.g. ``roads:2134_1165``."""

    return f"{settings.roads_cache_prefix if prefix is None else prefix}{tile_id(lat, lng)}"


def segment_tile_keys(
    lat1: float, lng1: float, lat2: float, lng2: float, prefix: str | None = None
) -> tuple[str, str]:
    """Keys of the tiles holding each endpoint. Both are returned even when equal."""

    return (tile_key(lat1, lng1, prefix), tile_key(lat2, lng2, prefix))


def neighborhood_keys(lat: float, lng: float, prefix: str | None = None) -> list[str]:
    """Keys of the 5x5 block of tiles centred on the tile containing (lat, lng)."""

    key_prefix = settings.roads_cache_prefix if prefix is None else prefix
    base_row, base_col = tile_index(lat, lng)
    span = range(-NEIGHBORHOOD_RADIUS, NEIGHBORHOOD_RADIUS + 1)
    return [f"{key_prefix}{base_row + i}_{base_col + j}" for i in span for j in span]
