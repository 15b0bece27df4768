"""Preload the road tile cache from the polyline dataset."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Iterable

from ...cache.base import TileCache
from ...cache.codec import encode_segments
from ...config import settings
from ...models.domain import RoadSegment
from .decoder import iter_polylines, iter_tile_segments

# Distinct tile keys buffered before a pipelined write.
FLUSH_THRESHOLD = 1000
PRELOAD_FLAG_VALUE = b"1"

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class PreloadSummary:
    polylines: int
    segments: int
    tiles: int
    flushes: int
    duration_seconds: float


class _CountingPolylines:
    """Counts polylines as the decoder pulls them through."""

    def __init__(self, polylines: Iterable) -> None:
        self._polylines = polylines
        self.count = 0

    def __iter__(self):
        for road in self._polylines:
            self.count += 1
            yield road


def is_preloaded(cache: TileCache, flag_key: str | None = None) -> bool:
    return cache.get(flag_key or settings.preload_flag_key) is not None


def _flush(
    cache: TileCache,
    buffer: dict[str, list[RoadSegment]],
    written: set[str],
) -> None:
    payloads: dict[str, bytes] = {}
    for key, segments in buffer.items():
        encoded = encode_segments(segment.as_row() for segment in segments)
        if key in written:
            # The key was flushed earlier in this run; append instead of replacing it.
            encoded = (cache.get(key) or b"") + encoded
        payloads[key] = encoded
    cache.set_batch(payloads)
    written.update(buffer)


def preload_roads(
    source: Path | str | BinaryIO | None,
    cache: TileCache,
    *,
    polylines: Iterable | None = None,
    flush_threshold: int = FLUSH_THRESHOLD,
    prefix: str | None = None,
    flag_key: str | None = None,
) -> PreloadSummary:
    """Rebuild every road tile from ``source`` (or pre-parsed ``polylines``).

    The completion flag is cleared first and only set again once the whole
    dataset was written. On failure the exception propagates and tiles already
    written stay in place.
    """
    if flush_threshold < 1:
        raise ValueError("flush_threshold must be >= 1")
    if source is None and polylines is None:
        raise ValueError("Either a dataset source or polylines must be provided")

    key_prefix = prefix or settings.roads_cache_prefix
    flag = flag_key or settings.preload_flag_key
    start = time.perf_counter()

    cache.delete(flag)
    removed = cache.delete_by_prefix(key_prefix)
    logger.info(f"Cleared {removed} cached road tiles under '{key_prefix}'")

    roads = _CountingPolylines(polylines if polylines is not None else iter_polylines(source))
    buffer: dict[str, list[RoadSegment]] = {}
    written: set[str] = set()
    entries = 0
    flushes = 0

    for key, segment in iter_tile_segments(roads, key_prefix):
        buffer.setdefault(key, []).append(segment)
        entries += 1
        if len(buffer) >= flush_threshold:
            _flush(cache, buffer, written)
            flushes += 1
            logger.debug(f"Flushed {len(buffer)} tiles ({len(written)} written so far)")
            buffer = {}

    if buffer:
        _flush(cache, buffer, written)
        flushes += 1

    cache.set_batch({flag: PRELOAD_FLAG_VALUE})

    summary = PreloadSummary(
        polylines=roads.count,
        # Each segment is emitted once per endpoint tile.
        segments=entries // 2,
        tiles=len(written),
        flushes=flushes,
        duration_seconds=time.perf_counter() - start,
    )
    logger.info(
        f"Preloaded {summary.segments} road segments from {summary.polylines} polylines "
        f"into {summary.tiles} tiles ({summary.flushes} flushes, {summary.duration_seconds:.2f}s)"
    )
    return summary
