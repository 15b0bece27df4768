"""Streaming decoder turning road polylines into tile-keyed segments.

The source dataset is a single JSON array of polylines, each polyline an
ordered list of ``[lng, lat]`` pairs. The file is parsed incrementally with
``ijson`` so city-scale datasets never have to fit in memory.
"""

from __future__ import annotations

from pathlib import Path
from typing import BinaryIO, Iterable, Iterator, Sequence

import ijson

from ...models.domain import RoadSegment
from .tiles import segment_tile_keys


class DatasetFormatError(ValueError):
    """Raised when the road dataset does not have the expected shape."""


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _coerce_point(point: object, road_index: int, point_index: int) -> tuple[float, float]:
    if (
        not isinstance(point, (list, tuple))
        or len(point) != 2
        or not all(_is_number(value) for value in point)
    ):
        raise DatasetFormatError(
            f"Road {road_index}, point {point_index}: expected a [lng, lat] numeric pair, got {point!r}"
        )
    lng, lat = point
    return float(lat), float(lng)


def _require_top_level_array(events: Iterator[tuple]) -> Iterator[tuple]:
    for position, (prefix, event, value) in enumerate(events):
        if position == 0 and event != "start_array":
            raise DatasetFormatError(f"Road dataset must be a JSON array of polylines, found {event}")
        yield prefix, event, value


def iter_polylines(source: Path | str | BinaryIO) -> Iterator[list]:
    """Lazily yield polylines from a JSON file path or an open binary handle.

    Anything other than a top-level array is rejected before a single road is
    produced, so an object-shaped file cannot pass for an empty dataset.
    """

    if isinstance(source, (str, Path)):
        with open(source, "rb") as handle:
            yield from iter_polylines(handle)
        return

    try:
        events = _require_top_level_array(ijson.parse(source, use_float=True))
        for road in ijson.items(events, "item"):
            yield road
    except ijson.JSONError as exc:
        raise DatasetFormatError(f"Malformed road dataset: {exc}") from exc


def iter_tile_segments(
    polylines: Iterable[Sequence], prefix: str | None = None
) -> Iterator[tuple[str, RoadSegment]]:
    """Yield one ``(tile_key, segment)`` per consecutive point pair and endpoint tile."""

    for road_index, road in enumerate(polylines):
        if not isinstance(road, (list, tuple)):
            raise DatasetFormatError(f"Road {road_index}: expected an array of points, got {type(road).__name__}")

        previous: tuple[float, float] | None = None
        for point_index, point in enumerate(road):
            lat, lng = _coerce_point(point, road_index, point_index)
            if previous is not None:
                segment = RoadSegment(previous[0], previous[1], lat, lng)
                for key in segment_tile_keys(segment.lat1, segment.lng1, segment.lat2, segment.lng2, prefix):
                    yield key, segment
            previous = (lat, lng)


def stream_tile_segments(
    source: Path | str | BinaryIO, prefix: str | None = None
) -> Iterator[tuple[str, RoadSegment]]:
    return iter_tile_segments(iter_polylines(source), prefix)
