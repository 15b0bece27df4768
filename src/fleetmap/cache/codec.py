"""Binary encoding of a tile's segments as packed float64 rows.

Each segment is stored as four little-endian doubles ``[lat1, lng1, lat2, lng2]``.
The layout has no header, so encoding two batches and concatenating the bytes
gives the same payload as encoding both batches together.
"""

from __future__ import annotations

from typing import Iterable, Sequence

import numpy as np

SEGMENT_DTYPE = np.dtype("<f8")
SEGMENT_WIDTH = 4
SEGMENT_BYTES = SEGMENT_DTYPE.itemsize * SEGMENT_WIDTH


def encode_segments(segments: Iterable[Sequence[float]]) -> bytes:
    rows = np.asarray(list(segments), dtype=SEGMENT_DTYPE)
    if rows.size == 0:
        return b""
    if rows.ndim != 2 or rows.shape[1] != SEGMENT_WIDTH:
        raise ValueError(f"Segments must have {SEGMENT_WIDTH} values each, got shape {rows.shape}")
    return rows.tobytes()


def decode_segments(payload: bytes) -> np.ndarray:
    """Return an (n, 4) float64 array. The array is read-only and shares the payload buffer."""

    if len(payload) % SEGMENT_BYTES:
        raise ValueError(f"Tile payload of {len(payload)} bytes is not a multiple of {SEGMENT_BYTES}")
    return np.frombuffer(payload, dtype=SEGMENT_DTYPE).reshape(-1, SEGMENT_WIDTH)
