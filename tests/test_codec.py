import numpy as np
import pytest

from src.fleetmap.cache.codec import SEGMENT_BYTES, decode_segments, encode_segments


def test_round_trip_preserves_exact_floats():
    segments = [
        [42.6886, 23.308027, 42.6986, 23.318027],
        [0.1 + 0.2, -179.99999999999997, 1e-300, -0.0],
    ]
    decoded = decode_segments(encode_segments(segments))

    assert decoded.shape == (2, 4)
    assert decoded.tolist() == segments


def test_encoding_is_compact_and_concatenable():
    first = [[1.0, 2.0, 3.0, 4.0]]
    second = [[5.0, 6.0, 7.0, 8.0], [9.0, 10.0, 11.0, 12.0]]

    assert len(encode_segments(first)) == SEGMENT_BYTES == 32
    assert encode_segments(first) + encode_segments(second) == encode_segments(first + second)


def test_empty_collection():
    assert encode_segments([]) == b""
    assert decode_segments(b"").shape == (0, 4)


def test_rejects_malformed_input():
    with pytest.raises(ValueError):
        encode_segments([[1.0, 2.0, 3.0]])
    with pytest.raises(ValueError):
        decode_segments(b"\x00" * 31)


def test_decoded_rows_are_float64():
    decoded = decode_segments(encode_segments([(1, 2, 3, 4)]))
    assert decoded.dtype == np.float64
