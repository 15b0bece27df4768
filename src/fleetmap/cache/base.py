"""Contract for the key/value store holding encoded road tiles."""

from __future__ import annotations

from typing import Mapping, Protocol


class CacheUnavailableError(RuntimeError):
    """Raised when the tile cache cannot be read from or written to."""


class TileCache(Protocol):
    def get(self, key: str) -> bytes | None:
        ...

    def set_batch(self, values: Mapping[str, bytes]) -> None:
        """Write every entry in one round trip, without expiry."""
        ...

    def delete(self, key: str) -> None:
        ...

    def delete_by_prefix(self, prefix: str) -> int:
        """Remove every key starting with ``prefix`` and return how many were removed."""
        ...
