"""Process-local tile cache used for tests and single-process runs."""

from __future__ import annotations

import threading
from typing import Mapping


class InMemoryTileCache:
    def __init__(self, initial: Mapping[str, bytes] | None = None) -> None:
        self._data: dict[str, bytes] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str) -> bytes | None:
        with self._lock:
            return self._data.get(key)

    def set_batch(self, values: Mapping[str, bytes]) -> None:
        with self._lock:
            self._data.update(values)

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def delete_by_prefix(self, prefix: str) -> int:
        with self._lock:
            doomed = [key for key in self._data if key.startswith(prefix)]
            for key in doomed:
                del self._data[key]
            return len(doomed)

    def keys(self) -> list[str]:
        with self._lock:
            return sorted(self._data)
