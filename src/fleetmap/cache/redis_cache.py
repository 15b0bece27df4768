"""Redis-backed tile cache."""

from __future__ import annotations

import logging
import re
from typing import Mapping

import redis

from .base import CacheUnavailableError

logger = logging.getLogger(__name__)

# Keys removed per pipelined DEL round trip when clearing a prefix.
DELETE_BATCH_SIZE = 1000

_GLOB_SPECIAL = re.compile(r"([*?\[\]\\])")


def _escape_glob(value: str) -> str:
    return _GLOB_SPECIAL.sub(r"\\\1", value)


class RedisTileCache:
    """Stores each tile under its own key; batches go through a non-transactional pipeline."""

    def __init__(self, client: redis.Redis) -> None:
        self.client = client

    def get(self, key: str) -> bytes | None:
        try:
            return self.client.get(key)
        except redis.RedisError as exc:
            raise CacheUnavailableError(f"Failed to read tile '{key}': {exc}") from exc

    def set_batch(self, values: Mapping[str, bytes]) -> None:
        if not values:
            return
        try:
            pipe = self.client.pipeline(transaction=False)
            for key, payload in values.items():
                pipe.set(key, payload)
            pipe.execute()
        except redis.RedisError as exc:
            raise CacheUnavailableError(f"Failed to write {len(values)} tiles: {exc}") from exc

    def delete(self, key: str) -> None:
        try:
            self.client.delete(key)
        except redis.RedisError as exc:
            raise CacheUnavailableError(f"Failed to delete '{key}': {exc}") from exc

    def delete_by_prefix(self, prefix: str) -> int:
        removed = 0
        batch: list = []
        try:
            for key in self.client.scan_iter(match=f"{_escape_glob(prefix)}*", count=DELETE_BATCH_SIZE):
                batch.append(key)
                if len(batch) >= DELETE_BATCH_SIZE:
                    removed += self._delete_keys(batch)
                    batch = []
            if batch:
                removed += self._delete_keys(batch)
        except redis.RedisError as exc:
            raise CacheUnavailableError(f"Failed to clear keys under '{prefix}': {exc}") from exc
        logger.debug(f"Removed {removed} cache keys under prefix '{prefix}'")
        return removed

    def _delete_keys(self, keys: list) -> int:
        pipe = self.client.pipeline(transaction=False)
        pipe.delete(*keys)
        (count,) = pipe.execute()
        return int(count)
