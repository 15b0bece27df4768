"""Redis client for the road tile cache."""

import logging
from functools import lru_cache

import redis

from ..config import settings


@lru_cache()
def get_redis_client() -> redis.Redis | None:
    """Shared Redis client built from ``FLEET_REDIS_URL``.

    Returns None when no URL is configured or the URL cannot be parsed. Tiles
    are stored as raw bytes, so responses are not decoded.
    """
    if not settings.redis_url:
        logging.warning("Redis URL not configured; road tiles are kept in process memory")
        return None

    try:
        return redis.Redis.from_url(settings.redis_url)
    except ValueError as e:
        logging.error(f"Invalid Redis URL '{settings.redis_url}': {e}")
        return None
