"""Supabase client backing the restaurant and driver tables."""

import logging
from functools import lru_cache

from supabase import Client, create_client

from ..config import settings


@lru_cache()
def get_supabase_client() -> Client | None:
    """Shared Supabase client, or None when the fleet runs without a database.

    Both ``FLEET_SUPABASE_URL`` and ``FLEET_SUPABASE_KEY`` must be set. The
    connection is not probed here; the first table query or RPC surfaces any
    network failure.
    """
    url, key = settings.supabase_url, settings.supabase_key
    if not url or not key:
        logging.info("Supabase not configured; using the in-memory fleet store")
        return None

    try:
        return create_client(url, key)
    except Exception as e:
        logging.error(f"Could not create Supabase client for {url}: {e}")
        return None
