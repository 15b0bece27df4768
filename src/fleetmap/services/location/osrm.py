"""Random placement snapped to the nearest road by an OSRM service."""

from __future__ import annotations

import logging
import random
import time

import httpx

from ...config import settings
from ..geospatial import random_offset
from .base import DEFAULT_RADIUS_KM, PositionSampler

logger = logging.getLogger(__name__)


class OSRMNearestClient:
    """Minimal client for the OSRM ``/nearest`` endpoint."""

    def __init__(
        self,
        base_url: str | None = None,
        profile: str | None = None,
        timeout: float = 10.0,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self.base_url = (base_url or settings.osrm_base_url).rstrip("/")
        if not self.base_url:
            raise ValueError("OSRM base URL is not configured.")
        self.profile = profile or settings.osrm_profile
        self.max_retries = max_retries if max_retries is not None else settings.osrm_max_retries
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.osrm_backoff_seconds
        self._client = client or httpx.Client(timeout=httpx.Timeout(timeout, connect=5.0))

    def close(self) -> None:
        self._client.close()

    def nearest(self, lat: float, lng: float) -> tuple[float, float] | None:
        """Snap a point to the road network. Returns None when OSRM has no waypoint."""

        # OSRM expects lon,lat order
        url = f"{self.base_url}/nearest/v1/{self.profile}/{lng},{lat}"
        attempt = 0
        while True:
            try:
                response = self._client.get(url, params={"number": 1})
                response.raise_for_status()
                data = response.json()
                break
            except httpx.HTTPStatusError as e:
                if e.response.status_code < 500:
                    logger.warning(f"OSRM nearest rejected ({e.response.status_code}) for {lat},{lng}")
                    return None
                attempt += 1
                if attempt > self.max_retries:
                    raise
                time.sleep(self.backoff_seconds * attempt)
            except (httpx.TimeoutException, httpx.NetworkError) as e:
                attempt += 1
                if attempt > self.max_retries:
                    raise
                wait_time = self.backoff_seconds * (2 ** (attempt - 1))  # Exponential backoff
                logger.debug(f"OSRM nearest failed, retrying in {wait_time:.1f}s (attempt {attempt}/{self.max_retries}): {e}")
                time.sleep(wait_time)

        try:
            lng_snapped, lat_snapped = data["waypoints"][0]["location"]
        except (KeyError, IndexError, TypeError, ValueError):
            return None
        return (float(lat_snapped), float(lng_snapped))


class OSRMNearestSampler(PositionSampler):
    """Draw random points around the center until one snaps onto a road."""

    def __init__(
        self,
        client: OSRMNearestClient | None = None,
        *,
        rng: random.Random | None = None,
        max_attempts: int | None = None,
    ) -> None:
        self.client = client or OSRMNearestClient()
        self.rng = rng or random.Random()
        self.max_attempts = max_attempts or settings.osrm_nearest_max_attempts

    def sample(self, lat: float, lng: float, radius_km: float = DEFAULT_RADIUS_KM) -> tuple[float, float] | None:
        for attempt in range(1, self.max_attempts + 1):
            candidate_lat, candidate_lng = random_offset(lat, lng, radius_km, self.rng)
            try:
                snapped = self.client.nearest(candidate_lat, candidate_lng)
            except httpx.HTTPError as e:
                logger.warning(f"OSRM nearest lookup failed (attempt {attempt}/{self.max_attempts}): {e}")
                continue
            if snapped is not None:
                return snapped
        return None
