"""Restaurant loading and random fleet generation."""

from __future__ import annotations

import json
import logging
import random
from pathlib import Path
from typing import Sequence

from ...config import settings
from ...models.domain import Driver, Restaurant
from ...persistence.fleet import FleetStore
from ..location.base import PositionSampler

SEED_ORDERS_RANGE = (5, 50)
REFRESH_ORDERS_RANGE = (1, 50)
CAPACITY_RANGE = (1, 4)

logger = logging.getLogger(__name__)


def load_restaurants(source: Path | None = None, rng: random.Random | None = None) -> list[Restaurant]:
    """Load restaurants from a JSON list of ``{"title", "coordinates": [lat, lng]}`` records."""

    rng = rng or random.Random()
    json_path = source or settings.restaurants_file
    if not json_path.exists():
        raise FileNotFoundError(f"Restaurant file not found: {json_path}")

    with json_path.open("r", encoding="utf-8") as handle:
        records = json.load(handle)
    if not isinstance(records, list):
        raise ValueError(f"Restaurant file '{json_path}' must contain a JSON array.")

    restaurants: list[Restaurant] = []
    for index, record in enumerate(records, start=1):
        try:
            lat, lng = record["coordinates"]
            restaurants.append(
                Restaurant(
                    id=index,
                    title=str(record["title"]),
                    latitude=float(lat),
                    longitude=float(lng),
                    orders_count=rng.randint(*SEED_ORDERS_RANGE),
                )
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError(f"Invalid restaurant record #{index} in '{json_path}': {exc}") from exc
    logger.info(f"Loaded {len(restaurants)} restaurants from {json_path}")
    return restaurants


def refresh_orders(store: FleetStore, rng: random.Random | None = None) -> dict[int, int]:
    """Draw a fresh order count for every restaurant and persist it."""

    rng = rng or random.Random()
    orders = {restaurant.id: rng.randint(*REFRESH_ORDERS_RANGE) for restaurant in store.list_restaurants()}
    store.update_orders(orders)
    return orders


def spawn_drivers(
    count: int,
    restaurants: Sequence[Restaurant],
    sampler: PositionSampler,
    rng: random.Random | None = None,
    radius_km: float | None = None,
) -> list[Driver]:
    """Create ``count`` unassigned drivers, each placed near a random restaurant."""

    if count < 0:
        raise ValueError("count must be >= 0")
    if count and not restaurants:
        raise ValueError("Cannot place drivers without restaurants.")

    rng = rng or random.Random()
    radius = radius_km if radius_km is not None else settings.sampler_radius_km
    drivers: list[Driver] = []
    misses = 0
    for index in range(1, count + 1):
        anchor = rng.choice(restaurants)
        position = sampler.sample(anchor.latitude, anchor.longitude, radius)
        if position is None:
            misses += 1
        drivers.append(
            Driver(
                id=index,
                name=f"Driver {index:03d}",
                latitude=position[0] if position else None,
                longitude=position[1] if position else None,
                capacity=rng.randint(*CAPACITY_RANGE),
            )
        )
    if misses:
        logger.warning(f"{misses} of {count} drivers could not be placed and have no position")
    return drivers
