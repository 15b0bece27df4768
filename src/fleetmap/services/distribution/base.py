"""Shared contract and helpers for driver distribution strategies."""

from __future__ import annotations

from typing import Protocol, Sequence

from ...models.domain import AssignmentResult, Driver, Restaurant
from ..geospatial import haversine_km


class Distributor(Protocol):
    name: str

    def distribute(self, drivers: Sequence[Driver], restaurants: Sequence[Restaurant]) -> AssignmentResult:
        ...


def target_remaining(drivers: Sequence[Driver], restaurants: Sequence[Restaurant]) -> float:
    """Orders each restaurant would keep if the fleet's capacity were spread evenly."""

    if not restaurants:
        return 0.0
    total_orders = sum(restaurant.orders_count for restaurant in restaurants)
    total_capacity = sum(driver.capacity for driver in drivers)
    return max(total_orders - total_capacity, 0) / len(restaurants)


def driver_distance_km(driver: Driver, restaurant: Restaurant) -> float:
    return haversine_km(driver.latitude, driver.longitude, restaurant.latitude, restaurant.longitude)
