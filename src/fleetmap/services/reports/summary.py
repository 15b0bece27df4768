"""Post-distribution summary of restaurant load and driver distances."""

from __future__ import annotations

from typing import Mapping, Optional, Sequence

from ...models.domain import Driver, Restaurant
from ...schemas.reports import DriverReport, FleetReport, Position, RestaurantReport
from ..geospatial import haversine_km


def _restaurant_rows(
    restaurants: Sequence[Restaurant],
    drivers: Sequence[Driver],
    orders_before: Mapping[int, int],
) -> list[RestaurantReport]:
    assigned_capacity: dict[int, int] = {}
    for driver in drivers:
        if driver.restaurant_id is not None:
            assigned_capacity[driver.restaurant_id] = assigned_capacity.get(driver.restaurant_id, 0) + driver.capacity

    return [
        RestaurantReport(
            restaurant_id=restaurant.id,
            title=restaurant.title,
            orders_before=orders_before.get(restaurant.id, 0),
            orders_after=max(restaurant.orders_count - assigned_capacity.get(restaurant.id, 0), 0),
        )
        for restaurant in restaurants
    ]


def _nearest(driver: Driver, restaurants: Sequence[Restaurant]) -> tuple[Optional[Restaurant], float]:
    nearest: Optional[Restaurant] = None
    nearest_distance = float("inf")
    for restaurant in restaurants:
        distance = haversine_km(driver.latitude, driver.longitude, restaurant.latitude, restaurant.longitude)
        if distance < nearest_distance:
            nearest_distance = distance
            nearest = restaurant
    return nearest, nearest_distance


def generate_report(
    restaurants: Sequence[Restaurant],
    drivers: Sequence[Driver],
    orders_before: Optional[Mapping[int, int]] = None,
) -> FleetReport:
    """Summarise a post-assignment snapshot.

    ``orders_before`` maps restaurant id to its order count prior to the run and
    defaults to the snapshot's own counts. Drivers without a position are left
    out of the driver rows and of the average.
    """
    if orders_before is None:
        orders_before = {restaurant.id: restaurant.orders_count for restaurant in restaurants}

    by_id = {restaurant.id: restaurant for restaurant in restaurants}
    driver_rows: list[DriverReport] = []
    total_distance = 0.0

    for driver in sorted(drivers, key=lambda item: item.id):
        if not driver.has_position:
            continue

        assigned = by_id.get(driver.restaurant_id) if driver.restaurant_id is not None else None
        assigned_distance = 0.0
        if assigned is not None:
            assigned_distance = haversine_km(driver.latitude, driver.longitude, assigned.latitude, assigned.longitude)

        nearest, nearest_distance = _nearest(driver, restaurants)

        driver_rows.append(
            DriverReport(
                id=driver.id,
                name=driver.name,
                position=Position(lat=driver.latitude, lng=driver.longitude),
                assigned_restaurant=assigned.title if assigned is not None else "none",
                assigned_distance_km=round(assigned_distance, 2),
                nearest_restaurant=nearest.title if nearest is not None else "none",
                nearest_distance_km=round(nearest_distance, 2) if nearest is not None else 0.0,
            )
        )
        total_distance += assigned_distance

    average = total_distance / len(driver_rows) if driver_rows else 0.0
    return FleetReport(
        restaurants=_restaurant_rows(restaurants, drivers, orders_before),
        drivers=driver_rows,
        average_distance_km=round(average, 2),
    )
