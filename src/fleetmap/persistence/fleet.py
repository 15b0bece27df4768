"""Driver and restaurant persistence with all-or-nothing assignment commits."""

from __future__ import annotations

import logging
import threading
from dataclasses import replace
from typing import Any, Iterable, Mapping, Protocol, Sequence

from ..db.supabase import get_supabase_client
from ..models.domain import Driver, Restaurant

logger = logging.getLogger(__name__)


class FleetStore(Protocol):
    def list_restaurants(self) -> list[Restaurant]:
        ...

    def list_drivers(self) -> list[Driver]:
        ...

    def replace_drivers(self, drivers: Sequence[Driver]) -> None:
        ...

    def update_orders(self, orders: Mapping[int, int]) -> None:
        ...

    def commit_assignments(self, assignments: Mapping[int, int], unassign: Iterable[int] = ()) -> None:
        """Apply every ``driver_id -> restaurant_id`` update and clear ``unassign``, or do nothing."""
        ...


class InMemoryFleetStore:
    """Holds snapshots in process memory; readers always get copies."""

    def __init__(
        self,
        restaurants: Sequence[Restaurant] = (),
        drivers: Sequence[Driver] = (),
    ) -> None:
        self._restaurants = {restaurant.id: replace(restaurant) for restaurant in restaurants}
        self._drivers = {driver.id: replace(driver) for driver in drivers}
        self._lock = threading.Lock()

    def list_restaurants(self) -> list[Restaurant]:
        with self._lock:
            return [replace(restaurant) for restaurant in self._restaurants.values()]

    def list_drivers(self) -> list[Driver]:
        with self._lock:
            return [replace(driver) for driver in sorted(self._drivers.values(), key=lambda item: item.id)]

    def replace_drivers(self, drivers: Sequence[Driver]) -> None:
        with self._lock:
            self._drivers = {driver.id: replace(driver) for driver in drivers}

    def update_orders(self, orders: Mapping[int, int]) -> None:
        with self._lock:
            unknown = set(orders) - set(self._restaurants)
            if unknown:
                raise KeyError(f"Unknown restaurant ids: {sorted(unknown)}")
            for restaurant_id, count in orders.items():
                self._restaurants[restaurant_id].orders_count = count

    def commit_assignments(self, assignments: Mapping[int, int], unassign: Iterable[int] = ()) -> None:
        cleared = set(unassign)
        with self._lock:
            unknown_drivers = (set(assignments) | cleared) - set(self._drivers)
            unknown_restaurants = set(assignments.values()) - set(self._restaurants)
            if unknown_drivers or unknown_restaurants:
                raise KeyError(
                    f"Assignment batch rejected: unknown drivers {sorted(unknown_drivers)}, "
                    f"unknown restaurants {sorted(unknown_restaurants)}"
                )
            for driver_id in cleared:
                self._drivers[driver_id].restaurant_id = None
            for driver_id, restaurant_id in assignments.items():
                self._drivers[driver_id].restaurant_id = restaurant_id


def _restaurant_from_row(row: dict[str, Any]) -> Restaurant:
    return Restaurant(
        id=int(row["id"]),
        title=str(row.get("title") or ""),
        latitude=float(row["latitude"]),
        longitude=float(row["longitude"]),
        orders_count=int(row.get("orders_count") or 0),
    )


def _driver_from_row(row: dict[str, Any]) -> Driver:
    lat = row.get("latitude")
    lng = row.get("longitude")
    restaurant_id = row.get("restaurant_id")
    return Driver(
        id=int(row["id"]),
        name=str(row.get("name") or ""),
        latitude=float(lat) if lat is not None else None,
        longitude=float(lng) if lng is not None else None,
        capacity=int(row["capacity"]),
        restaurant_id=int(restaurant_id) if restaurant_id is not None else None,
    )


def _driver_to_row(driver: Driver) -> dict[str, Any]:
    return {
        "id": driver.id,
        "name": driver.name,
        "latitude": driver.latitude,
        "longitude": driver.longitude,
        "capacity": driver.capacity,
        "restaurant_id": driver.restaurant_id,
    }


class SupabaseFleetStore:
    """Reads the ``restaurants``/``drivers`` tables and commits through one RPC.

    ``assign_drivers`` is a Postgres function taking a JSON array of
    ``{driver_id, restaurant_id}`` objects, where a null ``restaurant_id`` clears
    the driver. It runs in a single transaction so the whole batch is applied or
    rejected together.
    """

    ASSIGN_RPC = "assign_drivers"

    def __init__(self, client: Any | None = None) -> None:
        self.client = client if client is not None else get_supabase_client()
        if self.client is None:
            raise ValueError("Supabase is not configured.")

    def list_restaurants(self) -> list[Restaurant]:
        response = self.client.table("restaurants").select("*").order("id").execute()
        return [_restaurant_from_row(row) for row in (response.data or [])]

    def list_drivers(self) -> list[Driver]:
        response = self.client.table("drivers").select("*").order("id").execute()
        return [_driver_from_row(row) for row in (response.data or [])]

    def replace_drivers(self, drivers: Sequence[Driver]) -> None:
        # Not atomic: readers may briefly see an empty fleet between the two calls.
        self.client.table("drivers").delete().gte("id", 0).execute()
        if drivers:
            self.client.table("drivers").insert([_driver_to_row(driver) for driver in drivers]).execute()

    def update_orders(self, orders: Mapping[int, int]) -> None:
        for restaurant_id, count in orders.items():
            self.client.table("restaurants").update({"orders_count": count}).eq("id", restaurant_id).execute()

    def commit_assignments(self, assignments: Mapping[int, int], unassign: Iterable[int] = ()) -> None:
        payload = [{"driver_id": driver_id, "restaurant_id": None} for driver_id in unassign]
        payload += [
            {"driver_id": driver_id, "restaurant_id": restaurant_id}
            for driver_id, restaurant_id in assignments.items()
        ]
        if not payload:
            return
        try:
            self.client.rpc(self.ASSIGN_RPC, {"assignments": payload}).execute()
        except Exception as e:
            logger.error(f"Assignment batch of {len(payload)} drivers was rejected: {e}")
            raise
