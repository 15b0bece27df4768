"""Single-pass greedy distribution balancing distance against remaining orders."""

from __future__ import annotations

from typing import Sequence

from ...models.domain import AssignmentResult, Driver, Restaurant
from .base import driver_distance_km, target_remaining


class GreedyDistributor:
    """Assign each driver, in input order, to its lowest-scoring restaurant.

    ``score = distance_km * distance_weight + max(target - (remaining - capacity), 0) * balance_weight``

    Restaurants that already have no remaining orders are skipped. The
    remaining count is reduced by the driver's capacity after each assignment
    and may go below zero.
    """

    name = "greedy"

    def __init__(self, *, distance_weight: float = 1.0, balance_weight: float = 5.0) -> None:
        self.distance_weight = distance_weight
        self.balance_weight = balance_weight

    def distribute(self, drivers: Sequence[Driver], restaurants: Sequence[Restaurant]) -> AssignmentResult:
        result = AssignmentResult(strategy=self.name)
        if not drivers or not restaurants:
            return result

        target = target_remaining(drivers, restaurants)
        remaining = {restaurant.id: restaurant.orders_count for restaurant in restaurants}

        for driver in drivers:
            if not driver.has_position:
                result.unassigned.append(driver.id)
                continue

            best_id: int | None = None
            best_score = float("inf")
            for restaurant in restaurants:
                left = remaining[restaurant.id]
                if left <= 0:
                    continue
                penalty = max(target - (left - driver.capacity), 0)
                score = driver_distance_km(driver, restaurant) * self.distance_weight + penalty * self.balance_weight
                if score < best_score:
                    best_score = score
                    best_id = restaurant.id

            if best_id is None:
                result.unassigned.append(driver.id)
                continue
            result.assignments[driver.id] = best_id
            remaining[best_id] -= driver.capacity

        return result
