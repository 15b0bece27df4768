"""Cost-matrix distribution for drivers that are not assigned yet."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from ...models.domain import AssignmentResult, Driver, Restaurant
from .base import driver_distance_km, target_remaining


def build_cost_matrix(drivers: Sequence[Driver], restaurants: Sequence[Restaurant]) -> np.ndarray:
    """Haversine distance (km) for every driver x restaurant pair."""

    matrix = np.zeros((len(drivers), len(restaurants)), dtype=np.float64)
    for i, driver in enumerate(drivers):
        for j, restaurant in enumerate(restaurants):
            matrix[i, j] = driver_distance_km(driver, restaurant)
    return matrix


class SortedCostDistributor:
    """Assign constrained drivers first, each to its best restaurant with spare orders.

    Drivers are ordered by their distance to the closest restaurant, so those
    with few good options choose before drivers that could go anywhere. The
    balance penalty grows super-linearly to punish local overloads harder
    than the greedy strategy does.
    """

    name = "sorted_cost"

    def __init__(
        self,
        *,
        distance_weight: float = 0.7,
        balance_weight: float = 10.0,
        penalty_exponent: float = 1.3,
    ) -> None:
        self.distance_weight = distance_weight
        self.balance_weight = balance_weight
        self.penalty_exponent = penalty_exponent

    def distribute(self, drivers: Sequence[Driver], restaurants: Sequence[Restaurant]) -> AssignmentResult:
        result = AssignmentResult(strategy=self.name)
        pending = [driver for driver in drivers if driver.restaurant_id is None]
        if not pending or not restaurants:
            return result

        positioned = [driver for driver in pending if driver.has_position]
        result.unassigned.extend(driver.id for driver in pending if not driver.has_position)
        if not positioned:
            return result

        target = target_remaining(pending, restaurants)
        costs = build_cost_matrix(positioned, restaurants)
        load = [0] * len(restaurants)

        # Stable sorts: ties keep input order.
        driver_order = np.argsort(costs.min(axis=1), kind="stable")

        for driver_index in driver_order:
            driver = positioned[driver_index]
            distances = costs[driver_index]

            selected: int | None = None
            best_score = float("inf")
            for restaurant_index in np.argsort(distances, kind="stable"):
                restaurant = restaurants[restaurant_index]
                current = load[restaurant_index]
                if current >= restaurant.orders_count:
                    continue

                remaining_after = restaurant.orders_count - (current + driver.capacity)
                penalty = max(target - remaining_after, 0) ** self.penalty_exponent
                score = distances[restaurant_index] * self.distance_weight + penalty * self.balance_weight
                if score < best_score:
                    best_score = score
                    selected = int(restaurant_index)

            if selected is None:
                result.unassigned.append(driver.id)
                continue
            result.assignments[driver.id] = restaurants[selected].id
            load[selected] += driver.capacity

        return result
