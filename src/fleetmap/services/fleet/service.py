"""High-level orchestration for a distribution run."""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass

from ...models.domain import AssignmentResult
from ...persistence.fleet import FleetStore
from ...schemas.reports import FleetReport
from ..distribution.base import Distributor
from ..location.base import PositionSampler
from ..reports.summary import generate_report
from .seeding import refresh_orders, spawn_drivers

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class DistributionRun:
    result: AssignmentResult
    report: FleetReport
    duration_ms: float


def run_distribution(
    store: FleetStore,
    distributor: Distributor,
    *,
    sampler: PositionSampler | None = None,
    driver_count: int | None = None,
    rng: random.Random | None = None,
    redraw_orders: bool = False,
) -> DistributionRun:
    """Distribute the stored fleet and report on the committed outcome.

    When both ``sampler`` and ``driver_count`` are given the fleet is replaced
    with freshly placed, unassigned drivers first. With ``redraw_orders`` every
    restaurant gets a new order count before the run is measured. Drivers the
    strategy leaves unassigned lose any restaurant they had, in the same commit.
    """
    if redraw_orders:
        refresh_orders(store, rng)
    restaurants = store.list_restaurants()

    if sampler is not None and driver_count is not None:
        store.replace_drivers(spawn_drivers(driver_count, restaurants, sampler, rng))

    drivers = store.list_drivers()
    orders_before = {restaurant.id: restaurant.orders_count for restaurant in restaurants}

    start = time.perf_counter()
    result = distributor.distribute(drivers, restaurants)
    store.commit_assignments(result.assignments, unassign=result.unassigned)
    duration_ms = (time.perf_counter() - start) * 1000

    logger.info(
        f"Distributed {len(result.assignments)} drivers with {distributor.name} "
        f"in {duration_ms:.2f} ms ({len(result.unassigned)} unassigned)"
    )

    report = generate_report(store.list_restaurants(), store.list_drivers(), orders_before)
    return DistributionRun(result=result, report=report, duration_ms=round(duration_ms, 2))
