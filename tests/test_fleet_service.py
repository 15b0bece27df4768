import json
import random
from pathlib import Path
from types import SimpleNamespace

import pytest

from src.fleetmap.models.domain import Driver, Restaurant
from src.fleetmap.persistence.fleet import InMemoryFleetStore, SupabaseFleetStore
from src.fleetmap.services.distribution import GreedyDistributor, SortedCostDistributor
from src.fleetmap.services.fleet.seeding import load_restaurants, refresh_orders, spawn_drivers
from src.fleetmap.services.fleet.service import run_distribution
from src.fleetmap.services.location.base import PositionSampler
from src.fleetmap.services.location.random_offset import RandomOffsetSampler


class FixedSampler(PositionSampler):
    def __init__(self, positions):
        self.positions = list(positions)
        self.calls = []

    def sample(self, lat, lng, radius_km=5.0):
        self.calls.append((lat, lng, radius_km))
        return self.positions.pop(0) if self.positions else None


class DummyQuery:
    def __init__(self, client, table):
        self.client = client
        self.table = table
        self.ops = []

    def __getattr__(self, name):
        def record(*args, **kwargs):
            self.ops.append((name, args))
            return self

        return record

    def execute(self):
        self.client.executed.append((self.table, self.ops))
        rows = self.client.rows.get(self.table, []) if self.ops and self.ops[0][0] == "select" else []
        return SimpleNamespace(data=rows)


class DummySupabase:
    def __init__(self, rows=None, fail_rpc=False):
        self.rows = rows or {}
        self.executed = []
        self.rpc_calls = []
        self.fail_rpc = fail_rpc

    def table(self, name):
        return DummyQuery(self, name)

    def rpc(self, name, params):
        self.rpc_calls.append((name, params))
        if self.fail_rpc:
            raise RuntimeError("foreign key violation")
        return SimpleNamespace(execute=lambda: SimpleNamespace(data=None))


def _restaurants() -> list[Restaurant]:
    return [
        Restaurant(id=1, title="Vitosha Grill", latitude=42.6977, longitude=23.3219, orders_count=50),
        Restaurant(id=2, title="Mountain Bistro", latitude=42.9000, longitude=23.6000, orders_count=45),
    ]


def test_run_distribution_commits_and_reports():
    drivers = [
        Driver(id=1, name="Driver 001", latitude=42.6980, longitude=23.3220, capacity=2),
        Driver(id=2, name="Driver 002", latitude=42.8995, longitude=23.5995, capacity=3),
    ]
    store = InMemoryFleetStore(_restaurants(), drivers)

    run = run_distribution(store, GreedyDistributor())

    assert run.result.assignments == {1: 1, 2: 2}
    assert [driver.restaurant_id for driver in store.list_drivers()] == [1, 2]
    assert [row.orders_after for row in run.report.restaurants] == [48, 42]
    assert sum(row.orders_before for row in run.report.restaurants) == 95
    assert run.duration_ms >= 0


def test_run_distribution_spawns_a_fresh_fleet():
    store = InMemoryFleetStore(
        _restaurants(),
        [Driver(id=99, name="Old", latitude=1.0, longitude=1.0, capacity=1, restaurant_id=1)],
    )
    rng = random.Random(11)

    run = run_distribution(
        store,
        SortedCostDistributor(),
        sampler=RandomOffsetSampler(rng=random.Random(3)),
        driver_count=10,
        rng=rng,
    )

    drivers = store.list_drivers()
    assert [driver.id for driver in drivers] == list(range(1, 11))
    assert len(run.result.assignments) + len(run.result.unassigned) == 10
    assert all(driver.restaurant_id is not None for driver in drivers if driver.id in run.result.assignments)
    assert len(run.report.drivers) == 10


def test_assignment_batch_with_unknown_ids_is_rejected_whole():
    store = InMemoryFleetStore(
        _restaurants(),
        [Driver(id=1, name="Driver 001", latitude=42.0, longitude=23.0, capacity=2)],
    )

    with pytest.raises(KeyError):
        store.commit_assignments({1: 1, 7: 2})
    with pytest.raises(KeyError):
        store.commit_assignments({1: 3})

    assert store.list_drivers()[0].restaurant_id is None


def test_in_memory_store_hands_out_copies():
    store = InMemoryFleetStore(_restaurants())
    store.list_restaurants()[0].orders_count = 0
    assert store.list_restaurants()[0].orders_count == 50


def test_refresh_orders_draws_new_counts():
    store = InMemoryFleetStore(_restaurants())
    orders = refresh_orders(store, random.Random(1))

    assert set(orders) == {1, 2}
    assert all(1 <= count <= 50 for count in orders.values())
    assert [restaurant.orders_count for restaurant in store.list_restaurants()] == [orders[1], orders[2]]


def test_load_restaurants_from_seed_file(tmp_path: Path):
    seed = tmp_path / "restaurants.json"
    seed.write_text(
        json.dumps(
            [
                {"title": "Vitosha Grill", "coordinates": [42.6977, 23.3219]},
                {"title": "Serdika Pizza", "coordinates": [42.7000, 23.3250]},
            ]
        ),
        encoding="utf-8",
    )

    restaurants = load_restaurants(seed, random.Random(5))

    assert [restaurant.id for restaurant in restaurants] == [1, 2]
    assert restaurants[1].title == "Serdika Pizza"
    assert (restaurants[0].latitude, restaurants[0].longitude) == (42.6977, 23.3219)
    assert all(5 <= restaurant.orders_count <= 50 for restaurant in restaurants)


def test_load_restaurants_rejects_bad_records(tmp_path: Path):
    seed = tmp_path / "restaurants.json"
    seed.write_text(json.dumps([{"title": "No coordinates"}]), encoding="utf-8")
    with pytest.raises(ValueError):
        load_restaurants(seed)
    with pytest.raises(FileNotFoundError):
        load_restaurants(tmp_path / "missing.json")


def test_spawn_drivers_places_each_driver_near_a_restaurant():
    sampler = FixedSampler([(42.70, 23.32), None, (42.71, 23.33)])

    drivers = spawn_drivers(3, _restaurants(), sampler, random.Random(9), radius_km=2.5)

    assert [driver.name for driver in drivers] == ["Driver 001", "Driver 002", "Driver 003"]
    assert (drivers[0].latitude, drivers[0].longitude) == (42.70, 23.32)
    assert not drivers[1].has_position
    assert all(1 <= driver.capacity <= 4 for driver in drivers)
    assert all(driver.restaurant_id is None for driver in drivers)
    anchors = {(restaurant.latitude, restaurant.longitude) for restaurant in _restaurants()}
    assert all((lat, lng) in anchors and radius == 2.5 for lat, lng, radius in sampler.calls)


def test_spawn_drivers_needs_restaurants():
    with pytest.raises(ValueError):
        spawn_drivers(1, [], FixedSampler([]))
    assert spawn_drivers(0, [], FixedSampler([])) == []


def test_supabase_store_reads_rows():
    client = DummySupabase(
        rows={
            "restaurants": [
                {"id": 1, "title": "Vitosha Grill", "latitude": 42.6977, "longitude": 23.3219, "orders_count": 12}
            ],
            "drivers": [
                {"id": 4, "name": "Driver 004", "latitude": None, "longitude": None, "capacity": 3, "restaurant_id": None}
            ],
        }
    )
    store = SupabaseFleetStore(client)

    restaurants = store.list_restaurants()
    drivers = store.list_drivers()

    assert restaurants[0].orders_count == 12
    assert drivers[0].id == 4
    assert not drivers[0].has_position
    assert client.executed[0] == ("restaurants", [("select", ("*",)), ("order", ("id",))])


def test_supabase_commit_goes_through_one_rpc():
    client = DummySupabase()
    store = SupabaseFleetStore(client)

    store.commit_assignments({3: 1, 4: 2})
    store.commit_assignments({})

    assert client.rpc_calls == [
        (
            "assign_drivers",
            {"assignments": [{"driver_id": 3, "restaurant_id": 1}, {"driver_id": 4, "restaurant_id": 2}]},
        )
    ]


def test_supabase_commit_failure_propagates():
    store = SupabaseFleetStore(DummySupabase(fail_rpc=True))
    with pytest.raises(RuntimeError):
        store.commit_assignments({1: 1})


def test_supabase_replace_drivers_clears_then_inserts():
    client = DummySupabase()
    store = SupabaseFleetStore(client)

    store.replace_drivers([Driver(id=1, name="Driver 001", latitude=42.0, longitude=23.0, capacity=2)])

    assert [table for table, _ in client.executed] == ["drivers", "drivers"]
    assert client.executed[0][1][0][0] == "delete"
    inserted = client.executed[1][1][0]
    assert inserted[0] == "insert"
    assert inserted[1][0][0]["capacity"] == 2


def test_rerun_clears_drivers_the_strategy_leaves_unassigned():
    store = InMemoryFleetStore(
        [Restaurant(id=1, title="R1", latitude=42.0, longitude=23.0, orders_count=2)],
        [
            Driver(id=1, name="Driver 001", latitude=42.001, longitude=23.0, capacity=2, restaurant_id=1),
            Driver(id=2, name="Driver 002", latitude=42.002, longitude=23.0, capacity=2, restaurant_id=1),
        ],
    )

    run = run_distribution(store, GreedyDistributor())

    assert run.result.assignments == {1: 1}
    assert run.result.unassigned == [2]
    assert [driver.restaurant_id for driver in store.list_drivers()] == [1, None]
    assert [row.assigned_restaurant for row in run.report.drivers] == ["R1", "none"]
    assert run.report.restaurants[0].orders_after == 0


def test_unassign_with_unknown_driver_rejects_whole_batch():
    store = InMemoryFleetStore(
        _restaurants(),
        [Driver(id=1, name="Driver 001", latitude=42.0, longitude=23.0, capacity=2, restaurant_id=2)],
    )

    with pytest.raises(KeyError):
        store.commit_assignments({1: 1}, unassign=[8])

    assert store.list_drivers()[0].restaurant_id == 2


def test_supabase_commit_sends_cleared_drivers_in_the_same_rpc():
    client = DummySupabase()
    SupabaseFleetStore(client).commit_assignments({3: 1}, unassign=[5])

    assert client.rpc_calls == [
        (
            "assign_drivers",
            {"assignments": [{"driver_id": 5, "restaurant_id": None}, {"driver_id": 3, "restaurant_id": 1}]},
        )
    ]


def test_run_distribution_can_redraw_orders_first():
    store = InMemoryFleetStore(_restaurants())

    run = run_distribution(store, GreedyDistributor(), rng=random.Random(21), redraw_orders=True)

    redrawn = {restaurant.id: restaurant.orders_count for restaurant in store.list_restaurants()}
    assert all(1 <= count <= 50 for count in redrawn.values())
    assert {row.restaurant_id: row.orders_before for row in run.report.restaurants} == redrawn


def test_seeding_logs_through_its_module_logger(tmp_path: Path, caplog):
    seed = tmp_path / "restaurants.json"
    seed.write_text(json.dumps([{"title": "Vitosha Grill", "coordinates": [42.6977, 23.3219]}]), encoding="utf-8")

    with caplog.at_level("INFO"):
        load_restaurants(seed)

    assert [record.name for record in caplog.records] == ["src.fleetmap.services.fleet.seeding"]
