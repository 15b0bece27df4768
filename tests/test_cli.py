import json
from pathlib import Path

import pytest

from src.fleetmap import cli
from src.fleetmap.cache.memory import InMemoryTileCache
from src.fleetmap.models.domain import Restaurant
from src.fleetmap.persistence.fleet import InMemoryFleetStore
from src.fleetmap.services.roads.indexer import is_preloaded


def test_preload_fills_the_tile_cache(tmp_path: Path, monkeypatch, capsys):
    dataset = tmp_path / "roads.json"
    dataset.write_text(json.dumps([[[23.3080, 42.6886], [23.3090, 42.6896]]]), encoding="utf-8")
    cache = InMemoryTileCache()
    monkeypatch.setattr(cli, "default_tile_cache", lambda: cache)

    assert cli.main(["preload", "--dataset", str(dataset)]) == 0

    assert is_preloaded(cache)
    assert "1 segments" in capsys.readouterr().out


def test_preload_reports_malformed_dataset(tmp_path: Path, monkeypatch):
    dataset = tmp_path / "roads.json"
    dataset.write_text('[[[23.3, "north"]]]', encoding="utf-8")
    cache = InMemoryTileCache()
    monkeypatch.setattr(cli, "default_tile_cache", lambda: cache)

    assert cli.main(["preload", "--dataset", str(dataset)]) == 1
    assert not is_preloaded(cache)


def test_preload_reports_missing_dataset(tmp_path: Path, monkeypatch):
    monkeypatch.setattr(cli, "default_tile_cache", InMemoryTileCache)
    assert cli.main(["preload", "--dataset", str(tmp_path / "absent.json")]) == 1


def test_distribute_prints_report(monkeypatch, capsys):
    store = InMemoryFleetStore(
        [
            Restaurant(id=1, title="Vitosha Grill", latitude=42.6977, longitude=23.3219, orders_count=30),
            Restaurant(id=2, title="Mountain Bistro", latitude=42.9000, longitude=23.6000, orders_count=20),
        ]
    )
    monkeypatch.setattr(cli, "_default_store", lambda: store)

    code = cli.main(["distribute", "--strategy", "greedy", "--sampler", "random", "--drivers", "5"])

    assert code == 0
    report = json.loads(capsys.readouterr().out)
    assert len(report["restaurants"]) == 2
    assert len(report["drivers"]) == 5
    assert len(store.list_drivers()) == 5


def test_distribute_can_refresh_orders(monkeypatch, capsys):
    store = InMemoryFleetStore(
        [Restaurant(id=1, title="Vitosha Grill", latitude=42.6977, longitude=23.3219, orders_count=500)]
    )
    monkeypatch.setattr(cli, "_default_store", lambda: store)

    code = cli.main(["distribute", "--sampler", "random", "--drivers", "0", "--refresh-orders"])

    assert code == 0
    report = json.loads(capsys.readouterr().out)
    assert 1 <= report["restaurants"][0]["orders_before"] <= 50
    assert report["restaurants"][0]["orders_before"] == store.list_restaurants()[0].orders_count


@pytest.mark.parametrize("value", ["-1", "many"])
def test_distribute_rejects_invalid_driver_count(value, monkeypatch):
    calls = []
    monkeypatch.setattr(cli, "_default_store", lambda: calls.append("store"))

    with pytest.raises(SystemExit) as exc:
        cli.main(["distribute", "--drivers", value])

    assert exc.value.code == 2
    assert calls == []
