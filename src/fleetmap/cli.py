"""Command line entry points: rebuild the road cache, run a distribution."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Sequence

from .cache.base import CacheUnavailableError
from .config import settings
from .db.supabase import get_supabase_client
from .persistence.fleet import FleetStore, InMemoryFleetStore, SupabaseFleetStore
from .services.distribution import get_distributor
from .services.fleet.seeding import load_restaurants
from .services.fleet.service import run_distribution
from .services.location.dispatcher import default_tile_cache, get_sampler
from .services.roads.decoder import DatasetFormatError
from .services.roads.indexer import preload_roads

logger = logging.getLogger(__name__)


def _non_negative_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a whole number, got '{value}'") from None
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {number}")
    return number


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="fleetmap", description=settings.app_name)
    commands = parser.add_subparsers(dest="command", required=True)

    preload = commands.add_parser("preload", help="Load road polylines into the tile cache.")
    preload.add_argument("--dataset", type=Path, default=None, help="Road polyline JSON file.")

    distribute = commands.add_parser("distribute", help="Place a fresh fleet and assign it to restaurants.")
    distribute.add_argument("--strategy", choices=("greedy", "sorted_cost"), default=None)
    distribute.add_argument("--sampler", choices=("roads", "random", "osrm"), default=None)
    distribute.add_argument("--drivers", type=_non_negative_int, default=None, help="Number of drivers to spawn.")
    distribute.add_argument(
        "--refresh-orders",
        action="store_true",
        help="Draw new order counts for every restaurant before distributing.",
    )
    return parser


def _default_store() -> FleetStore:
    if get_supabase_client() is not None:
        return SupabaseFleetStore()
    return InMemoryFleetStore(restaurants=load_restaurants())


def _preload(args: argparse.Namespace) -> int:
    dataset = args.dataset or settings.roads_dataset
    try:
        summary = preload_roads(dataset, default_tile_cache())
    except (DatasetFormatError, CacheUnavailableError, OSError) as e:
        logger.error(f"Road preload failed: {e}")
        return 1
    print(f"Preload completed: {summary.segments} segments in {summary.tiles} tiles")
    return 0


def _distribute(args: argparse.Namespace, store: FleetStore | None = None) -> int:
    store = store or _default_store()
    run = run_distribution(
        store,
        get_distributor(args.strategy),
        sampler=get_sampler(args.sampler),
        driver_count=args.drivers if args.drivers is not None else settings.driver_count,
        redraw_orders=args.refresh_orders,
    )
    print(json.dumps(run.report.model_dump(), ensure_ascii=False, indent=2))
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    args = _build_parser().parse_args(argv)
    match args.command:
        case "preload":
            return _preload(args)
        case "distribute":
            return _distribute(args)
    return 2


if __name__ == "__main__":
    sys.exit(main())
