"""Factory for distribution strategies based on user selection."""

from __future__ import annotations

from ...config import settings
from .base import Distributor
from .greedy import GreedyDistributor
from .sorted_cost import SortedCostDistributor


def get_distributor(name: str | None = None) -> Distributor:
    match name or settings.distributor:
        case "greedy":
            return GreedyDistributor()
        case "sorted_cost":
            return SortedCostDistributor()
        case other:
            raise ValueError(f"Unknown distributor '{other}'.")
