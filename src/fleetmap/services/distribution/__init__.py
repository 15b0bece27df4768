"""Driver-to-restaurant distribution strategies."""

from .base import Distributor, target_remaining
from .dispatcher import get_distributor
from .greedy import GreedyDistributor
from .sorted_cost import SortedCostDistributor, build_cost_matrix

__all__ = [
    "Distributor",
    "GreedyDistributor",
    "SortedCostDistributor",
    "build_cost_matrix",
    "get_distributor",
    "target_remaining",
]
