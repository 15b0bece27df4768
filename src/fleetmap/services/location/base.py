"""Base class for driver placement strategies."""

from __future__ import annotations

from abc import ABC, abstractmethod

DEFAULT_RADIUS_KM = 5.0


class PositionSampler(ABC):
    """Contract for strategies that pick a random driver position near a point."""

    @abstractmethod
    def sample(self, lat: float, lng: float, radius_km: float = DEFAULT_RADIUS_KM) -> tuple[float, float] | None:
        """Return a ``(lat, lng)`` near the given point, or None when nothing suitable exists."""
        raise NotImplementedError
