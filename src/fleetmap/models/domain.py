"""Domain models for road segments, drivers and restaurants."""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True, slots=True)
class RoadSegment:
    """Straight piece of road between two consecutive polyline points."""

    lat1: float
    lng1: float
    lat2: float
    lng2: float

    def as_row(self) -> tuple[float, float, float, float]:
        return (self.lat1, self.lng1, self.lat2, self.lng2)


@dataclass(slots=True)
class Restaurant:
    """Represents a pickup location with its pending orders."""

    id: int
    title: str
    latitude: float
    longitude: float
    orders_count: int


@dataclass(slots=True)
class Driver:
    """Represents a courier with its carrying capacity and current assignment."""

    id: int
    name: str
    latitude: Optional[float]
    longitude: Optional[float]
    capacity: int
    restaurant_id: Optional[int] = None

    @property
    def has_position(self) -> bool:
        return self.latitude is not None and self.longitude is not None


@dataclass(slots=True)
class AssignmentResult:
    """Outcome of one distributor run, before it is committed."""

    strategy: str
    assignments: dict[int, int] = field(default_factory=dict)
    unassigned: list[int] = field(default_factory=list)
