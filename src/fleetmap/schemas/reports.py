"""Post-distribution report schemas."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field


class Position(BaseModel):
    lat: float
    lng: float


class RestaurantReport(BaseModel):
    restaurant_id: int
    title: str
    orders_before: int
    orders_after: int = Field(..., ge=0)


class DriverReport(BaseModel):
    id: int
    name: str
    position: Position
    assigned_restaurant: str = "none"
    assigned_distance_km: float = 0.0
    nearest_restaurant: str = "none"
    nearest_distance_km: float = 0.0


class FleetReport(BaseModel):
    restaurants: List[RestaurantReport] = Field(default_factory=list)
    drivers: List[DriverReport] = Field(default_factory=list)
    average_distance_km: float = 0.0
