"""Routing domain models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional


@dataclass(slots=True)
class RouteStep:
    distance_m: float
    duration_s: float
    name: str
    maneuver_type: str
    modifier: Optional[str]
    instruction: str


@dataclass(slots=True)
class RouteWaypoint:
    name: str
    location: tuple[float, float]  # (lng, lat) as returned by OSRM


@dataclass(slots=True)
class RouteResult:
    distance_m: float
    duration_s: float
    geometry: List[tuple[float, float]]  # (lat, lng)
    steps: List[RouteStep]
    waypoints: List[RouteWaypoint]
