"""Driving route request/response schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class LatLngModel(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class RouteCalculationRequest(BaseModel):
    points: List[LatLngModel] = Field(..., min_length=2, description="Waypoints in driving order.")


class RouteStepModel(BaseModel):
    distance_m: float
    duration_s: float
    name: str
    maneuver_type: str
    modifier: Optional[str] = None
    instruction: str


class RouteCalculationResponse(BaseModel):
    distance_m: float
    duration_s: float
    distance_text: str
    duration_text: str
    geometry: List[tuple[float, float]]
    steps: List[RouteStepModel]
