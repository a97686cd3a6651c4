"""Matching and watch-trigger request/response schemas."""

from __future__ import annotations

from datetime import date
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class RoutePointModel(BaseModel):
    type: Literal["start", "stop", "end"]
    address: str = ""
    lat: Optional[float] = Field(default=None, ge=-90, le=90)
    lng: Optional[float] = Field(default=None, ge=-180, le=180)
    order: int = Field(..., ge=0)


class RouteMatchRequest(BaseModel):
    route: List[RoutePointModel] = Field(..., min_length=2, description="Rider's route, start and end required.")
    kind: Literal["offer", "request"] = Field(..., description="What the rider publishes; the opposite kind is searched.")
    departure_date: Optional[date] = Field(default=None, description="Search rides departing within a few days of this date.")
    threshold_km: Optional[float] = Field(default=None, gt=0, le=200)


class RideModel(BaseModel):
    id: str
    owner_id: str
    kind: Literal["offer", "request"]
    status: str
    departure_date: Optional[date] = None
    route: List[RoutePointModel]


class MatchResultModel(BaseModel):
    ride_id: str
    score: int = Field(..., ge=0, le=100)
    on_route: bool
    tier: Literal["direct", "small_detour", "detour", "none"]
    min_distance_km: Optional[float] = None
    details: List[str] = Field(default_factory=list)
    ride: Optional[RideModel] = None


class MatchListResponse(BaseModel):
    data: List[MatchResultModel]
    count: int


class TriggerWatchesRequest(BaseModel):
    ride_id: str
    route: List[RoutePointModel] = Field(..., min_length=2)
    kind: Literal["offer", "request"]
    owner_id: str
    departure_date: Optional[date] = None


class TriggerWatchesResponse(BaseModel):
    matched_count: int
    notifications_sent: int
    push_sent: int


class TriggerScheduledResponse(BaseModel):
    scheduled: bool
    ride_id: str
