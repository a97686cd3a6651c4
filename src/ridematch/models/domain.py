"""Domain models for rides, route watches and match results."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional, Union

from .route import GeoPoint, Route


class RideKind(str, Enum):
    OFFER = "offer"
    REQUEST = "request"

    def opposite(self) -> "RideKind":
        return RideKind.REQUEST if self is RideKind.OFFER else RideKind.OFFER


class RideKindFilter(str, Enum):
    OFFER = "offer"
    REQUEST = "request"
    BOTH = "both"

    def accepts(self, kind: RideKind) -> bool:
        return self is RideKindFilter.BOTH or self.value == kind.value


class RideStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class DetourTier(str, Enum):
    DIRECT = "direct"
    SMALL_DETOUR = "small_detour"
    DETOUR = "detour"
    NONE = "none"


@dataclass(slots=True)
class Ride:
    """A published ride offer or request. Read-only to the matching core."""

    id: str
    owner_id: str
    kind: RideKind
    route: Route
    departure_date: Optional[date] = None
    status: RideStatus = RideStatus.ACTIVE


@dataclass(slots=True)
class LocationWatch:
    """Saved search firing when a ride passes within ``radius_km`` of ``center``."""

    id: str
    owner_id: str
    name: str
    center: GeoPoint
    radius_km: float
    center_address: Optional[str] = None
    ride_kind_filter: RideKindFilter = RideKindFilter.BOTH
    active: bool = True
    push_enabled: bool = False


@dataclass(slots=True)
class CorridorWatch:
    """Saved search firing when a ride starts near ``start`` and ends near ``end``."""

    id: str
    owner_id: str
    name: str
    start: GeoPoint
    end: GeoPoint
    start_address: Optional[str] = None
    end_address: Optional[str] = None
    ride_kind_filter: RideKindFilter = RideKindFilter.BOTH
    active: bool = True
    push_enabled: bool = False


RouteWatch = Union[LocationWatch, CorridorWatch]


@dataclass(slots=True)
class MatchResult:
    ride_id: str
    score: int
    on_route: bool
    tier: DetourTier
    min_distance_km: Optional[float]
    ride: Optional[Ride] = None
    details: list[str] = field(default_factory=list)


@dataclass(slots=True)
class WatchMatch:
    ride: Ride
    watch: RouteWatch
    explanation: str


@dataclass(slots=True)
class PushEndpoint:
    """A browser push subscription belonging to one user."""

    endpoint: str
    p256dh: str
    auth: str


@dataclass(slots=True)
class Notification:
    user_id: str
    type: str
    title: str
    message: str
    data: dict


@dataclass(slots=True)
class DispatchSummary:
    matched_count: int = 0
    notifications_sent: int = 0
    push_sent: int = 0
