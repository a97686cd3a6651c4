"""Store contracts consumed by the matching and notification services."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional, Protocol, Sequence

from ..models.domain import Notification, PushEndpoint, Ride, RideKind, RideStatus, RouteWatch


@dataclass(frozen=True, slots=True)
class RideQuery:
    """Pre-filter for candidate rides. ``limit`` bounds cost, it is not the page size."""

    status: RideStatus = RideStatus.ACTIVE
    kind: Optional[RideKind] = None
    exclude_owner: Optional[str] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    limit: int = 100


class RideStore(Protocol):
    def query_rides(self, query: RideQuery) -> list[Ride]:
        ...


class WatchStore(Protocol):
    def query_active_watches(self, exclude_owner: str, kind: RideKind) -> list[RouteWatch]:
        ...


class NotificationStore(Protocol):
    def insert_notifications(self, batch: Sequence[Notification]) -> None:
        ...


class PushEndpointStore(Protocol):
    def get_push_endpoints(self, user_id: str) -> list[PushEndpoint]:
        """Active endpoints for a user; empty when the user has push switched off."""
        ...

    def delete_endpoints(self, endpoints: Sequence[str]) -> None:
        ...
