from datetime import date
from typing import Optional, Sequence

import pytest

from ridematch.errors import StoreError
from ridematch.models.domain import Notification, PushEndpoint, Ride, RideKind, RouteWatch
from ridematch.models.route import GeoPoint, Route, RoutePoint, RoutePointRole, normalize
from ridematch.persistence.stores import RideQuery
from ridematch.services.notifications.push import PushPayload, PushResult

BERLIN = (52.52, 13.405)
LEIPZIG = (51.3397, 12.3731)
MUNICH = (48.137, 11.575)
HAMBURG = (53.551, 9.993)
COLOGNE = (50.9375, 6.9603)

CITY_NAMES = {
    BERLIN: "Berlin, Germany",
    LEIPZIG: "Leipzig, Germany",
    MUNICH: "München, Germany",
    HAMBURG: "Hamburg, Germany",
    COLOGNE: "Köln, Germany",
}


def make_route(*coords: Optional[tuple[float, float]]) -> Route:
    """Start, optional stops and end in the given order. ``None`` is an un-geocoded point."""
    points = []
    for index, coord in enumerate(coords):
        if index == 0:
            role = RoutePointRole.START
        elif index == len(coords) - 1:
            role = RoutePointRole.END
        else:
            role = RoutePointRole.STOP
        points.append(
            RoutePoint(
                role=role,
                address=CITY_NAMES.get(coord, f"Waypoint {index}"),
                coord=GeoPoint(*coord) if coord is not None else None,
                order=index,
            )
        )
    return normalize(points)


def make_ride(
    ride_id: str,
    *coords: Optional[tuple[float, float]],
    owner_id: str = "driver",
    kind: RideKind = RideKind.OFFER,
    departure_date: Optional[date] = None,
) -> Ride:
    return Ride(
        id=ride_id,
        owner_id=owner_id,
        kind=kind,
        route=make_route(*coords),
        departure_date=departure_date,
    )


class FakeRideStore:
    def __init__(self, rides: Sequence[Ride] = (), error: Exception | None = None):
        self.rides = list(rides)
        self.error = error
        self.queries: list[RideQuery] = []

    def query_rides(self, query: RideQuery) -> list[Ride]:
        self.queries.append(query)
        if self.error:
            raise self.error
        selected = []
        for ride in self.rides:
            if ride.status is not query.status:
                continue
            if query.kind is not None and ride.kind is not query.kind:
                continue
            if query.exclude_owner and ride.owner_id == query.exclude_owner:
                continue
            if query.date_from and ride.departure_date and ride.departure_date < query.date_from:
                continue
            if query.date_to and ride.departure_date and ride.departure_date > query.date_to:
                continue
            selected.append(ride)
        return selected[: query.limit]


class FakeWatchStore:
    def __init__(self, watches: Sequence[RouteWatch] = (), error: Exception | None = None):
        self.watches = list(watches)
        self.error = error
        self.calls: list[tuple[str, RideKind]] = []

    def query_active_watches(self, exclude_owner: str, kind: RideKind) -> list[RouteWatch]:
        self.calls.append((exclude_owner, kind))
        if self.error:
            raise self.error
        return [
            watch
            for watch in self.watches
            if watch.active and watch.owner_id != exclude_owner and watch.ride_kind_filter.accepts(kind)
        ]


class FakeNotificationStore:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.batches: list[list[Notification]] = []

    def insert_notifications(self, batch: Sequence[Notification]) -> None:
        if self.fail:
            raise StoreError("insert failed")
        self.batches.append(list(batch))


class FakePushEndpointStore:
    def __init__(self, endpoints: dict[str, list[PushEndpoint]] | None = None):
        self.endpoints = endpoints or {}
        self.deleted: list[str] = []

    def get_push_endpoints(self, user_id: str) -> list[PushEndpoint]:
        return list(self.endpoints.get(user_id, []))

    def delete_endpoints(self, endpoints: Sequence[str]) -> None:
        self.deleted.extend(endpoints)


class FakePushGateway:
    def __init__(self, expired: Sequence[str] = ()):
        self.expired = set(expired)
        self.calls: list[tuple[list[PushEndpoint], PushPayload]] = []

    def send_push(self, endpoints: Sequence[PushEndpoint], payload: PushPayload) -> PushResult:
        self.calls.append((list(endpoints), payload))
        result = PushResult()
        for endpoint in endpoints:
            if endpoint.endpoint in self.expired:
                result.failed += 1
                result.expired.append(endpoint.endpoint)
            else:
                result.sent += 1
        return result


@pytest.fixture
def notification_store() -> FakeNotificationStore:
    return FakeNotificationStore()


@pytest.fixture
def push_store() -> FakePushEndpointStore:
    return FakePushEndpointStore()


@pytest.fixture
def push_gateway() -> FakePushGateway:
    return FakePushGateway()
