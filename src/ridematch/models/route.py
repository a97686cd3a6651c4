"""Route geometry models: coordinates, waypoints and normalized routes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from ..errors import MalformedRoute


@dataclass(frozen=True, slots=True)
class GeoPoint:
    lat: float
    lng: float

    def __post_init__(self) -> None:
        if not -90.0 <= self.lat <= 90.0:
            raise ValueError(f"Latitude {self.lat} is outside [-90, 90].")
        if not -180.0 <= self.lng <= 180.0:
            raise ValueError(f"Longitude {self.lng} is outside [-180, 180].")


class RoutePointRole(str, Enum):
    START = "start"
    STOP = "stop"
    END = "end"


@dataclass(frozen=True, slots=True)
class RoutePoint:
    """One waypoint of a ride. ``coord`` is None while the address is not geocoded."""

    role: RoutePointRole
    address: str
    coord: Optional[GeoPoint]
    order: int

    @property
    def place_name(self) -> str:
        return self.address.split(",")[0].strip()


@dataclass(frozen=True, slots=True)
class Route:
    """Ordered waypoints with exactly one start and one end. Build via :func:`normalize`."""

    points: tuple[RoutePoint, ...]

    def _first(self, role: RoutePointRole) -> Optional[RoutePoint]:
        return next((point for point in self.points if point.role is role), None)

    def start(self) -> Optional[RoutePoint]:
        return self._first(RoutePointRole.START)

    def end(self) -> Optional[RoutePoint]:
        return self._first(RoutePointRole.END)

    def start_point(self) -> Optional[GeoPoint]:
        start = self.start()
        return start.coord if start else None

    def end_point(self) -> Optional[GeoPoint]:
        end = self.end()
        return end.coord if end else None

    def stops(self) -> list[RoutePoint]:
        return [point for point in self.points if point.role is RoutePointRole.STOP]

    def resolved_waypoints(self) -> list[RoutePoint]:
        return [point for point in self.points if point.coord is not None]

    def all_resolved_points(self) -> list[GeoPoint]:
        return [point.coord for point in self.points if point.coord is not None]

    def has_resolved_endpoints(self) -> bool:
        return self.start_point() is not None and self.end_point() is not None


def normalize(points: Iterable[RoutePoint]) -> Route:
    """Sort waypoints by ``order`` and check the start/end invariants."""

    ordered = sorted(points, key=lambda point: point.order)
    starts = sum(1 for point in ordered if point.role is RoutePointRole.START)
    ends = sum(1 for point in ordered if point.role is RoutePointRole.END)
    if starts != 1:
        raise MalformedRoute(f"Route must have exactly one start point, found {starts}.")
    if ends != 1:
        raise MalformedRoute(f"Route must have exactly one end point, found {ends}.")

    orders = [point.order for point in ordered]
    if len(set(orders)) != len(orders):
        raise MalformedRoute(f"Route point order values must be unique, got {orders}.")
    return Route(points=tuple(ordered))
