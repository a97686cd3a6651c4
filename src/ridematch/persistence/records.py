"""Mapping between Supabase rows and domain objects."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Iterable, Optional

from ..models.domain import (
    CorridorWatch,
    LocationWatch,
    Notification,
    PushEndpoint,
    Ride,
    RideKind,
    RideKindFilter,
    RideStatus,
    RouteWatch,
)
from ..models.route import GeoPoint, Route, RoutePoint, RoutePointRole, normalize


def _coerce_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Unable to parse float from value '{value}'") from exc


def coerce_point(lat: Any, lng: Any) -> Optional[GeoPoint]:
    """Build a GeoPoint, or None when the address was never geocoded.

    Older rows store ``0`` for unresolved coordinates, so an exact (0, 0) pair
    is read as missing as well.
    """

    lat_value, lng_value = _coerce_float(lat), _coerce_float(lng)
    if lat_value is None or lng_value is None:
        return None
    if lat_value == 0 and lng_value == 0:
        return None
    return GeoPoint(lat=lat_value, lng=lng_value)


def _coerce_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _route_point_from_row(point: Any, index: int) -> RoutePoint:
    if not isinstance(point, dict):
        raise ValueError(f"Route point {index} is not an object: {point!r}")
    order = point.get("order")
    return RoutePoint(
        role=RoutePointRole(str(point.get("type", "")).lower()),
        address=(point.get("address") or "").strip(),
        coord=coerce_point(point.get("lat"), point.get("lng")),
        # Points saved without an order keep their position in the list.
        order=index if order is None or order == "" else int(order),
    )


def route_from_rows(points: Iterable[dict]) -> Route:
    """Parse the JSON route column (``[{type, address, lat, lng, order}, ...]``)."""

    return normalize(_route_point_from_row(point, index) for index, point in enumerate(points))


def ride_from_row(row: dict) -> Ride:
    return Ride(
        id=str(row["id"]),
        owner_id=str(row["user_id"]),
        kind=RideKind(row["type"]),
        route=route_from_rows(row.get("route") or []),
        departure_date=_coerce_date(row.get("departure_date")),
        status=RideStatus(row.get("status") or RideStatus.ACTIVE.value),
    )


def watch_from_row(row: dict) -> RouteWatch:
    """Parse a ``route_watches`` row. Raises ValueError for rows lacking their geometry."""

    common = {
        "id": str(row["id"]),
        "owner_id": str(row["user_id"]),
        "name": row.get("name") or "",
        "ride_kind_filter": RideKindFilter(row.get("ride_type") or RideKindFilter.BOTH.value),
        "active": bool(row.get("is_active", True)),
        "push_enabled": bool(row.get("push_enabled", False)),
    }
    watch_type = row.get("type")
    if watch_type == "location":
        center = coerce_point(row.get("location_lat"), row.get("location_lng"))
        if center is None:
            raise ValueError(f"Location watch {common['id']} has no center coordinate.")
        return LocationWatch(
            center=center,
            radius_km=_coerce_float(row.get("radius_km")) or 0.0,
            center_address=row.get("location_address"),
            **common,
        )
    if watch_type == "route":
        start = coerce_point(row.get("start_lat"), row.get("start_lng"))
        end = coerce_point(row.get("end_lat"), row.get("end_lng"))
        if start is None or end is None:
            raise ValueError(f"Corridor watch {common['id']} is missing its start or end coordinate.")
        return CorridorWatch(
            start=start,
            end=end,
            start_address=row.get("start_address"),
            end_address=row.get("end_address"),
            **common,
        )
    raise ValueError(f"Unknown watch type '{watch_type}' for watch {common['id']}.")


def push_endpoint_from_row(row: dict) -> PushEndpoint:
    return PushEndpoint(endpoint=row["endpoint"], p256dh=row["p256dh"], auth=row["auth"])


def notification_to_row(notification: Notification) -> dict:
    return {
        "user_id": notification.user_id,
        "type": notification.type,
        "title": notification.title,
        "message": notification.message,
        "data": notification.data,
    }
