"""Conversions between API schemas and domain objects."""

from __future__ import annotations

from typing import Sequence

from ..models.domain import MatchResult, Ride
from ..models.route import GeoPoint, Route, RoutePoint, RoutePointRole, normalize
from ..schemas.matching import MatchResultModel, RideModel, RoutePointModel


def route_from_models(points: Sequence[RoutePointModel]) -> Route:
    """Raises MalformedRoute when start/end are missing or duplicated."""
    return normalize(
        RoutePoint(
            role=RoutePointRole(point.type),
            address=point.address,
            coord=GeoPoint(lat=point.lat, lng=point.lng) if point.lat is not None and point.lng is not None else None,
            order=point.order,
        )
        for point in points
    )


def route_to_models(route: Route) -> list[RoutePointModel]:
    return [
        RoutePointModel(
            type=point.role.value,
            address=point.address,
            lat=point.coord.lat if point.coord else None,
            lng=point.coord.lng if point.coord else None,
            order=point.order,
        )
        for point in route.points
    ]


def ride_to_model(ride: Ride) -> RideModel:
    return RideModel(
        id=ride.id,
        owner_id=ride.owner_id,
        kind=ride.kind.value,
        status=ride.status.value,
        departure_date=ride.departure_date,
        route=route_to_models(ride.route),
    )


def match_result_to_model(result: MatchResult) -> MatchResultModel:
    return MatchResultModel(
        ride_id=result.ride_id,
        score=result.score,
        on_route=result.on_route,
        tier=result.tier.value,
        min_distance_km=round(result.min_distance_km, 1) if result.min_distance_km is not None else None,
        details=result.details,
        ride=ride_to_model(result.ride) if result.ride else None,
    )
