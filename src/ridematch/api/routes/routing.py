"""Driving route endpoint backed by the routing provider."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from ...errors import (
    InvalidCoordinates,
    NoRouteFound,
    RoutingError,
    RoutingRateLimited,
    RoutingTimeout,
)
from ...models.route import GeoPoint
from ...schemas.routing import RouteCalculationRequest, RouteCalculationResponse, RouteStepModel
from ...services.routing.osrm_client import OSRMClient, format_distance, format_duration
from ..dependencies import get_current_user_id, get_osrm_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/routing", tags=["routing"])


def _status_for(error: RoutingError) -> int:
    if isinstance(error, InvalidCoordinates):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(error, NoRouteFound):
        return status.HTTP_404_NOT_FOUND
    if isinstance(error, RoutingRateLimited):
        return status.HTTP_429_TOO_MANY_REQUESTS
    if isinstance(error, RoutingTimeout):
        return status.HTTP_504_GATEWAY_TIMEOUT
    return status.HTTP_503_SERVICE_UNAVAILABLE


@router.post("/route", response_model=RouteCalculationResponse, status_code=status.HTTP_200_OK)
def calculate_route(
    payload: RouteCalculationRequest,
    user_id: str = Depends(get_current_user_id),
    client: OSRMClient = Depends(get_osrm_client),
) -> RouteCalculationResponse:
    """Driving route for display. Errors carry a code telling "retry later" from "no route"."""
    try:
        result = client.route([GeoPoint(lat=point.lat, lng=point.lng) for point in payload.points])
    except RoutingError as exc:
        logger.warning(f"Routing failed for user {user_id}: {exc.code} {exc.message}")
        raise HTTPException(
            status_code=_status_for(exc),
            detail={"code": exc.code, "message": exc.message, "retryable": exc.retryable},
        ) from exc

    return RouteCalculationResponse(
        distance_m=result.distance_m,
        duration_s=result.duration_s,
        distance_text=format_distance(result.distance_m),
        duration_text=format_duration(result.duration_s),
        geometry=result.geometry,
        steps=[
            RouteStepModel(
                distance_m=step.distance_m,
                duration_s=step.duration_s,
                name=step.name,
                maneuver_type=step.maneuver_type,
                modifier=step.modifier,
                instruction=step.instruction,
            )
            for step in result.steps
        ],
    )
