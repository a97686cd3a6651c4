"""Ride matching endpoints."""

from __future__ import annotations

import logging
from datetime import date
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...config import settings
from ...errors import MalformedRoute, StoreError
from ...models.domain import RideKind
from ...models.route import GeoPoint
from ...schemas.matching import MatchListResponse, RouteMatchRequest
from ...services.matching import RideMatchService
from ..converters import match_result_to_model, route_from_models
from ..dependencies import get_current_user_id, get_ride_match_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/match", tags=["matching"])


@router.post("/route", response_model=MatchListResponse, status_code=status.HTTP_200_OK)
def match_route(
    payload: RouteMatchRequest,
    user_id: str = Depends(get_current_user_id),
    service: RideMatchService = Depends(get_ride_match_service),
) -> MatchListResponse:
    """Find rides of the opposite kind that fit the rider's route."""
    try:
        target_route = route_from_models(payload.route)
    except MalformedRoute as exc:
        # Insufficient geometry means "no matches", not an error.
        logger.info(f"Route match with malformed route from user {user_id}: {exc}")
        return MatchListResponse(data=[], count=0)

    try:
        results = service.find_matches_for_route(
            target_route,
            RideKind(payload.kind),
            requester_id=user_id,
            around_date=payload.departure_date,
            threshold_km=payload.threshold_km,
        )
    except StoreError as exc:
        logger.exception(f"Error matching rides: {exc}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to match rides",
        ) from exc

    data = [match_result_to_model(result) for result in results]
    return MatchListResponse(data=data, count=len(data))


@router.get("/nearby", response_model=MatchListResponse, status_code=status.HTTP_200_OK)
def match_nearby(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    radius: float = Query(default=settings.default_nearby_radius_km, gt=0, le=500, description="Radius in km"),
    kind: Optional[Literal["offer", "request"]] = Query(default=None),
    from_date: Optional[date] = Query(default=None, description="Defaults to today"),
    user_id: str = Depends(get_current_user_id),
    service: RideMatchService = Depends(get_ride_match_service),
) -> MatchListResponse:
    """Find rides passing near a location, nearest first."""
    try:
        results = service.find_matches_near_point(
            GeoPoint(lat=lat, lng=lng),
            radius_km=radius,
            requester_id=user_id,
            want_kind=RideKind(kind) if kind else None,
            from_date=from_date,
        )
    except StoreError as exc:
        logger.exception(f"Error finding nearby rides: {exc}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to find nearby rides",
        ) from exc

    data = [match_result_to_model(result) for result in results]
    return MatchListResponse(data=data, count=len(data))
