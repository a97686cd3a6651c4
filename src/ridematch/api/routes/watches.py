"""Route watch trigger endpoint."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from ...errors import MalformedRoute
from ...models.domain import Ride, RideKind
from ...schemas.matching import TriggerScheduledResponse, TriggerWatchesRequest, TriggerWatchesResponse
from ...services.notifications import RouteWatchTrigger
from ..converters import route_from_models
from ..dependencies import get_current_user_id, get_route_watch_trigger

logger = logging.getLogger(__name__)

router = APIRouter(tags=["watches"])


@router.post(
    "/trigger-watches",
    response_model=TriggerWatchesResponse | TriggerScheduledResponse,
    status_code=status.HTTP_200_OK,
)
def trigger_watches(
    payload: TriggerWatchesRequest,
    response: Response,
    background: bool = Query(default=False, description="Schedule the run and return immediately."),
    user_id: str = Depends(get_current_user_id),
    trigger: RouteWatchTrigger = Depends(get_route_watch_trigger),
) -> TriggerWatchesResponse | TriggerScheduledResponse:
    """Notify owners of matching watches about a newly created ride.

    Not idempotent: calling twice for the same ride sends the notifications twice.
    """
    if payload.owner_id != user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Can only trigger watches for your own ride")
    try:
        route = route_from_models(payload.route)
    except MalformedRoute as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    ride = Ride(
        id=payload.ride_id,
        owner_id=payload.owner_id,
        kind=RideKind(payload.kind),
        route=route,
        departure_date=payload.departure_date,
    )

    if background:
        trigger.schedule(ride)
        logger.info(f"Scheduled route watch trigger for ride {ride.id}")
        response.status_code = status.HTTP_202_ACCEPTED
        return TriggerScheduledResponse(scheduled=True, ride_id=ride.id)

    summary = trigger.run(ride)
    return TriggerWatchesResponse(
        matched_count=summary.matched_count,
        notifications_sent=summary.notifications_sent,
        push_sent=summary.push_sent,
    )
