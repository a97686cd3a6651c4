"""FastAPI dependency providers wiring stores into the services."""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header, HTTPException, status

from ..db.supabase import get_supabase_client
from ..persistence.database import SupabaseStore
from ..services.matching import MatchScorer, RideMatchService
from ..services.notifications import NotificationDispatcher, RouteWatchTrigger, WebPushGateway
from ..services.routing.osrm_client import OSRMClient
from ..services.watches import WatchMatcher


def get_current_user_id(x_user_id: Optional[str] = Header(default=None, alias="X-User-Id")) -> str:
    """Caller identity, set by the authentication layer in front of this service."""
    if not x_user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return x_user_id


def get_store() -> SupabaseStore:
    client = get_supabase_client()
    if client is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Supabase not configured. Set RIDEMATCH_SUPABASE_URL and RIDEMATCH_SUPABASE_KEY.",
        )
    return SupabaseStore(client)


def get_ride_match_service(store: SupabaseStore = Depends(get_store)) -> RideMatchService:
    return RideMatchService(store, MatchScorer())


def get_route_watch_trigger(store: SupabaseStore = Depends(get_store)) -> RouteWatchTrigger:
    return RouteWatchTrigger(
        matcher=WatchMatcher(store),
        dispatcher=NotificationDispatcher(store, store, WebPushGateway()),
    )


def get_osrm_client() -> OSRMClient:
    return OSRMClient()
