"""Supabase-backed implementations of the ride, watch, notification and push stores."""

from __future__ import annotations

import logging
from typing import Any, Sequence

from supabase import Client

from ..errors import StoreError
from ..models.domain import Notification, PushEndpoint, Ride, RideKind, RouteWatch
from .records import notification_to_row, push_endpoint_from_row, ride_from_row, watch_from_row
from .stores import RideQuery

logger = logging.getLogger(__name__)

RIDES_TABLE = "rides"
WATCHES_TABLE = "route_watches"
NOTIFICATIONS_TABLE = "notifications"
PUSH_SUBSCRIPTIONS_TABLE = "push_subscriptions"
PROFILES_TABLE = "profiles"


def _row_id(row: Any) -> Any:
    return row.get("id") if isinstance(row, dict) else row


class SupabaseStore:
    """Reads rides and watches, writes notifications and manages push subscriptions.

    Every query failure is re-raised as :class:`StoreError`. Individual rows that
    cannot be parsed are skipped with a warning so one bad record never hides
    the rest of the result set.
    """

    def __init__(self, client: Client) -> None:
        self.client = client

    def query_rides(self, query: RideQuery) -> list[Ride]:
        try:
            request = self.client.table(RIDES_TABLE).select("*").eq("status", query.status.value)
            if query.kind is not None:
                request = request.eq("type", query.kind.value)
            if query.exclude_owner:
                request = request.neq("user_id", query.exclude_owner)
            if query.date_from is not None:
                request = request.gte("departure_date", query.date_from.isoformat())
            if query.date_to is not None:
                request = request.lte("departure_date", query.date_to.isoformat())
            response = request.order("departure_date", desc=False).limit(query.limit).execute()
        except Exception as exc:
            raise StoreError(f"Failed to query rides: {exc}") from exc

        rides: list[Ride] = []
        for row in response.data or []:
            try:
                rides.append(ride_from_row(row))
            except (KeyError, ValueError, TypeError, AttributeError) as exc:
                logger.warning(f"Skipping ride row {_row_id(row)!r}: {exc}")
        return rides

    def query_active_watches(self, exclude_owner: str, kind: RideKind) -> list[RouteWatch]:
        try:
            response = (
                self.client.table(WATCHES_TABLE)
                .select("*")
                .eq("is_active", True)
                .neq("user_id", exclude_owner)
                .or_(f"ride_type.eq.both,ride_type.eq.{kind.value}")
                .execute()
            )
        except Exception as exc:
            raise StoreError(f"Failed to query route watches: {exc}") from exc

        watches: list[RouteWatch] = []
        for row in response.data or []:
            try:
                watches.append(watch_from_row(row))
            except (KeyError, ValueError, TypeError, AttributeError) as exc:
                logger.warning(f"Skipping route watch row {_row_id(row)!r}: {exc}")
        return watches

    def insert_notifications(self, batch: Sequence[Notification]) -> None:
        if not batch:
            return
        try:
            self.client.table(NOTIFICATIONS_TABLE).insert([notification_to_row(n) for n in batch]).execute()
        except Exception as exc:
            raise StoreError(f"Failed to insert {len(batch)} notifications: {exc}") from exc

    def get_push_endpoints(self, user_id: str) -> list[PushEndpoint]:
        try:
            profile = (
                self.client.table(PROFILES_TABLE)
                .select("push_enabled")
                .eq("id", user_id)
                .limit(1)
                .execute()
            )
            if not profile.data or not profile.data[0].get("push_enabled"):
                return []
            response = (
                self.client.table(PUSH_SUBSCRIPTIONS_TABLE)
                .select("endpoint, p256dh, auth")
                .eq("user_id", user_id)
                .execute()
            )
        except Exception as exc:
            raise StoreError(f"Failed to load push subscriptions for user {user_id}: {exc}") from exc
        return [push_endpoint_from_row(row) for row in response.data or []]

    def delete_endpoints(self, endpoints: Sequence[str]) -> None:
        if not endpoints:
            return
        try:
            self.client.table(PUSH_SUBSCRIPTIONS_TABLE).delete().in_("endpoint", list(endpoints)).execute()
        except Exception as exc:
            raise StoreError(f"Failed to delete {len(endpoints)} push subscriptions: {exc}") from exc

    def ping(self) -> bool:
        """Cheap connectivity probe used by the health endpoint."""
        try:
            self.client.table(RIDES_TABLE).select("id").limit(1).execute()
        except Exception as exc:
            raise StoreError(f"Supabase is not reachable: {exc}") from exc
        return True
