"""Turns watch matches into in-app notifications and push messages."""

from __future__ import annotations

import logging
from typing import Sequence

from ...errors import StoreError
from ...models.domain import DispatchSummary, Notification, Ride, RideKind, WatchMatch
from ...persistence.stores import NotificationStore, PushEndpointStore
from .push import PushGateway, PushPayload

logger = logging.getLogger(__name__)

NOTIFICATION_TYPE = "ride_match"


def notification_title(kind: RideKind) -> str:
    return "New matching ride!" if kind is RideKind.OFFER else "New ride request!"


class NotificationDispatcher:
    """Best-effort delivery: store and gateway failures are logged, never raised."""

    def __init__(
        self,
        notification_store: NotificationStore,
        push_endpoint_store: PushEndpointStore,
        push_gateway: PushGateway,
    ) -> None:
        self.notification_store = notification_store
        self.push_endpoint_store = push_endpoint_store
        self.push_gateway = push_gateway

    def build_notifications(self, ride: Ride, matches: Sequence[WatchMatch]) -> list[Notification]:
        # One notification per matched watch, even for the same user.
        return [
            Notification(
                user_id=match.watch.owner_id,
                type=NOTIFICATION_TYPE,
                title=notification_title(ride.kind),
                message=f"{match.watch.name}: {match.explanation}",
                data={
                    "ride_id": ride.id,
                    "watch_id": match.watch.id,
                    "watch_name": match.watch.name,
                },
            )
            for match in matches
        ]

    def dispatch(self, ride: Ride, matches: Sequence[WatchMatch]) -> DispatchSummary:
        summary = DispatchSummary(matched_count=len(matches))
        if not matches:
            return summary

        notifications = self.build_notifications(ride, matches)
        try:
            self.notification_store.insert_notifications(notifications)
            summary.notifications_sent = len(notifications)
        except StoreError as exc:
            logger.error(f"Error creating route watch notifications for ride {ride.id}: {exc}")

        summary.push_sent = self._send_push(ride, matches)
        return summary

    def _send_push(self, ride: Ride, matches: Sequence[WatchMatch]) -> int:
        by_user: dict[str, list[WatchMatch]] = {}
        for match in matches:
            if match.watch.push_enabled:
                by_user.setdefault(match.watch.owner_id, []).append(match)

        pushed = 0
        for user_id, user_matches in by_user.items():
            try:
                endpoints = self.push_endpoint_store.get_push_endpoints(user_id)
            except StoreError as exc:
                logger.error(f"Skipping push for user {user_id}: {exc}")
                continue
            if not endpoints:
                continue

            # One push per user, listing every matched watch.
            payload = PushPayload(
                title=notification_title(ride.kind),
                body=", ".join(match.watch.name for match in user_matches),
                tag=f"ride-match-{ride.id}",
                data={"url": f"/rides/{ride.id}", "rideId": ride.id},
            )
            result = self.push_gateway.send_push(endpoints, payload)
            pushed += result.sent

            if result.expired:
                try:
                    self.push_endpoint_store.delete_endpoints(result.expired)
                    logger.info(f"Removed {len(result.expired)} expired push subscriptions for user {user_id}")
                except StoreError as exc:
                    logger.warning(f"Could not remove expired push subscriptions: {exc}")
        return pushed
