"""Route watch evaluation for newly published rides."""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from ...config import settings
from ...models.domain import CorridorWatch, LocationWatch, Ride, RouteWatch, WatchMatch
from ...persistence.stores import WatchStore
from ..geospatial import haversine_km

logger = logging.getLogger(__name__)


def _place_name(address: Optional[str], fallback: str) -> str:
    if not address:
        return fallback
    return address.split(",")[0].strip() or fallback


class WatchMatcher:
    """Decides which saved watches of other users a trigger ride satisfies."""

    def __init__(self, watch_store: WatchStore, corridor_threshold_km: float | None = None) -> None:
        self.watch_store = watch_store
        self.corridor_threshold_km = (
            corridor_threshold_km if corridor_threshold_km is not None else settings.corridor_watch_threshold_km
        )

    def match_ride(self, trigger_ride: Ride) -> list[WatchMatch]:
        """Load the current snapshot of eligible watches and evaluate them."""
        watches = self.watch_store.query_active_watches(
            exclude_owner=trigger_ride.owner_id,
            kind=trigger_ride.kind,
        )
        return self.evaluate_watches(trigger_ride, watches)

    def evaluate_watches(self, trigger_ride: Ride, watches: Iterable[Optional[RouteWatch]]) -> list[WatchMatch]:
        matches: list[WatchMatch] = []
        for watch in watches:
            if watch is None:
                # Vanished between listing and evaluation.
                continue
            if not watch.active or watch.owner_id == trigger_ride.owner_id:
                continue
            if not watch.ride_kind_filter.accepts(trigger_ride.kind):
                continue

            if isinstance(watch, LocationWatch):
                explanation = self._match_location(trigger_ride, watch)
            elif isinstance(watch, CorridorWatch):
                explanation = self._match_corridor(trigger_ride, watch)
            else:
                logger.warning(f"Ignoring unsupported watch type {type(watch).__name__}")
                continue

            if explanation is not None:
                matches.append(WatchMatch(ride=trigger_ride, watch=watch, explanation=explanation))
        return matches

    def _match_location(self, ride: Ride, watch: LocationWatch) -> Optional[str]:
        for waypoint in ride.route.resolved_waypoints():
            if haversine_km(watch.center, waypoint.coord) <= watch.radius_km:
                return f"Route passes near {_place_name(watch.center_address, waypoint.place_name or 'your location')}"
        return None

    def _match_corridor(self, ride: Ride, watch: CorridorWatch) -> Optional[str]:
        start, end = ride.route.start_point(), ride.route.end_point()
        if start is None or end is None:
            return None
        # Both ends must be close; one matching end is not enough.
        if haversine_km(watch.start, start) > self.corridor_threshold_km:
            return None
        if haversine_km(watch.end, end) > self.corridor_threshold_km:
            return None
        start_name = _place_name(watch.start_address, ride.route.start().place_name or "Start")
        end_name = _place_name(watch.end_address, ride.route.end().place_name or "Destination")
        return f"{start_name} → {end_name}"
