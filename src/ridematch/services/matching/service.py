"""Ride matching orchestration for route searches and nearby lookups."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, timedelta
from typing import Optional

from ...config import settings
from ...models.domain import MatchResult, Ride, RideKind
from ...models.route import GeoPoint, Route
from ...persistence.stores import RideQuery, RideStore
from ..geospatial import min_distance_km
from .scorer import MatchScorer, ranking_key

logger = logging.getLogger(__name__)

MAX_DETAILS = 3


class RideMatchService:
    """Finds live rides that fit a rider's route or pass near a point."""

    def __init__(self, ride_store: RideStore, scorer: MatchScorer | None = None) -> None:
        self.ride_store = ride_store
        self.scorer = scorer or MatchScorer()

    def find_matches_for_route(
        self,
        target_route: Route,
        want_kind: RideKind,
        requester_id: str,
        around_date: Optional[date] = None,
        threshold_km: Optional[float] = None,
    ) -> list[MatchResult]:
        """Rank rides of the opposite kind against ``target_route``.

        A target route whose start or end is not geocoded yields no matches.
        """
        if not target_route.has_resolved_endpoints():
            logger.info("Route search skipped: target route has unresolved start or end")
            return []

        threshold = threshold_km if threshold_km is not None else settings.route_match_threshold_km
        query = RideQuery(
            kind=want_kind.opposite(),
            exclude_owner=requester_id,
            limit=settings.route_match_fetch_limit,
        )
        if around_date is not None:
            window = timedelta(days=settings.date_window_days)
            query = replace(query, date_from=around_date - window, date_to=around_date + window)

        candidates = self.ride_store.query_rides(query)
        results = [self._score_against_route(target_route, ride, threshold) for ride in candidates]
        kept = [
            result
            for result in results
            if result.score >= settings.min_similarity_score or result.on_route
        ]
        reference = around_date or date.today()
        kept.sort(key=lambda result: ranking_key(result, reference))
        logger.debug(f"Route search: {len(candidates)} candidates, {len(kept)} kept")
        return kept[: settings.route_match_page_size]

    def _score_against_route(self, target_route: Route, ride: Ride, threshold_km: float) -> MatchResult:
        score = self.scorer.route_similarity(target_route, ride.route)
        details: list[str] = []
        distances: list[float] = []
        on_route = False

        # Only the candidate's endpoints are checked against the rider's route.
        for label, waypoint in (("Start", ride.route.start()), ("Destination", ride.route.end())):
            if waypoint is None or waypoint.coord is None:
                continue
            check = self.scorer.on_route(waypoint.coord, target_route, threshold_km)
            if check.min_distance_km is not None:
                distances.append(check.min_distance_km)
            if check.on_route:
                on_route = True
                details.append(f"{label} lies on your route ({round(check.min_distance_km)} km)")

        min_distance = min(distances) if distances else None
        if score >= settings.min_similarity_score:
            details.append(f"Similar route ({score}% match)")
        return MatchResult(
            ride_id=ride.id,
            score=score,
            on_route=on_route,
            tier=self.scorer.classify_detour(min_distance, detour_km=threshold_km),
            min_distance_km=min_distance,
            ride=ride,
            details=details[:MAX_DETAILS],
        )

    def find_matches_near_point(
        self,
        point: GeoPoint,
        radius_km: float,
        requester_id: str,
        want_kind: Optional[RideKind] = None,
        from_date: Optional[date] = None,
    ) -> list[MatchResult]:
        """Rides with any resolved waypoint within ``radius_km`` of ``point``, nearest first.

        Every returned result has ``on_route=True`` and ``score=0``: no route
        similarity is computed here, so order by ``min_distance_km`` and read
        ``score`` as "not scored", not as a poor match.
        """
        query = RideQuery(
            kind=want_kind,
            exclude_owner=requester_id,
            date_from=from_date or date.today(),
            limit=settings.nearby_fetch_limit,
        )
        candidates = self.ride_store.query_rides(query)

        results: list[MatchResult] = []
        for ride in candidates:
            # Direct waypoint distances, not segments.
            distance = min_distance_km(point, ride.route.all_resolved_points())
            if distance is None or distance > radius_km:
                continue
            results.append(
                MatchResult(
                    ride_id=ride.id,
                    score=0,
                    on_route=True,
                    tier=self.scorer.classify_detour(distance, detour_km=radius_km),
                    min_distance_km=distance,
                    ride=ride,
                    details=[f"Passes {round(distance)} km from your location"],
                )
            )

        results.sort(key=lambda result: (result.min_distance_km, result.ride_id))
        return results[: settings.nearby_page_size]
