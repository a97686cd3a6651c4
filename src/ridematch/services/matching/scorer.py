"""Route similarity scoring, on-route detection and detour classification."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from typing import Optional

from ...config import settings
from ...models.domain import DetourTier, MatchResult
from ...models.route import GeoPoint, Route
from ..geospatial import haversine_km, point_to_segment_km


@dataclass(frozen=True, slots=True)
class DetourThresholds:
    direct_km: float = 2.0
    small_detour_km: float = 20.0
    detour_km: float = 25.0

    def __post_init__(self) -> None:
        if not 0 <= self.direct_km <= self.small_detour_km <= self.detour_km:
            raise ValueError(
                "Detour thresholds must satisfy 0 <= direct <= small_detour <= detour, "
                f"got {self.direct_km}/{self.small_detour_km}/{self.detour_km}."
            )

    @classmethod
    def from_settings(cls) -> "DetourThresholds":
        return cls(
            direct_km=settings.direct_threshold_km,
            small_detour_km=settings.small_detour_threshold_km,
            detour_km=settings.detour_threshold_km,
        )


@dataclass(frozen=True, slots=True)
class OnRouteCheck:
    on_route: bool
    min_distance_km: Optional[float]


def _endpoint_score(distance_km: float) -> float:
    # 0 km -> 100, 50 km and beyond -> 0
    return max(0.0, 100.0 - 2.0 * distance_km)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class MatchScorer:
    """Deterministic, side-effect free scoring shared by searches and watch triggers.

    ``precise_segments`` switches :meth:`on_route` from the historical
    endpoint-only segment test to the perpendicular point-to-segment distance.
    It is off by default because it changes which rides match.
    """

    def __init__(
        self,
        thresholds: DetourThresholds | None = None,
        *,
        precise_segments: bool = False,
    ) -> None:
        self.thresholds = thresholds or DetourThresholds.from_settings()
        self.precise_segments = precise_segments

    def route_similarity(self, target: Route, candidate: Route) -> int:
        """Score 0..100 from start-to-start and end-to-end distance. Stops are ignored."""

        target_start, target_end = target.start_point(), target.end_point()
        candidate_start, candidate_end = candidate.start_point(), candidate.end_point()
        if None in (target_start, target_end, candidate_start, candidate_end):
            return 0

        start_score = _endpoint_score(haversine_km(target_start, candidate_start))
        end_score = _endpoint_score(haversine_km(target_end, candidate_end))
        return _round_half_up((start_score + end_score) / 2)

    def _segment_distance_km(self, point: GeoPoint, a: GeoPoint, b: GeoPoint) -> float:
        if self.precise_segments:
            return point_to_segment_km(point, a, b)
        return min(haversine_km(point, a), haversine_km(point, b))

    def on_route(self, point: GeoPoint, route: Route, threshold_km: float) -> OnRouteCheck:
        """Check whether ``point`` lies within ``threshold_km`` of any segment of ``route``."""

        resolved = route.all_resolved_points()
        if len(resolved) < 2:
            return OnRouteCheck(on_route=False, min_distance_km=None)

        best = min(self._segment_distance_km(point, a, b) for a, b in zip(resolved, resolved[1:]))
        return OnRouteCheck(on_route=best <= threshold_km, min_distance_km=best)

    def classify_detour(self, min_distance_km: Optional[float], detour_km: Optional[float] = None) -> DetourTier:
        """Tier for a minimum distance.

        ``detour_km`` is the on-route threshold of the current query; it widens
        the outer cut so a ride accepted as on-route is never tiered ``none``.
        """
        if min_distance_km is None:
            return DetourTier.NONE
        if min_distance_km <= self.thresholds.direct_km:
            return DetourTier.DIRECT
        if min_distance_km <= self.thresholds.small_detour_km:
            return DetourTier.SMALL_DETOUR
        outer_km = max(self.thresholds.detour_km, detour_km or 0.0)
        if min_distance_km <= outer_km:
            return DetourTier.DETOUR
        return DetourTier.NONE


def ranking_key(result: MatchResult, reference_date: date) -> tuple:
    """Sort key: score desc, on-route first, departure nearest ``reference_date``, ride id."""

    departure = result.ride.departure_date if result.ride else None
    date_gap = abs((departure - reference_date).days) if departure else math.inf
    return (-result.score, not result.on_route, date_gap, result.ride_id)
