"""Geospatial helper functions.

Callers must drop unresolved coordinates before calling in here: every
argument is a fully resolved :class:`GeoPoint`.
"""

from __future__ import annotations

import math
from typing import Optional, Sequence

from ..models.route import GeoPoint

EARTH_RADIUS_KM = 6371.0
# Segments shorter than this (about one metre) are treated as a single point.
MIN_SEGMENT_KM = 0.001


def haversine_km(a: GeoPoint, b: GeoPoint) -> float:
    """Compute distance between two coordinates using the Haversine formula."""

    phi1, phi2 = math.radians(a.lat), math.radians(b.lat)
    d_phi = math.radians(b.lat - a.lat)
    d_lambda = math.radians(b.lng - a.lng)

    h = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return EARTH_RADIUS_KM * c


def initial_bearing_rad(a: GeoPoint, b: GeoPoint) -> float:
    """Initial bearing from ``a`` to ``b`` in radians."""

    phi1 = math.radians(a.lat)
    phi2 = math.radians(b.lat)
    delta_lambda = math.radians(b.lng - a.lng)
    y = math.sin(delta_lambda) * math.cos(phi2)
    x = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(delta_lambda)
    return math.atan2(y, x)


def point_to_segment_km(p: GeoPoint, a: GeoPoint, b: GeoPoint) -> float:
    """Minimum distance from ``p`` to the great-circle segment ``a``-``b``.

    Uses the cross-track distance when the perpendicular foot lies on the
    segment, otherwise the distance to the nearer endpoint.
    """

    dist_a = haversine_km(p, a)
    segment_length = haversine_km(a, b)
    if segment_length < MIN_SEGMENT_KM:
        return dist_a
    dist_b = haversine_km(p, b)

    angular_a = dist_a / EARTH_RADIUS_KM
    delta_bearing = initial_bearing_rad(a, p) - initial_bearing_rad(a, b)
    cross_track = math.asin(max(-1.0, min(1.0, math.sin(angular_a) * math.sin(delta_bearing))))

    # Foot behind the segment start.
    if math.cos(delta_bearing) < 0:
        return min(dist_a, dist_b)

    ratio = math.cos(angular_a) / max(math.cos(cross_track), 1e-12)
    along_track = math.acos(max(-1.0, min(1.0, ratio))) * EARTH_RADIUS_KM
    if along_track > segment_length:
        return min(dist_a, dist_b)
    return abs(cross_track) * EARTH_RADIUS_KM


def min_distance_km(p: GeoPoint, points: Sequence[GeoPoint]) -> Optional[float]:
    """Smallest direct distance from ``p`` to any of ``points`` (None when empty)."""

    if not points:
        return None
    return min(haversine_km(p, point) for point in points)
