"""HTTP client for interacting with OSRM services.

Driving routes are only used for display; matching never depends on them.
"""

from __future__ import annotations

import logging
import time
from typing import Sequence

import httpx

from ...config import settings
from ...errors import (
    InvalidCoordinates,
    NoRouteFound,
    RoutingError,
    RoutingRateLimited,
    RoutingServiceOverloaded,
    RoutingServiceUnavailable,
    RoutingTimeout,
)
from ...models.route import GeoPoint
from .models import RouteResult, RouteStep, RouteWaypoint

logger = logging.getLogger(__name__)

OVERLOADED_STATUS_CODES = {502, 503, 504}


class OSRMClient:
    def __init__(
        self,
        base_url: str | None = None,
        profile: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.osrm_base_url).rstrip("/")
        if not self.base_url:
            raise ValueError("OSRM base URL is not configured.")
        self.profile = profile or settings.osrm_profile
        self.timeout = timeout if timeout is not None else settings.osrm_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.osrm_max_retries
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.osrm_backoff_seconds
        self.transport = transport

    def _get_client(self) -> httpx.Client:
        return httpx.Client(
            timeout=httpx.Timeout(self.timeout, connect=min(self.timeout, 10.0)),
            headers={"Accept": "application/json"},
            transport=self.transport,
        )

    def _raise_for_status(self, response: httpx.Response) -> None:
        status_code = response.status_code
        if status_code < 400:
            return
        logger.error(f"OSRM API error: {status_code} {response.reason_phrase}")
        if status_code == 429:
            raise RoutingRateLimited("Routing server is rate limiting requests. Try again in a few minutes.")
        if status_code in OVERLOADED_STATUS_CODES:
            raise RoutingServiceOverloaded("Routing server is overloaded. Try again later.")
        if status_code >= 500:
            raise RoutingServiceUnavailable("Routing server is currently unavailable. Try again later.")
        raise RoutingServiceUnavailable(f"Routing error (HTTP {status_code})")

    def _request_route(self, url: str, params: dict) -> dict:
        client = self._get_client()
        try:
            attempt = 0
            while True:
                try:
                    response = client.get(url, params=params)
                    self._raise_for_status(response)
                    return response.json()
                except httpx.TimeoutException as e:
                    # Bounded: a timeout is reported, never retried.
                    logger.warning(f"OSRM route request timed out after {self.timeout:.0f}s: {e}")
                    raise RoutingTimeout(
                        "Routing server did not answer in time. It may be overloaded."
                    ) from e
                except (RoutingServiceOverloaded, httpx.TransportError) as e:
                    attempt += 1
                    if attempt > self.max_retries:
                        if isinstance(e, RoutingError):
                            raise
                        raise RoutingServiceUnavailable(
                            f"Failed to connect to routing server at {self.base_url}: {e}"
                        ) from e
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(f"OSRM unavailable, retrying in {wait_time:.1f}s (attempt {attempt}/{self.max_retries}): {e}")
                    time.sleep(wait_time)
                except ValueError as e:
                    raise RoutingServiceUnavailable(f"Routing server returned invalid JSON: {e}") from e
        finally:
            client.close()

    def route(self, points: Sequence[GeoPoint]) -> RouteResult:
        """Get the driving route through ``points`` in order.

        Raises:
            InvalidCoordinates: fewer than two points.
            NoRouteFound: the provider answered but found no path.
            RoutingTimeout, RoutingRateLimited, RoutingServiceOverloaded,
            RoutingServiceUnavailable: the provider could not answer.
        """
        if len(points) < 2:
            raise InvalidCoordinates("At least two points are required to calculate a route.")

        # OSRM route endpoint expects coordinates as "lon,lat;lon,lat;..."
        coordinate_str = ";".join(f"{point.lng},{point.lat}" for point in points)
        params = {
            "overview": "full",
            "geometries": "polyline",
            "steps": "true",
            "annotations": "false",
        }
        url = f"{self.base_url}/route/v1/{self.profile}/{coordinate_str}"
        data = self._request_route(url, params)

        routes = data.get("routes") or []
        if data.get("code") != "Ok" or not routes:
            message = data.get("message") or data.get("code") or "Route calculation failed"
            logger.error(f"OSRM routing failed: {message}")
            if data.get("code") == "NoRoute":
                raise NoRouteFound("No route found between these points.")
            raise NoRouteFound(message)

        return _parse_route(routes[0], data.get("waypoints") or [])


def _parse_route(route: dict, waypoints: list[dict]) -> RouteResult:
    geometry_raw = route.get("geometry")
    if isinstance(geometry_raw, str):
        geometry = decode_polyline(geometry_raw)
    else:
        # GeoJSON coordinates are [lng, lat]
        geometry = [(lat, lng) for lng, lat in (geometry_raw or {}).get("coordinates", [])]

    steps = [
        RouteStep(
            distance_m=step.get("distance", 0.0),
            duration_s=step.get("duration", 0.0),
            name=step.get("name") or "",
            maneuver_type=step.get("maneuver", {}).get("type", ""),
            modifier=step.get("maneuver", {}).get("modifier"),
            instruction=step_instruction(step),
        )
        for leg in route.get("legs", [])
        for step in leg.get("steps", [])
    ]
    return RouteResult(
        distance_m=route.get("distance", 0.0),
        duration_s=route.get("duration", 0.0),
        geometry=geometry,
        steps=steps,
        waypoints=[
            RouteWaypoint(name=waypoint.get("name") or "", location=tuple(waypoint.get("location", (0.0, 0.0))))
            for waypoint in waypoints
        ],
    )


_TURN_PHRASES = {
    "left": "Turn left",
    "right": "Turn right",
    "slight left": "Bear left",
    "slight right": "Bear right",
    "sharp left": "Turn sharp left",
    "sharp right": "Turn sharp right",
    "straight": "Go straight",
    "uturn": "Make a U-turn",
}

_MANEUVER_PHRASES = {
    "depart": "Head out",
    "merge": "Merge",
    "on ramp": "Take the ramp",
    "off ramp": "Take the exit",
    "roundabout": "At the roundabout, continue",
    "rotary": "At the roundabout, continue",
    "roundabout turn": "At the roundabout, continue",
    "exit roundabout": "Exit the roundabout",
    "exit rotary": "Exit the roundabout",
}


def step_instruction(step: dict) -> str:
    """Human-readable instruction for one OSRM step."""

    maneuver = step.get("maneuver", {})
    maneuver_type = maneuver.get("type", "")
    modifier = maneuver.get("modifier")
    road = step.get("name") or "the road"

    if maneuver_type == "arrive":
        return "You have arrived"
    if maneuver_type in {"turn", "fork", "end of road"} and modifier in _TURN_PHRASES:
        return f"{_TURN_PHRASES[modifier]} onto {road}"
    if maneuver_type in _MANEUVER_PHRASES:
        return f"{_MANEUVER_PHRASES[maneuver_type]} onto {road}"
    return f"Continue on {road}"


def decode_polyline(polyline: str) -> list[tuple[float, float]]:
    """Decode Google polyline string to list of (lat, lon) coordinates.

    OSRM uses Google's polyline encoding format for route geometry.
    """
    coordinates = []
    index = 0
    lat = 0
    lon = 0

    while index < len(polyline):
        deltas = []
        for _ in range(2):
            shift = 0
            result = 0
            while True:
                b = ord(polyline[index]) - 63
                index += 1
                result |= (b & 0x1f) << shift
                shift += 5
                if b < 0x20:
                    break
            deltas.append(~(result >> 1) if (result & 1) else (result >> 1))
        lat += deltas[0]
        lon += deltas[1]
        coordinates.append((lat / 1e5, lon / 1e5))

    return coordinates


def format_distance(meters: float) -> str:
    if meters < 1000:
        return f"{round(meters)} m"
    return f"{meters / 1000:.1f} km"


def format_duration(seconds: float) -> str:
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    if hours > 0:
        return f"{hours} h {minutes} min"
    return f"{minutes} min"


def check_health(base_url: str | None = None) -> bool:
    """Check OSRM service health by requesting a short route.

    Public OSRM endpoints may not have a /health endpoint, so connectivity is
    tested with a minimal two-point route in Berlin.
    """
    base = base_url or settings.osrm_base_url
    if not base:
        return False
    try:
        url = f"{base.rstrip('/')}/route/v1/{settings.osrm_profile}/13.388860,52.517037;13.385983,52.496891"
        response = httpx.get(url, params={"overview": "false"}, timeout=5.0)
        response.raise_for_status()
        return response.json().get("code") == "Ok"
    except (httpx.HTTPError, ValueError):
        return False
