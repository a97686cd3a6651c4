"""Error types raised by the matching core and its collaborators."""

from __future__ import annotations


class MalformedRoute(ValueError):
    """A route without exactly one start and one end, or with clashing order values."""


class StoreError(RuntimeError):
    """A ride, watch, notification or push-subscription store call failed."""


class RoutingError(Exception):
    """Base class for routing provider failures.

    ``code`` is stable and meant for clients; ``retryable`` tells the UI whether
    "try again later" is a sensible message, as opposed to "no route exists".
    """

    code = "ROUTING_SERVICE_UNAVAILABLE"
    retryable = True

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class RoutingServiceUnavailable(RoutingError):
    code = "ROUTING_SERVICE_UNAVAILABLE"


class RoutingServiceOverloaded(RoutingError):
    code = "ROUTING_SERVICE_OVERLOADED"


class RoutingRateLimited(RoutingError):
    code = "ROUTING_RATE_LIMITED"


class RoutingTimeout(RoutingError):
    code = "ROUTING_TIMEOUT"


class NoRouteFound(RoutingError):
    code = "NO_ROUTE_FOUND"
    retryable = False


class InvalidCoordinates(RoutingError):
    code = "INVALID_COORDINATES"
    retryable = False
