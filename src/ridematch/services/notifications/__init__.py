"""Notification delivery for route watch matches."""

from .dispatcher import NotificationDispatcher
from .push import PushGateway, PushPayload, PushResult, WebPushGateway
from .trigger import RouteWatchTrigger, get_trigger_executor, shutdown_trigger_executor

__all__ = [
    "NotificationDispatcher",
    "PushGateway",
    "PushPayload",
    "PushResult",
    "RouteWatchTrigger",
    "WebPushGateway",
    "get_trigger_executor",
    "shutdown_trigger_executor",
]
