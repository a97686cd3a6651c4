"""Route watch trigger: evaluate watches for a new ride and deliver notifications.

Ride creation must never wait on or fail because of this pipeline, so
:meth:`RouteWatchTrigger.run` swallows every error (after logging it) and
:meth:`RouteWatchTrigger.schedule` hands the run to a background thread pool.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor
from functools import lru_cache

from ...config import settings
from ...models.domain import DispatchSummary, Ride
from ..watches.matcher import WatchMatcher
from .dispatcher import NotificationDispatcher

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_trigger_executor() -> ThreadPoolExecutor:
    return ThreadPoolExecutor(
        max_workers=settings.trigger_max_workers,
        thread_name_prefix="route-watch-trigger",
    )


def shutdown_trigger_executor(wait: bool = True) -> None:
    """Let in-flight runs finish, then release the pool."""
    if get_trigger_executor.cache_info().currsize:
        get_trigger_executor().shutdown(wait=wait)
        get_trigger_executor.cache_clear()


class RouteWatchTrigger:
    def __init__(
        self,
        matcher: WatchMatcher,
        dispatcher: NotificationDispatcher,
        executor: ThreadPoolExecutor | None = None,
        soft_timeout_seconds: float | None = None,
    ) -> None:
        self.matcher = matcher
        self.dispatcher = dispatcher
        self._executor = executor
        self.soft_timeout_seconds = (
            soft_timeout_seconds if soft_timeout_seconds is not None else settings.trigger_soft_timeout_seconds
        )

    @property
    def executor(self) -> ThreadPoolExecutor:
        return self._executor or get_trigger_executor()

    def run(self, ride: Ride) -> DispatchSummary:
        start_time = time.monotonic()
        try:
            matches = self.matcher.match_ride(ride)
            summary = self.dispatcher.dispatch(ride, matches)
        except Exception as exc:
            logger.exception(f"Error in route watch trigger for ride {ride.id}: {exc}")
            return DispatchSummary()

        elapsed = time.monotonic() - start_time
        if elapsed > self.soft_timeout_seconds:
            logger.warning(
                f"Route watch trigger for ride {ride.id} took {elapsed:.2f}s "
                f"(soft limit {self.soft_timeout_seconds:.1f}s)"
            )
        logger.info(
            f"Route watch trigger: {summary.matched_count} matches, "
            f"{summary.notifications_sent} notifications, {summary.push_sent} push sent"
        )
        return summary

    def schedule(self, ride: Ride) -> Future:
        """Fire-and-forget. The returned future is only useful for tests and shutdown."""
        future = self.executor.submit(self.run, ride)
        future.add_done_callback(_log_unexpected_failure)
        return future


def _log_unexpected_failure(future: Future) -> None:
    if future.cancelled():
        logger.warning("Route watch trigger was cancelled before it ran")
        return
    exc = future.exception()
    if exc is not None:
        logger.error(f"Route watch trigger crashed: {exc!r}")
