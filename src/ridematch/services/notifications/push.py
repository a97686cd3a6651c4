"""Web push delivery through VAPID-signed requests."""

from __future__ import annotations

import json
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict, dataclass, field
from typing import Optional, Protocol, Sequence

from pywebpush import WebPushException, webpush

from ...config import settings
from ...models.domain import PushEndpoint

logger = logging.getLogger(__name__)

# Push services answer 404/410 for subscriptions that no longer exist.
EXPIRED_STATUS_CODES = {404, 410}
DEFAULT_MAX_PARALLEL_SENDS = 8


@dataclass(slots=True)
class PushPayload:
    title: str
    body: str
    tag: str = "default"
    icon: Optional[str] = None
    badge: Optional[str] = None
    data: dict = field(default_factory=dict)


@dataclass(slots=True)
class PushResult:
    sent: int = 0
    failed: int = 0
    expired: list[str] = field(default_factory=list)


class PushGateway(Protocol):
    def send_push(self, endpoints: Sequence[PushEndpoint], payload: PushPayload) -> PushResult:
        ...


class WebPushGateway:
    """Sends one payload to many subscriptions; failures are counted, never raised."""

    def __init__(
        self,
        vapid_private_key: str | None = None,
        vapid_subject: str | None = None,
        ttl_seconds: int | None = None,
        timeout_seconds: float | None = None,
        max_parallel_sends: int = DEFAULT_MAX_PARALLEL_SENDS,
    ) -> None:
        self.vapid_private_key = vapid_private_key or settings.vapid_private_key
        self.vapid_subject = vapid_subject or settings.vapid_subject
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else settings.push_ttl_seconds
        self.timeout_seconds = timeout_seconds if timeout_seconds is not None else settings.push_timeout_seconds
        self.max_parallel_sends = max_parallel_sends

    def _encode(self, payload: PushPayload) -> str:
        body = asdict(payload)
        body["icon"] = payload.icon or settings.push_icon
        body["badge"] = payload.badge or settings.push_badge
        return json.dumps(body)

    def _send_one(self, endpoint: PushEndpoint, data: str) -> str:
        """Return "sent", "expired" or "failed" for a single subscription."""
        try:
            webpush(
                subscription_info={
                    "endpoint": endpoint.endpoint,
                    "keys": {"p256dh": endpoint.p256dh, "auth": endpoint.auth},
                },
                data=data,
                vapid_private_key=self.vapid_private_key,
                vapid_claims={"sub": self.vapid_subject},
                ttl=self.ttl_seconds,
                timeout=self.timeout_seconds,
                headers={"Urgency": "normal"},
            )
            return "sent"
        except WebPushException as exc:
            status_code = exc.response.status_code if exc.response is not None else None
            if status_code in EXPIRED_STATUS_CODES:
                logger.info(f"Push subscription expired: {endpoint.endpoint}")
                return "expired"
            logger.error(f"Failed to send push notification (status {status_code}): {exc}")
            return "failed"
        except Exception as exc:
            logger.warning(f"Push delivery to {endpoint.endpoint} failed: {exc}")
            return "failed"

    def send_push(self, endpoints: Sequence[PushEndpoint], payload: PushPayload) -> PushResult:
        result = PushResult()
        if not endpoints:
            return result
        if not self.vapid_private_key:
            logger.error("VAPID keys not configured; skipping push delivery")
            result.failed = len(endpoints)
            return result

        data = self._encode(payload)
        workers = min(self.max_parallel_sends, len(endpoints))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            outcomes = list(executor.map(lambda endpoint: self._send_one(endpoint, data), endpoints))

        for endpoint, outcome in zip(endpoints, outcomes):
            if outcome == "sent":
                result.sent += 1
            else:
                result.failed += 1
                if outcome == "expired":
                    result.expired.append(endpoint.endpoint)
        return result
