"""Web push configuration endpoint for browser subscriptions."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from ...config import settings

router = APIRouter(prefix="/push", tags=["push"])


@router.get("/vapid-public-key", status_code=status.HTTP_200_OK)
def vapid_public_key() -> dict:
    """Application server key the browser needs for ``pushManager.subscribe``."""
    if not settings.vapid_public_key:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Web push not configured. Set RIDEMATCH_VAPID_PUBLIC_KEY.",
        )
    return {"public_key": settings.vapid_public_key}
