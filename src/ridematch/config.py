"""Application configuration and settings management."""

from typing import Any, Literal, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="RIDEMATCH_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Ride Match API"
    api_prefix: str = "/api"
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    # Supabase configuration
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL (e.g., https://xxx.supabase.co).",
    )
    supabase_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key for cross-user reads and notification writes.",
    )

    # Routing provider
    osrm_base_url: str = Field(
        default="https://router.project-osrm.org",
        description="Base URL for the OSRM routing service. The public demo server is rate-limited.",
    )
    osrm_profile: Literal["driving", "car"] = Field(default="driving")
    osrm_timeout_seconds: float = Field(default=15.0, gt=0.0)
    osrm_max_retries: int = Field(default=1, ge=0)
    osrm_backoff_seconds: float = Field(default=1.0, ge=0.0)

    # Matching thresholds (km)
    direct_threshold_km: float = Field(default=2.0, ge=0.0)
    small_detour_threshold_km: float = Field(default=20.0, ge=0.0)
    detour_threshold_km: float = Field(default=25.0, ge=0.0)
    route_match_threshold_km: float = Field(
        default=25.0,
        gt=0.0,
        description="Distance under which a ride endpoint counts as lying on the rider's route.",
    )
    corridor_watch_threshold_km: float = Field(
        default=20.0,
        gt=0.0,
        description="Maximum start/end offset for a corridor watch to fire.",
    )
    min_similarity_score: int = Field(default=20, ge=0, le=100)
    default_nearby_radius_km: float = Field(default=25.0, gt=0.0)

    # Candidate fetch caps and result page sizes
    route_match_fetch_limit: int = Field(default=100, ge=1)
    route_match_page_size: int = Field(default=20, ge=1)
    nearby_fetch_limit: int = Field(default=200, ge=1)
    nearby_page_size: int = Field(default=30, ge=1)
    date_window_days: int = Field(default=3, ge=0)

    # Web push (VAPID)
    vapid_public_key: Optional[str] = None
    vapid_private_key: Optional[str] = None
    vapid_subject: str = Field(default="mailto:support@example.org")
    push_ttl_seconds: int = Field(default=3600, ge=0)
    push_timeout_seconds: float = Field(default=10.0, gt=0.0, description="Per-request timeout towards a push service.")
    push_icon: str = "/icon-192.png"
    push_badge: str = "/icon-badge.png"

    # Background watch trigger
    trigger_max_workers: int = Field(default=4, ge=1)
    trigger_soft_timeout_seconds: float = Field(
        default=5.0,
        gt=0.0,
        description="Runs slower than this are logged; they are never cancelled.",
    )

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            # Try JSON first
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            # Try comma-separated
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            # Single value
            if value.strip():
                return (value.strip(),)
        # Return empty tuple if value is None or empty
        return tuple()


settings = Settings()
