"""Shared Supabase client for the ride, watch and notification stores."""

import logging
from functools import lru_cache

from supabase import Client, create_client

from ..config import settings

logger = logging.getLogger(__name__)


@lru_cache()
def get_supabase_client() -> Client | None:
    """Return the process-wide Supabase client, or None when credentials are missing.

    Creating the client does not open a connection; network problems surface on
    the first query as :class:`~ridematch.errors.StoreError`.
    """
    if not settings.supabase_url or not settings.supabase_key:
        logger.warning("Supabase is not configured (RIDEMATCH_SUPABASE_URL / RIDEMATCH_SUPABASE_KEY)")
        return None

    try:
        return create_client(settings.supabase_url, settings.supabase_key)
    except Exception as e:
        logger.error(f"Could not create Supabase client for {settings.supabase_url}: {e}")
        return None
