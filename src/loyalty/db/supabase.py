"""Supabase client shared by the ledger store and the health checks."""

import logging
from functools import lru_cache
from typing import Optional

from supabase import create_client, Client
from ..config import settings


def is_configured() -> bool:
    return bool(settings.supabase_url and settings.supabase_key)


@lru_cache()
def get_supabase_client() -> Optional[Client]:
    """Return the process-wide client, or ``None`` when credentials are missing.

    Creating the client does not contact the server; connection problems show
    up on the first query as a ``StoreError`` raised by the store.
    """
    if not is_configured():
        logging.warning("Supabase credentials not configured (LOYALTY_SUPABASE_URL / LOYALTY_SUPABASE_KEY)")
        return None

    try:
        client = create_client(settings.supabase_url, settings.supabase_key)
    except Exception as e:
        logging.error(f"Failed to create Supabase client for {settings.supabase_url}: {e}")
        return None
    logging.info(f"Supabase client ready for {settings.supabase_url}")
    return client
