"""Supabase client for Python backend."""

import logging

from supabase import Client, create_client

from ..config import Settings

logger = logging.getLogger(__name__)


def create_supabase_client(config: Settings) -> Client | None:
    """Create a Supabase client from settings.

    Returns:
        Supabase Client instance if configured, None otherwise.
        Note: This does not test the connection - actual queries may fail with network errors.
    """
    if not config.supabase_url or not config.supabase_key:
        logger.warning("Supabase credentials not configured (missing URL or key)")
        return None

    try:
        return create_client(config.supabase_url, config.supabase_key)
    except Exception as e:
        logger.error(f"Failed to create Supabase client: {e}")
        return None


# Example usage patterns:
#
# client.table("item_delivery").insert({...}).execute()
#
# client.table("item_delivery") \
#     .select("*") \
#     .or_("line_user_id.eq.U123,phone.eq.0811111111") \
#     .order("created_at", desc=True) \
#     .execute()
#
# client.table("zip_code_view").select("*").range(0, 999).execute()
