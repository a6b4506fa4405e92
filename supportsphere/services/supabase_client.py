"""
Supabase clients

The sync client serves queries and mutations. Realtime channels need the
async client, so the change feed gets its own.
"""
from functools import lru_cache

from supabase import create_client, acreate_client, Client, AsyncClient

from supportsphere.config import get_settings


@lru_cache()
def get_supabase_client() -> Client:
    """Shared data client using the project's anon key (RLS applies)."""
    settings = get_settings()
    return create_client(
        settings.supabase_url,
        settings.supabase_key
    )


async def create_realtime_client() -> AsyncClient:
    """New async client for realtime subscriptions."""
    settings = get_settings()
    return await acreate_client(
        settings.supabase_url,
        settings.supabase_key
    )
