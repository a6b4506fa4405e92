"""
Supabase gateway and realtime change feed
"""
from supportsphere.services.supabase_client import (
    get_supabase_client,
    create_realtime_client,
)
from supportsphere.services.change_feed import ChangeFeed, Subscription

__all__ = [
    "get_supabase_client",
    "create_realtime_client",
    "ChangeFeed",
    "Subscription",
]
