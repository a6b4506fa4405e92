"""
Change Feed over Supabase realtime

Subscribes to ``postgres_changes`` for one table (optionally filtered) and
invokes a no-argument callback on every event. The event payload is dropped:
subscribers only learn that the table changed and refetch.
"""
from __future__ import annotations

from typing import Callable, Optional

from supportsphere.config import get_settings
from supportsphere.utils.logger import get_logger

logger = get_logger(__name__)


class Subscription:
    """Handle for one realtime channel. Close it when the view goes away."""

    def __init__(self, client, channel, name: str):
        self._client = client
        self._channel = channel
        self.name = name
        self.closed = False

    async def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        try:
            await self._client.remove_channel(self._channel)
            logger.debug("Removed realtime channel %s", self.name)
        except Exception as exc:
            logger.warning("Failed to remove realtime channel %s: %s", self.name, exc)


class ChangeFeed:
    """Payload-free "table changed" notifications."""

    def __init__(self, realtime_client, schema: Optional[str] = None):
        """
        Args:
            realtime_client: supabase ``AsyncClient``
            schema: Postgres schema to watch (defaults to settings)
        """
        self.client = realtime_client
        self.schema = schema or get_settings().realtime_schema

    async def subscribe(
        self,
        channel_name: str,
        table: str,
        on_change: Callable[[], None],
        filter: Optional[str] = None
    ) -> Subscription:
        """
        Open a channel and call ``on_change()`` for every change on ``table``.

        Args:
            channel_name: Unique channel name, e.g. ``ticket-messages-<id>``
            table: Table to watch
            on_change: Callback taking no arguments
            filter: Optional realtime filter, e.g. ``ticket_id=eq.<id>``

        Returns:
            Subscription handle
        """
        def _callback(_payload) -> None:
            on_change()

        channel = self.client.channel(channel_name)
        options = {"schema": self.schema, "table": table, "callback": _callback}
        if filter:
            options["filter"] = filter
        channel.on_postgres_changes("*", **options)
        await channel.subscribe()

        logger.info("Subscribed to %s changes on channel %s", table, channel_name)
        return Subscription(self.client, channel, channel_name)
