"""
Notification Repository

Inbox reads and read-marking for the session's actor on the
`notifications` table.
"""
from __future__ import annotations

from typing import List

from pydantic import ValidationError as PydanticValidationError

from supportsphere.exceptions import PersistenceError
from supportsphere.models.schemas import Notification
from supportsphere.repositories.base_repository import BaseRepository
from supportsphere.utils.logger import get_logger

logger = get_logger(__name__)


class NotificationRepository(BaseRepository):
    """Repository for the current actor's notifications"""

    table_name = "notifications"

    def __init__(self, session, supabase_client=None, limit: int = 50):
        super().__init__(session, supabase_client)
        self.limit = limit
        self.notifications: List[Notification] = []
        self.error = None

    async def list(self) -> List[Notification]:
        """Newest first. Empty when signed out or on failure."""
        actor = self.session.actor
        if actor is None:
            return []

        try:
            response = await self._execute(
                self.client.table(self.table_name)
                .select("*")
                .eq("user_id", actor.id)
                .order("created_at", desc=True)
                .limit(self.limit),
                "list notifications"
            )
            notifications = [Notification(**row) for row in self._rows(response)]
            self.error = None
            return notifications
        except (PersistenceError, PydanticValidationError) as exc:
            logger.error("Error fetching notifications: %s", exc)
            self.error = "Failed to fetch notifications"
            return []

    async def refresh(self) -> List[Notification]:
        self.notifications = await self.list()
        return self.notifications

    async def unread_count(self) -> int:
        actor = self.session.actor
        if actor is None:
            return 0

        try:
            response = await self._execute(
                self.client.table(self.table_name)
                .select("*", count="exact")
                .eq("user_id", actor.id)
                .eq("is_read", False),
                "count unread notifications"
            )
            return response.count or 0
        except PersistenceError as exc:
            logger.error("Error counting notifications: %s", exc)
            return 0

    async def mark_as_read(self, notification_id: str) -> None:
        actor = self._require_actor()
        await self._execute(
            self.client.table(self.table_name)
            .update({"is_read": True})
            .eq("id", notification_id)
            .eq("user_id", actor.id),
            "mark notification read"
        )
        await self.refresh()

    async def mark_all_as_read(self) -> None:
        actor = self._require_actor()
        await self._execute(
            self.client.table(self.table_name)
            .update({"is_read": True})
            .eq("user_id", actor.id)
            .eq("is_read", False),
            "mark all notifications read"
        )
        logger.info("Marked all notifications read for %s", actor.id)
        await self.refresh()
