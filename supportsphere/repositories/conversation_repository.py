"""
Conversation Repository

One ticket's detail plus its message thread from `ticket_messages`.
Internal notes are never announced to the ticket's creator.
"""
from __future__ import annotations

import asyncio
from typing import List, Optional

from supportsphere.config import get_settings
from supportsphere.exceptions import PersistenceError
from supportsphere.models.schemas import (
    AuditAction,
    NotificationCreate,
    NotificationType,
    Ticket,
    TicketMessage,
)
from supportsphere.repositories.activity_repository import ActivityRepository
from supportsphere.repositories.base_repository import BaseRepository
from supportsphere.tickets.filters import MESSAGE_SELECT, TICKET_SELECT
from supportsphere.utils.logger import get_logger
from supportsphere.utils.validators import require_text, truncate_preview

logger = get_logger(__name__)

TICKET_ERROR = "Failed to fetch ticket"
MESSAGES_ERROR = "Failed to fetch messages"


class ConversationRepository(BaseRepository):
    """Ticket detail and messages for a single ticket id"""

    def __init__(
        self,
        session,
        ticket_id: str,
        supabase_client=None,
        change_feed=None,
        activity: Optional[ActivityRepository] = None
    ):
        super().__init__(session, supabase_client)
        self.settings = get_settings()
        self.ticket_id = ticket_id
        self.change_feed = change_feed
        self.activity = activity or ActivityRepository(session, self.client)

        self.ticket: Optional[Ticket] = None
        self.messages: List[TicketMessage] = []
        self.loading = False
        self.error: Optional[str] = None

        self._subscription = None
        self._pending: set = set()
        self._closed = False

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------
    async def get_ticket(self) -> Optional[Ticket]:
        """Ticket with joined names, or None if missing or unreadable."""
        if not self.session.is_authenticated or not self.ticket_id:
            return None

        try:
            response = await self._execute(
                self.client.table("tickets")
                .select(TICKET_SELECT)
                .eq("id", self.ticket_id)
                .limit(1),
                "get ticket"
            )
            row = self._first(response)
            return Ticket(**row) if row else None
        except Exception as exc:
            logger.error("Error fetching ticket %s: %s", self.ticket_id, exc)
            self.error = TICKET_ERROR
            return None

    async def list_messages(self) -> List[TicketMessage]:
        """Messages oldest first. Empty on failure or when signed out."""
        if not self.session.is_authenticated or not self.ticket_id:
            return []

        try:
            response = await self._execute(
                self.client.table("ticket_messages")
                .select(MESSAGE_SELECT)
                .eq("ticket_id", self.ticket_id)
                .order("created_at", desc=False),
                "list messages"
            )
            messages = [TicketMessage(**row) for row in self._rows(response)]
            # Rows without a timestamp sort first; stable for equal times.
            messages.sort(key=lambda m: (m.created_at is not None, m.created_at or 0))
            return messages
        except Exception as exc:
            logger.error("Error fetching messages for %s: %s", self.ticket_id, exc)
            self.error = MESSAGES_ERROR
            return []

    async def refresh(self) -> None:
        """Reload ticket and messages into local state."""
        if self._closed:
            return
        self.error = None
        self.loading = True
        try:
            ticket = await self.get_ticket()
            messages = await self.list_messages()
        finally:
            self.loading = False
        if not self._closed:
            self.ticket = ticket
            self.messages = messages

    async def refresh_messages(self) -> List[TicketMessage]:
        if self._closed:
            return self.messages
        if self.error == MESSAGES_ERROR:
            self.error = None
        messages = await self.list_messages()
        if not self._closed:
            self.messages = messages
        return messages

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------
    async def send_message(self, text: str, is_internal: bool = False) -> TicketMessage:
        """
        Post a reply or internal note as the current actor.

        Raises:
            AuthRequired: No actor in session
            ValidationError: Empty text after trimming
            PersistenceError: Insert failed
        """
        actor = self._require_actor()
        body = require_text(text, "message")

        response = await self._execute(
            self.client.table("ticket_messages").insert({
                "ticket_id": self.ticket_id,
                "sender_id": actor.id,
                "message": body,
                "is_internal": is_internal,
            }),
            "send message"
        )
        row = self._first(response)
        if row is None:
            raise PersistenceError("Supabase insert returned no data", operation="send message")
        message = TicketMessage(**row)

        action = AuditAction.INTERNAL_NOTE_ADDED if is_internal else AuditAction.MESSAGE_SENT
        await self.activity.record_audit(
            self.ticket_id,
            action,
            {"message_preview": truncate_preview(body, self.settings.audit_preview_length)},
        )

        if not is_internal:
            ticket = self.ticket or await self.get_ticket()
            recipient = self._other_party(ticket, actor.id)
            if recipient:
                await self.activity.notify(NotificationCreate(
                    user_id=recipient,
                    title="New Message",
                    body=f"New reply on ticket #{ticket.ticket_number}",
                    type=NotificationType.TICKET_MESSAGE,
                    ticket_id=self.ticket_id,
                ))

        logger.info("%s added to ticket %s", action.value, self.ticket_id)
        await self.refresh_messages()
        return message

    @staticmethod
    def _other_party(ticket: Optional[Ticket], actor_id: str) -> Optional[str]:
        """Creator when someone else replies, otherwise the assigned agent."""
        if ticket is None:
            return None
        if actor_id == ticket.created_by:
            return ticket.assigned_agent
        return ticket.created_by

    # ------------------------------------------------------------------
    # Realtime
    # ------------------------------------------------------------------
    async def subscribe(self) -> None:
        """Refetch messages on any change to this ticket's thread."""
        if self.change_feed is None or self._subscription is not None:
            return
        if not self.session.is_authenticated or not self.ticket_id:
            return
        self._subscription = await self.change_feed.subscribe(
            f"ticket-messages-{self.ticket_id}",
            "ticket_messages",
            self._on_change,
            filter=f"ticket_id=eq.{self.ticket_id}"
        )

    async def close(self) -> None:
        self._closed = True
        if self._subscription is not None:
            await self._subscription.close()
            self._subscription = None

    def _on_change(self) -> None:
        if self._closed:
            return
        task = asyncio.ensure_future(self.refresh_messages())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
