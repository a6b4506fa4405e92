"""
Ticket Repository for the `tickets` table

Features:
- Filtered listing with joined creator/agent/team/category names
- Create / update / assign / status change with audit and notification fan-out
- Status changes checked against TicketStateMachine
- Full refetch after every write and on every realtime change signal
"""
from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from supportsphere.config import get_settings
from supportsphere.exceptions import PersistenceError, ValidationError
from supportsphere.models.schemas import (
    AuditAction,
    NotificationCreate,
    NotificationType,
    Priority,
    Ticket,
    TicketCreate,
    TicketFilters,
    TicketStatus,
    TicketUpdate,
)
from supportsphere.repositories.activity_repository import ActivityRepository
from supportsphere.repositories.base_repository import BaseRepository
from supportsphere.tickets.filters import (
    TICKET_SELECT,
    TICKET_WITH_CREATOR_SELECT,
    apply_filters,
)
from supportsphere.tickets.state import TicketStateMachine
from supportsphere.utils.logger import get_logger
from supportsphere.utils.validators import require_text

logger = get_logger(__name__)

_STATUS_NOTIFICATION_TYPES = {
    TicketStatus.RESOLVED: NotificationType.TICKET_RESOLVED,
    TicketStatus.ESCALATED: NotificationType.TICKET_ESCALATED,
}


class TicketRepository(BaseRepository):
    """Repository for tickets visible to the session's actor"""

    table_name = "tickets"

    def __init__(
        self,
        session,
        supabase_client=None,
        filters: Optional[TicketFilters] = None,
        change_feed=None,
        activity: Optional[ActivityRepository] = None
    ):
        """
        Initialize repository

        Args:
            session: Session providing the acting user
            supabase_client: Supabase client instance (uses default if None)
            filters: Filters held for refresh()
            change_feed: ChangeFeed used by subscribe()
            activity: Side-effect writer (built from the same client if None)
        """
        super().__init__(session, supabase_client)
        self.settings = get_settings()
        self.filters = filters
        self.change_feed = change_feed
        self.activity = activity or ActivityRepository(session, self.client)

        self.tickets: List[Ticket] = []
        self.loading = False
        self.error: Optional[str] = None

        self._subscription = None
        self._pending: set = set()
        self._closed = False

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------
    async def list(self, filters: Optional[TicketFilters] = None) -> List[Ticket]:
        """
        Fetch tickets newest first.

        Never raises: with no actor the result is empty, on gateway failure
        ``self.error`` is set and the result is empty.
        """
        if not self.session.is_authenticated:
            return []

        try:
            query = self.client.table(self.table_name) \
                .select(TICKET_SELECT) \
                .order("created_at", desc=True)
            query = apply_filters(query, filters)
            response = await self._execute(query, "list tickets")
            tickets = [Ticket(**row) for row in self._rows(response)]
            self.error = None
            return tickets
        except Exception as exc:
            logger.error("Error fetching tickets: %s", exc)
            self.error = "Failed to fetch tickets"
            return []

    async def refresh(self) -> List[Ticket]:
        """Re-run list() with the held filters and store the result."""
        if self._closed:
            return self.tickets

        self.loading = True
        try:
            tickets = await self.list(self.filters)
        finally:
            self.loading = False

        if not self._closed:
            self.tickets = tickets
        return tickets

    async def set_filters(self, filters: Optional[TicketFilters]) -> List[Ticket]:
        self.filters = filters
        return await self.refresh()

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------
    async def create(self, ticket: Union[TicketCreate, Dict[str, Any]]) -> Ticket:
        """
        Submit a new ticket as the current actor.

        Raises:
            AuthRequired: No actor in session
            ValidationError: Empty title or description
            PersistenceError: Insert failed
        """
        actor = self._require_actor()
        data = self._coerce(TicketCreate, ticket)

        title = require_text(data.title, "title")
        description = require_text(data.description, "description")
        priority = data.priority or Priority(self.settings.default_priority)

        payload: Dict[str, Any] = {
            "title": title,
            "description": description,
            "priority": priority.value,
            "created_by": actor.id,
        }
        if data.category_id:
            payload["category_id"] = data.category_id
        if data.assigned_team:
            payload["assigned_team"] = data.assigned_team

        response = await self._execute(
            self.client.table(self.table_name).insert(payload),
            "create ticket"
        )
        row = self._first(response)
        if row is None:
            raise PersistenceError("Supabase insert returned no data", operation="create ticket")
        created = Ticket(**row)
        logger.info("Created ticket %s (%s)", created.id, created.display_number)

        await self.activity.record_audit(
            created.id,
            AuditAction.TICKET_CREATED,
            {"title": title, "priority": priority.value},
        )
        await self.activity.notify(NotificationCreate(
            user_id=actor.id,
            title="Ticket Created",
            body=f'Your ticket "{title}" has been created successfully.',
            type=NotificationType.TICKET_CREATED,
            ticket_id=created.id,
        ))

        await self.refresh()
        return created

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------
    async def update(self, ticket_id: str, updates: Union[TicketUpdate, Dict[str, Any]]) -> Ticket:
        """
        Patch arbitrary ticket fields.

        A patch carrying ``status`` is checked against the transition table.
        """
        self._require_actor()
        patch = self._coerce(TicketUpdate, updates).model_dump(exclude_unset=True, mode="json")
        if not patch:
            raise ValidationError("No updates provided")

        if "status" in patch:
            await self._check_transition(ticket_id, TicketStatus(patch["status"]))

        updated = await self._write(ticket_id, patch, "update ticket")
        logger.info("Updated ticket %s: %s", ticket_id, sorted(patch))

        await self.activity.record_audit(ticket_id, AuditAction.TICKET_UPDATED, patch)

        await self.refresh()
        return updated

    async def assign(
        self,
        ticket_id: str,
        agent_id: Optional[str],
        team_id: Optional[str] = None
    ) -> Ticket:
        """
        Set or clear the assigned agent and team.

        Status becomes ``assigned`` when an agent is set and ``open`` when
        cleared, subject to the transition table.
        """
        self._require_actor()
        status = TicketStateMachine.status_for_assignment(agent_id)
        await self._check_transition(ticket_id, status)

        updated = await self._write(
            ticket_id,
            {
                "assigned_agent": agent_id,
                "assigned_team": team_id,
                "status": status.value,
            },
            "assign ticket"
        )
        logger.info("Assigned ticket %s to agent=%s team=%s", ticket_id, agent_id, team_id)

        await self.activity.record_audit(
            ticket_id,
            AuditAction.TICKET_ASSIGNED,
            {"assigned_agent": agent_id, "assigned_team": team_id},
        )
        if agent_id:
            await self.activity.notify(NotificationCreate(
                user_id=agent_id,
                title="Ticket Assigned",
                body=f"You have been assigned to ticket #{updated.ticket_number}",
                type=NotificationType.TICKET_ASSIGNED,
                ticket_id=ticket_id,
            ))

        await self.refresh()
        return updated

    async def update_status(self, ticket_id: str, status: Union[TicketStatus, str]) -> Ticket:
        """
        Move a ticket to ``status``.

        The creator is notified unless they are the one making the change.
        """
        actor = self._require_actor()
        status = self._coerce_status(status)
        await self._check_transition(ticket_id, status)

        updated = await self._write(
            ticket_id,
            {"status": status.value},
            "update ticket status",
            select=TICKET_WITH_CREATOR_SELECT
        )
        logger.info("Ticket %s status -> %s", ticket_id, status.value)

        await self.activity.record_audit(
            ticket_id,
            AuditAction.STATUS_CHANGED,
            {"new_status": status.value},
        )
        if updated.created_by and updated.created_by != actor.id:
            await self.activity.notify(NotificationCreate(
                user_id=updated.created_by,
                title="Ticket Status Updated",
                body=f"Your ticket #{updated.ticket_number} status changed to {status.value}",
                type=_STATUS_NOTIFICATION_TYPES.get(status, NotificationType.TICKET_UPDATED),
                ticket_id=ticket_id,
            ))

        await self.refresh()
        return updated

    async def unmark_duplicate(self, ticket_id: str) -> Ticket:
        """Reopen a ticket marked duplicate and clear its merge target."""
        self._require_actor()
        current = await self._current_status(ticket_id)
        if current != TicketStatus.DUPLICATE:
            raise ValidationError(f"Ticket {ticket_id} is not marked duplicate", field="status")

        updated = await self._write(
            ticket_id,
            {"status": TicketStatus.REOPENED.value, "merged_into_ticket_id": None},
            "unmark duplicate"
        )
        await self.activity.record_audit(
            ticket_id,
            AuditAction.STATUS_CHANGED,
            {"new_status": TicketStatus.REOPENED.value, "previous_status": current.value},
        )

        await self.refresh()
        return updated

    # ------------------------------------------------------------------
    # Realtime
    # ------------------------------------------------------------------
    async def subscribe(self) -> None:
        """Refetch whenever the tickets table changes. No-op when signed out."""
        if self.change_feed is None or self._subscription is not None:
            return
        if not self.session.is_authenticated:
            return
        self._subscription = await self.change_feed.subscribe(
            "tickets-changes",
            self.table_name,
            self._on_change
        )

    async def close(self) -> None:
        """Tear down the subscription; later refreshes leave state untouched."""
        self._closed = True
        if self._subscription is not None:
            await self._subscription.close()
            self._subscription = None

    def _on_change(self) -> None:
        if self._closed:
            return
        task = asyncio.ensure_future(self.refresh())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    async def _write(
        self,
        ticket_id: str,
        patch: Dict[str, Any],
        operation: str,
        select: str = "*"
    ) -> Ticket:
        await self._execute(
            self.client.table(self.table_name).update(patch).eq("id", ticket_id),
            operation
        )
        response = await self._execute(
            self.client.table(self.table_name).select(select).eq("id", ticket_id).limit(1),
            operation
        )
        row = self._first(response)
        if row is None:
            raise PersistenceError(f"Ticket {ticket_id} not found", operation=operation)
        return Ticket(**row)

    async def _current_status(self, ticket_id: str) -> TicketStatus:
        response = await self._execute(
            self.client.table(self.table_name).select("id, status").eq("id", ticket_id).limit(1),
            "read ticket status"
        )
        row = self._first(response)
        if row is None:
            raise PersistenceError(f"Ticket {ticket_id} not found", operation="read ticket status")
        return TicketStatus(row["status"])

    async def _check_transition(self, ticket_id: str, requested: TicketStatus) -> None:
        if not self.settings.enforce_status_transitions:
            return
        current = await self._current_status(ticket_id)
        TicketStateMachine.assert_transition(current, requested)

    @staticmethod
    def _coerce(model, data):
        if isinstance(data, model):
            return data
        try:
            return model.model_validate(data)
        except PydanticValidationError as exc:
            raise ValidationError(str(exc)) from exc

    @staticmethod
    def _coerce_status(status) -> TicketStatus:
        try:
            return TicketStatus(status)
        except ValueError as exc:
            raise ValidationError(f"Unknown ticket status: {status}", field="status") from exc
