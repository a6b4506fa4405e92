"""
Activity Repository

Writes the audit_logs and notifications rows that accompany every ticket and
message mutation. These writes are best-effort: a failure is logged, kept in
an in-memory outbox for a later retry, and never raised to the caller.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from supportsphere.exceptions import PersistenceError
from supportsphere.models.schemas import (
    AuditAction,
    AuditLogCreate,
    NotificationCreate,
)
from supportsphere.repositories.base_repository import BaseRepository
from supportsphere.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class PendingWrite:
    """A side-effect insert that failed and is waiting for a retry."""
    table: str
    payload: Dict[str, Any]
    error: str
    attempts: int = 1
    failed_at: datetime = field(default_factory=datetime.now)


class SideEffectOutbox:
    """In-memory queue of failed side-effect inserts."""

    def __init__(self, max_size: int = 500):
        self.max_size = max_size
        self._items: List[PendingWrite] = []

    def __len__(self) -> int:
        return len(self._items)

    def add(self, item: PendingWrite) -> None:
        if len(self._items) >= self.max_size:
            dropped = self._items.pop(0)
            logger.warning("Outbox full, dropping oldest %s write", dropped.table)
        self._items.append(item)

    def drain(self) -> List[PendingWrite]:
        items, self._items = self._items, []
        return items

    @property
    def items(self) -> List[PendingWrite]:
        return list(self._items)


class ActivityRepository(BaseRepository):
    """Best-effort inserts into audit_logs and notifications."""

    AUDIT_TABLE = "audit_logs"
    NOTIFICATION_TABLE = "notifications"

    def __init__(self, session, supabase_client=None, outbox: Optional[SideEffectOutbox] = None):
        super().__init__(session, supabase_client)
        self.outbox = outbox if outbox is not None else SideEffectOutbox()

    async def record_audit(
        self,
        ticket_id: Optional[str],
        action: AuditAction,
        details: Optional[Dict[str, Any]] = None
    ) -> bool:
        """
        Append an audit entry attributed to the session's actor.

        Returns:
            True if the row was written
        """
        actor = self._require_actor()
        entry = AuditLogCreate(
            actor_id=actor.id,
            ticket_id=ticket_id,
            action_type=action,
            details=details,
        )
        return await self._insert(self.AUDIT_TABLE, entry.model_dump(mode="json"))

    async def notify(self, notification: NotificationCreate) -> bool:
        """
        Deliver one notification row.

        Returns:
            True if the row was written
        """
        return await self._insert(self.NOTIFICATION_TABLE, notification.model_dump(mode="json"))

    async def flush_outbox(self) -> int:
        """
        Retry every pending side-effect write once.

        Returns:
            Number of writes that succeeded
        """
        delivered = 0
        for item in self.outbox.drain():
            try:
                await self._execute(
                    self.client.table(item.table).insert(item.payload),
                    f"retry {item.table} insert"
                )
                delivered += 1
            except PersistenceError as exc:
                item.attempts += 1
                item.error = str(exc)
                self.outbox.add(item)
        if delivered:
            logger.info("Flushed %d pending side-effect writes", delivered)
        return delivered

    async def _insert(self, table: str, payload: Dict[str, Any]) -> bool:
        try:
            await self._execute(self.client.table(table).insert(payload), f"{table} insert")
            return True
        except PersistenceError as exc:
            logger.warning("Side-effect insert into %s failed, queued for retry: %s", table, exc)
            self.outbox.add(PendingWrite(table=table, payload=payload, error=str(exc)))
            return False
