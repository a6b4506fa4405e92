"""
Repositories package for Supabase operations

Provides repository classes for:
- tickets table (TicketRepository)
- one ticket's ticket_messages thread (ConversationRepository)
- audit_logs / notifications side effects (ActivityRepository)
- notifications inbox (NotificationRepository)
- profiles / teams / categories lookups (DirectoryRepository)
"""
from supportsphere.repositories.activity_repository import (
    ActivityRepository,
    SideEffectOutbox,
)
from supportsphere.repositories.ticket_repository import TicketRepository
from supportsphere.repositories.conversation_repository import ConversationRepository
from supportsphere.repositories.notification_repository import NotificationRepository
from supportsphere.repositories.directory_repository import DirectoryRepository

__all__ = [
    "ActivityRepository",
    "SideEffectOutbox",
    "TicketRepository",
    "ConversationRepository",
    "NotificationRepository",
    "DirectoryRepository",
]
