"""
Pydantic models for SupportSphere
"""

from supportsphere.models.schemas import (
    # Enums
    TicketStatus,
    Priority,
    AppRole,
    NotificationType,
    AuditAction,

    # Identity
    Actor,

    # Projections
    PersonRef,
    NamedRef,

    # Database Models
    Ticket,
    TicketCreate,
    TicketUpdate,
    TicketFilters,
    TicketMessage,
    AuditLogCreate,
    NotificationCreate,
    Notification,
    Profile,
    Team,
    Category,
)

__all__ = [
    # Enums
    "TicketStatus",
    "Priority",
    "AppRole",
    "NotificationType",
    "AuditAction",

    # Identity
    "Actor",

    # Projections
    "PersonRef",
    "NamedRef",

    # Database Models
    "Ticket",
    "TicketCreate",
    "TicketUpdate",
    "TicketFilters",
    "TicketMessage",
    "AuditLogCreate",
    "NotificationCreate",
    "Notification",
    "Profile",
    "Team",
    "Category",
]
