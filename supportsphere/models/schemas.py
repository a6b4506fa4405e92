"""
Pydantic models for SupportSphere

This module contains the Pydantic schemas matching the Supabase tables the
ticket data layer reads and writes:
- tickets (with creator/agent/team/category projections)
- ticket_messages (with sender projection)
- audit_logs, notifications (written as side effects)
- profiles, teams, categories (read-only lookups)
"""
from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any, List, Union

from pydantic import BaseModel, Field, ConfigDict, field_validator


# ============================================================================
# Enums
# ============================================================================

class TicketStatus(str, Enum):
    """Valid ticket statuses"""
    OPEN = "open"
    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    WAITING_ON_USER = "waiting_on_user"
    ON_HOLD = "on_hold"
    ESCALATED = "escalated"
    RESOLVED = "resolved"
    CLOSED = "closed"
    REOPENED = "reopened"
    CANCELLED = "cancelled"
    DUPLICATE = "duplicate"


class Priority(str, Enum):
    """Valid ticket priorities"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class AppRole(str, Enum):
    """Roles a profile can hold"""
    USER = "user"
    AGENT = "agent"
    ADMIN = "admin"


class NotificationType(str, Enum):
    """Values of the notification_type enum"""
    TICKET_CREATED = "ticket_created"
    TICKET_ASSIGNED = "ticket_assigned"
    TICKET_UPDATED = "ticket_updated"
    TICKET_MESSAGE = "ticket_message"
    TICKET_RESOLVED = "ticket_resolved"
    TICKET_ESCALATED = "ticket_escalated"
    SLA_WARNING = "sla_warning"
    SLA_BREACHED = "sla_breached"
    SYSTEM = "system"


class AuditAction(str, Enum):
    """action_type values written to audit_logs"""
    TICKET_CREATED = "ticket_created"
    TICKET_UPDATED = "ticket_updated"
    TICKET_ASSIGNED = "ticket_assigned"
    STATUS_CHANGED = "status_changed"
    MESSAGE_SENT = "message_sent"
    INTERNAL_NOTE_ADDED = "internal_note_added"


# ============================================================================
# Identity
# ============================================================================

class Actor(BaseModel):
    """The authenticated identity performing an operation."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Auth user id")
    display_name: str = ""
    email: str = ""
    role: AppRole = AppRole.USER

    @property
    def is_staff(self) -> bool:
        return self.role in (AppRole.AGENT, AppRole.ADMIN)


# ============================================================================
# Embedded projections
# ============================================================================

class PersonRef(BaseModel):
    """Joined profile projection (creator, agent, sender)."""
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[AppRole] = None


class NamedRef(BaseModel):
    """Joined team or category projection."""
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None


# ============================================================================
# Database Models (matching Supabase tables)
# ============================================================================

class Ticket(BaseModel):
    """
    Ticket row from the `tickets` table, optionally carrying joined names.

    Attributes:
        id: Server-assigned identifier
        ticket_number: Sequential number assigned by the store
        title: Short summary
        description: Full problem statement
        priority: low | medium | high | urgent
        status: Current lifecycle status
        created_by: Creator's user id
        assigned_agent: Agent user id (nullable)
        assigned_team: Team id (nullable)
        category_id: Category id (nullable)
        sla_response_due: Response deadline (stored only)
        sla_resolve_due: Resolution deadline (stored only)
        sla_breached: Breach flag (stored only)
        merged_into_ticket_id: Target ticket when marked duplicate
    """
    model_config = ConfigDict(from_attributes=True, extra="ignore")

    id: str
    ticket_number: Optional[int] = None
    title: str
    description: str
    priority: Priority = Priority.MEDIUM
    status: TicketStatus = TicketStatus.OPEN
    created_by: Optional[str] = None
    assigned_agent: Optional[str] = None
    assigned_team: Optional[str] = None
    category_id: Optional[str] = None
    sla_response_due: Optional[datetime] = None
    sla_resolve_due: Optional[datetime] = None
    sla_breached: Optional[bool] = False
    merged_into_ticket_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    creator: Optional[PersonRef] = None
    agent: Optional[PersonRef] = None
    team: Optional[NamedRef] = None
    category: Optional[NamedRef] = None

    @property
    def display_number(self) -> str:
        """Human-facing reference, e.g. ``SS-1042``"""
        return f"SS-{self.ticket_number}" if self.ticket_number is not None else "SS-?"


class TicketCreate(BaseModel):
    """Schema for submitting a new ticket. ``created_by`` is always overwritten."""
    model_config = ConfigDict(extra="ignore")

    title: str = ""
    description: str = ""
    priority: Optional[Priority] = None
    category_id: Optional[str] = None
    assigned_team: Optional[str] = None
    created_by: Optional[str] = None


class TicketUpdate(BaseModel):
    """Patchable ticket fields. Unset fields are not sent."""
    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[Priority] = None
    status: Optional[TicketStatus] = None
    category_id: Optional[str] = None
    assigned_agent: Optional[str] = None
    assigned_team: Optional[str] = None
    sla_response_due: Optional[datetime] = None
    sla_resolve_due: Optional[datetime] = None
    sla_breached: Optional[bool] = None
    merged_into_ticket_id: Optional[str] = None


class TicketFilters(BaseModel):
    """
    Conjunction of optional ticket predicates.

    ``status`` and ``priority`` accept a single value or a list; a list
    means set membership.
    """
    status: Optional[Union[TicketStatus, List[TicketStatus]]] = None
    priority: Optional[Union[Priority, List[Priority]]] = None
    assigned_agent: Optional[str] = None
    assigned_team: Optional[str] = None
    category_id: Optional[str] = None
    search: Optional[str] = None

    @field_validator('search')
    @classmethod
    def blank_search_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v


class TicketMessage(BaseModel):
    """Row from `ticket_messages` with the sender projection."""
    model_config = ConfigDict(from_attributes=True, extra="ignore")

    id: str
    ticket_id: str
    message: str
    is_internal: Optional[bool] = False
    sender_id: Optional[str] = None
    created_at: Optional[datetime] = None
    sender: Optional[PersonRef] = None


class AuditLogCreate(BaseModel):
    """Append-only audit record."""
    actor_id: str
    ticket_id: Optional[str] = None
    action_type: AuditAction
    details: Optional[Dict[str, Any]] = None


class NotificationCreate(BaseModel):
    """Per-recipient notification record."""
    user_id: str
    title: str
    body: str
    type: NotificationType
    ticket_id: Optional[str] = None


class Notification(BaseModel):
    """Row from the `notifications` table."""
    model_config = ConfigDict(from_attributes=True, extra="ignore")

    id: str
    user_id: str
    title: str
    body: str
    type: NotificationType
    ticket_id: Optional[str] = None
    is_read: Optional[bool] = False
    created_at: Optional[datetime] = None


class Profile(BaseModel):
    """Row from `profiles`, as needed for agent pickers."""
    model_config = ConfigDict(from_attributes=True, extra="ignore")

    user_id: str
    name: str = ""
    email: str = ""
    role: Optional[AppRole] = None


class Team(BaseModel):
    model_config = ConfigDict(from_attributes=True, extra="ignore")

    id: str
    name: str
    description: Optional[str] = None


class Category(BaseModel):
    model_config = ConfigDict(from_attributes=True, extra="ignore")

    id: str
    name: str
    description: Optional[str] = None
