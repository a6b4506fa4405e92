"""
Ticket lifecycle rules and query helpers
"""
from supportsphere.tickets.state import TicketStateMachine
from supportsphere.tickets.filters import (
    TICKET_SELECT,
    MESSAGE_SELECT,
    apply_filters,
    search_expression,
)

__all__ = [
    "TicketStateMachine",
    "TICKET_SELECT",
    "MESSAGE_SELECT",
    "apply_filters",
    "search_expression",
]
