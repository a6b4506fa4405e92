from __future__ import annotations

from supportsphere.exceptions import InvalidTransition
from supportsphere.models.schemas import TicketStatus


_ACTIVE = {
    TicketStatus.OPEN,
    TicketStatus.ASSIGNED,
    TicketStatus.IN_PROGRESS,
    TicketStatus.WAITING_ON_USER,
    TicketStatus.ON_HOLD,
    TicketStatus.ESCALATED,
}

_WORKING_EXITS = _ACTIVE | {
    TicketStatus.RESOLVED,
    TicketStatus.CLOSED,
    TicketStatus.CANCELLED,
    TicketStatus.DUPLICATE,
}


class TicketStateMachine:
    """Validate ticket lifecycle transitions."""

    _TRANSITIONS: dict[TicketStatus, set[TicketStatus]] = {
        TicketStatus.OPEN: _WORKING_EXITS,
        TicketStatus.ASSIGNED: _WORKING_EXITS,
        TicketStatus.IN_PROGRESS: _WORKING_EXITS,
        TicketStatus.WAITING_ON_USER: _WORKING_EXITS,
        TicketStatus.ON_HOLD: _WORKING_EXITS,
        TicketStatus.ESCALATED: _WORKING_EXITS,
        TicketStatus.REOPENED: _WORKING_EXITS,
        TicketStatus.RESOLVED: {TicketStatus.CLOSED, TicketStatus.REOPENED},
        TicketStatus.CLOSED: {TicketStatus.REOPENED},
        TicketStatus.CANCELLED: {TicketStatus.REOPENED},
        # Leaving duplicate goes through unmark_duplicate only.
        TicketStatus.DUPLICATE: set(),
    }

    @classmethod
    def initial_state(cls) -> TicketStatus:
        return TicketStatus.OPEN

    @classmethod
    def allowed_targets(cls, current: TicketStatus) -> set[TicketStatus]:
        return set(cls._TRANSITIONS.get(TicketStatus(current), set()))

    @classmethod
    def can_transition(cls, current: TicketStatus, new: TicketStatus) -> bool:
        current, new = TicketStatus(current), TicketStatus(new)
        if current == new:
            return True
        return new in cls._TRANSITIONS.get(current, set())

    @classmethod
    def assert_transition(cls, current: TicketStatus, new: TicketStatus) -> None:
        if not cls.can_transition(current, new):
            raise InvalidTransition(TicketStatus(current).value, TicketStatus(new).value)

    @staticmethod
    def status_for_assignment(agent_id: str | None) -> TicketStatus:
        """Status derived from setting or clearing the assigned agent."""
        return TicketStatus.ASSIGNED if agent_id else TicketStatus.OPEN
