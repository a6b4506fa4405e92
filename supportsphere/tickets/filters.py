"""
Query helpers shared by the ticket and conversation repositories.

Select strings embed one-hop projections through the foreign keys of the
`tickets` and `ticket_messages` tables.
"""
from enum import Enum
from typing import Any, Optional

from supportsphere.models.schemas import TicketFilters


TICKET_SELECT = (
    "*, "
    "creator:profiles!tickets_created_by_fkey(name, email), "
    "agent:profiles!tickets_assigned_agent_fkey(name, email), "
    "team:teams!tickets_assigned_team_fkey(name), "
    "category:categories!tickets_category_id_fkey(name)"
)

TICKET_WITH_CREATOR_SELECT = "*, creator:profiles!tickets_created_by_fkey(name, email)"

MESSAGE_SELECT = "*, sender:profiles!ticket_messages_sender_id_fkey(name, email, role)"


def _value(item: Any) -> Any:
    return item.value if isinstance(item, Enum) else item


def _quote(value: str) -> str:
    """Quote a value for use inside a PostgREST ``or`` expression."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def search_expression(term: str) -> str:
    """
    Build the ``or`` expression matching ``term`` in title or description.

    Commas and parentheses in the term are quoted so they cannot split the
    expression.
    """
    pattern = _quote(f"%{term.strip()}%")
    return f"title.ilike.{pattern},description.ilike.{pattern}"


def apply_filters(query, filters: Optional[TicketFilters]):
    """
    Apply ``filters`` to a postgrest select builder and return it.

    Sequence values become ``in`` predicates, single values ``eq``.
    """
    if filters is None:
        return query

    for column in ("status", "priority"):
        selected = getattr(filters, column)
        if selected is None:
            continue
        if isinstance(selected, (list, tuple, set)):
            query = query.in_(column, [_value(item) for item in selected])
        else:
            query = query.eq(column, _value(selected))

    if filters.assigned_agent:
        query = query.eq("assigned_agent", filters.assigned_agent)
    if filters.assigned_team:
        query = query.eq("assigned_team", filters.assigned_team)
    if filters.category_id:
        query = query.eq("category_id", filters.category_id)
    if filters.search:
        query = query.or_(search_expression(filters.search))

    return query
