"""
pytest configuration and shared fixtures

Two kinds of Supabase doubles:
- ``mock_supabase``: chainable MagicMock for asserting call shapes
- ``fake_supabase``: small in-memory store implementing the query builder
  subset the repositories use, for behavioral tests
"""
import copy
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from supportsphere.auth.session import Session
from supportsphere.models.schemas import Actor, AppRole


BASE_TIME = datetime(2025, 11, 5, 9, 0, 0, tzinfo=timezone.utc)


def _split_or(expression: str):
    """Split a PostgREST or-expression on commas outside double quotes."""
    parts, current, quoted, escaped = [], "", False, False
    for char in expression:
        if escaped:
            current += char
            escaped = False
        elif char == "\\":
            current += char
            escaped = True
        elif char == '"':
            current += char
            quoted = not quoted
        elif char == "," and not quoted:
            parts.append(current)
            current = ""
        else:
            current += char
    parts.append(current)
    return parts


def _unquote(value: str) -> str:
    if value.startswith('"') and value.endswith('"'):
        value = value[1:-1]
        out, escaped = "", False
        for char in value:
            if escaped:
                out += char
                escaped = False
            elif char == "\\":
                escaped = True
            else:
                out += char
        return out
    return value


def _ilike(pattern: str):
    needle = pattern.strip("%").lower()
    return lambda value: value is not None and needle in str(value).lower()


class FakeResponse:
    def __init__(self, data, count=None):
        self.data = data
        self.count = count


class FakeQuery:
    """Records a builder chain and evaluates it against FakeSupabase.tables."""

    def __init__(self, store, table):
        self.store = store
        self.table = table
        self.op = "select"
        self.payload = None
        self.predicates = []
        self.order_by = None
        self.limit_n = None
        self.count_mode = None

    def select(self, columns="*", count=None):
        self.count_mode = count
        return self

    def insert(self, payload):
        self.op = "insert"
        self.payload = payload
        return self

    def update(self, patch):
        self.op = "update"
        self.payload = patch
        return self

    def eq(self, column, value):
        self.predicates.append(lambda row: row.get(column) == value)
        return self

    def in_(self, column, values):
        values = list(values)
        self.predicates.append(lambda row: row.get(column) in values)
        return self

    def or_(self, expression):
        checks = []
        for part in _split_or(expression):
            column, operator, value = part.split(".", 2)
            assert operator == "ilike"
            checks.append((column, _ilike(_unquote(value))))
        self.predicates.append(
            lambda row: any(match(row.get(column)) for column, match in checks)
        )
        return self

    def order(self, column, desc=False):
        self.order_by = (column, desc)
        return self

    def limit(self, n):
        self.limit_n = n
        return self

    def execute(self):
        self.store.calls.append((self.table, self.op, copy.deepcopy(self.payload)))
        if (self.table, self.op) in self.store.failures:
            raise Exception(self.store.failures[(self.table, self.op)])

        rows = self.store.tables.setdefault(self.table, [])
        if self.op == "insert":
            row = self.store.new_row(self.table, self.payload)
            rows.append(row)
            return FakeResponse([copy.deepcopy(row)])

        matched = [row for row in rows if all(p(row) for p in self.predicates)]
        if self.op == "update":
            for row in matched:
                row.update(copy.deepcopy(self.payload))
            return FakeResponse([copy.deepcopy(row) for row in matched])

        if self.order_by:
            column, desc = self.order_by
            matched = sorted(matched, key=lambda row: row.get(column) or "", reverse=desc)
        count = len(matched) if self.count_mode else None
        if self.limit_n is not None:
            matched = matched[:self.limit_n]
        return FakeResponse([copy.deepcopy(row) for row in matched], count=count)


class FakeSupabase:
    """In-memory stand-in for the supabase ``Client`` table API."""

    def __init__(self):
        self.tables = {}
        self.calls = []
        self.failures = {}
        self._seq = 0

    def table(self, name):
        return FakeQuery(self, name)

    def rows(self, name):
        return self.tables.get(name, [])

    def fail(self, table, op, message="gateway unavailable"):
        self.failures[(table, op)] = message

    def new_row(self, table, payload):
        self._seq += 1
        row = copy.deepcopy(payload)
        row.setdefault("id", f"{table}-{self._seq}")
        row.setdefault("created_at", (BASE_TIME + timedelta(seconds=self._seq)).isoformat())
        if table == "tickets":
            row.setdefault("ticket_number", 1000 + self._seq)
            row.setdefault("status", "open")
            row.setdefault("priority", "medium")
            for key in ("assigned_agent", "assigned_team", "category_id", "merged_into_ticket_id"):
                row.setdefault(key, None)
        if table == "notifications":
            row.setdefault("is_read", False)
        return row

    def seed_ticket(self, **fields):
        """Insert a ticket row directly, bypassing the repository."""
        payload = {
            "title": "Seeded",
            "description": "Seeded ticket",
            "created_by": "user-1",
        }
        payload.update(fields)
        row = self.new_row("tickets", payload)
        self.tables.setdefault("tickets", []).append(row)
        return row


@pytest.fixture
def mock_supabase():
    """Mocked Supabase client with chainable builder methods"""
    client = MagicMock()
    client.table.return_value = client
    client.select.return_value = client
    client.insert.return_value = client
    client.update.return_value = client
    client.eq.return_value = client
    client.in_.return_value = client
    client.or_.return_value = client
    client.order.return_value = client
    client.limit.return_value = client
    client.execute.return_value = MagicMock(data=[], count=0)
    return client


@pytest.fixture
def fake_supabase():
    return FakeSupabase()


@pytest.fixture
def user_actor():
    return Actor(id="user-1", display_name="Uma User", email="uma@example.com", role=AppRole.USER)


@pytest.fixture
def agent_actor():
    return Actor(id="agent-1", display_name="Ada Agent", email="ada@example.com", role=AppRole.AGENT)


@pytest.fixture
def user_session(user_actor):
    return Session(user_actor)


@pytest.fixture
def agent_session(agent_actor):
    return Session(agent_actor)


@pytest.fixture
def anonymous_session():
    return Session.anonymous()
