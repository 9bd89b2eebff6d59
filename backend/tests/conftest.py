"""
SpecialStandard Backend — Test Configuration (conftest.py)
===========================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Environment variables are set before any application import, so the
       settings object, the engine and the service singletons are built
       with test values. No test needs PostgreSQL, the identity provider,
       S3 or Resend.

Fixture Hierarchy:
    Function-scoped:
    ├── fake_db:      FakeDatabase serving canned rows (honors LIMIT/OFFSET)
    ├── test_client:  HTTPX AsyncClient bound to the app, database overridden
    └── resource_rows / theme_x: the 15-row resource fixture
"""

import os
import re
from datetime import date, datetime, timedelta, timezone
from typing import Any, List, Optional, Sequence
from uuid import UUID, uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient


# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Set BEFORE any specialstandard import
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["AUTH_DISABLED"] = "true"
os.environ["AUTH_COOKIE_SECURE"] = "false"
os.environ["SUPABASE_URL"] = "https://idp.test"
os.environ["SUPABASE_SERVICE_ROLE_KEY"] = "service-key-not-real"
os.environ["S3_BUCKET"] = "test-bucket"
os.environ["RESEND_API_KEY"] = "re_test_not_real"
os.environ["LOG_LEVEL"] = "WARNING"

TEST_USER_ID = UUID("00000000-0000-0000-0000-000000000001")


# ══════════════════════════════════════════════════════════════════════════
# Fake Database
# ══════════════════════════════════════════════════════════════════════════

_LIMIT_OFFSET = re.compile(r"LIMIT \$(\d+) OFFSET \$(\d+)")


class FakeDatabase:
    """
    Stands in for `specialstandard.database.Database`.

    `rows` is the table every `fetch` reads from. When the statement ends
    in `LIMIT $n OFFSET $m`, the bound limit/offset are applied to it, the
    way the store would. `row`, `value` and `tag` are what `fetchrow`,
    `fetchval` and `execute` return. Every call is recorded in `calls` as
    `(method, sql, args)`.
    """

    def __init__(self, rows: Optional[Sequence[Sequence[Any]]] = None):
        self.rows: List[Sequence[Any]] = list(rows or [])
        self.row: Optional[Sequence[Any]] = None
        self.value: Any = None
        self.tag: str = "DELETE 1"
        self.error: Optional[Exception] = None
        self.calls: List[tuple] = []

    def _record(self, method: str, sql: str, args: tuple) -> None:
        self.calls.append((method, sql, list(args)))
        if self.error is not None:
            raise self.error

    @property
    def last_sql(self) -> str:
        return self.calls[-1][1]

    @property
    def last_args(self) -> list:
        return self.calls[-1][2]

    async def fetch(self, query: str, *args: Any) -> List[Sequence[Any]]:
        self._record("fetch", query, args)
        match = _LIMIT_OFFSET.search(query)
        if match is None:
            return list(self.rows)
        limit = args[int(match.group(1)) - 1]
        offset = args[int(match.group(2)) - 1]
        return list(self.rows[offset:offset + limit])

    async def fetchrow(self, query: str, *args: Any) -> Optional[Sequence[Any]]:
        self._record("fetchrow", query, args)
        return self.row

    async def fetchval(self, query: str, *args: Any) -> Any:
        self._record("fetchval", query, args)
        return self.value

    async def execute(self, query: str, *args: Any) -> str:
        self._record("execute", query, args)
        return self.tag


# ══════════════════════════════════════════════════════════════════════════
# Row Factories
# ══════════════════════════════════════════════════════════════════════════

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def theme_info_columns(name: str = "Ocean Animals", month: int = 3, year: int = 2025) -> tuple:
    return (name, month, year, NOW, NOW)


def resource_row(
    theme_id: UUID,
    index: int = 0,
    title: Optional[str] = None,
    with_theme: bool = True,
) -> tuple:
    """A resource row in SELECT order, optionally followed by the joined theme columns."""
    row = (
        uuid4(),
        theme_id,
        index % 13,
        date(2025, 3, 1),
        "worksheet",
        title or f"Worksheet {index:02d}",
        "articulation",
        f"resources/worksheet-{index:02d}.pdf",
        NOW - timedelta(minutes=index),
        NOW - timedelta(minutes=index),
    )
    return row + theme_info_columns() if with_theme else row


def student_row(
    therapist_id: UUID = TEST_USER_ID,
    first_name: str = "Ada",
    grade: Optional[int] = 3,
) -> tuple:
    return (
        uuid4(), first_name, "Lovelace", date(2016, 5, 4), therapist_id,
        7, "Maple Elementary", 2, grade, "IEP goals", NOW, NOW,
    )


def session_row(therapist_id: UUID = TEST_USER_ID, parent_id: Optional[UUID] = None) -> tuple:
    return (
        uuid4(), "Articulation group", NOW, NOW + timedelta(hours=1), therapist_id,
        None, "Room 4", parent_id, NOW, NOW,
    )


# ══════════════════════════════════════════════════════════════════════════
# Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def fake_db():
    return FakeDatabase()


@pytest.fixture
def theme_x():
    return uuid4()


@pytest.fixture
def resource_rows(theme_x):
    """15 resource+theme rows for theme X, already in `created_at DESC` order."""
    return [resource_row(theme_x, i) for i in range(15)]


@pytest_asyncio.fixture
async def test_client(fake_db):
    """
    HTTPX AsyncClient talking to the app through ASGITransport.

    The `get_database` dependency is overridden with `fake_db`; auth is
    disabled (AUTH_DISABLED=true), so every request is TEST_USER_ID.
    """
    from specialstandard.database import get_database
    from specialstandard.main import app

    app.dependency_overrides[get_database] = lambda: fake_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
