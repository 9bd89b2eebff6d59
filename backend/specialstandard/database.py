"""
SpecialStandard Backend — Database Access
==========================================

What:  Async engine and connection pool, the `Database` wrapper that runs
       positional (`$1`, `$2`, ...) SQL, and the translation of driver errors
       into the application's exception taxonomy.
How:   SQLAlchemy's async engine owns the asyncpg connection pool (and the
       declarative metadata Alembic migrates). Each `Database` call checks a
       connection out of that pool, runs one statement on the underlying
       asyncpg connection and returns it to the pool on every exit path.
Who:   Repositories (through `get_database`), the health check and Alembic.
When:  Engine is created at import; connections are checked out per statement.

Statement model:
    Every call is a single auto-committed statement. Multi-row writes are
    expressed as one statement (CTEs, unnest) instead of client transactions.

Cancellation:
    Each statement carries `db_statement_timeout`; on expiry asyncpg cancels
    it server-side and raises asyncio.TimeoutError. A cancelled request task
    raises CancelledError through the `async with`, which still releases the
    connection.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Iterator, List, Optional

import asyncpg
from sqlalchemy import exc as sa_exc
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from specialstandard.config import settings
from specialstandard.exceptions import (
    ConstraintViolationError,
    InternalError,
    SpecialStandardError,
    TransportError,
    ValidationError,
)

logger = logging.getLogger(__name__)


# ── Engine Configuration ──────────────────────────────────────────────────
engine = create_async_engine(
    settings.database_url,
    pool_size=settings.db_pool_size,
    max_overflow=settings.db_max_overflow,
    pool_pre_ping=settings.db_pool_pre_ping,
    pool_recycle=3600,
    echo=settings.log_level == "DEBUG",
)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """Declarative base for the table definitions Alembic migrates."""
    pass


# ── Raw Statement Runner ──────────────────────────────────────────────────
class Database:
    """
    Runs positional-parameter SQL against the pooled asyncpg connections.

    Methods mirror the asyncpg connection API (`fetch`, `fetchrow`,
    `fetchval`, `execute`) so repositories read like plain driver code, and
    so tests can substitute a fake with the same four coroutines.
    """

    def __init__(self, engine: AsyncEngine, statement_timeout: Optional[float] = None):
        self._engine = engine
        self._timeout = statement_timeout

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[asyncpg.Connection]:
        """Check out a pooled connection and yield the asyncpg driver connection."""
        async with self._engine.connect() as conn:
            raw = await conn.get_raw_connection()
            yield raw.driver_connection

    async def fetch(self, query: str, *args: Any) -> List[asyncpg.Record]:
        async with self.connection() as conn:
            return await conn.fetch(query, *args, timeout=self._timeout)

    async def fetchrow(self, query: str, *args: Any) -> Optional[asyncpg.Record]:
        async with self.connection() as conn:
            return await conn.fetchrow(query, *args, timeout=self._timeout)

    async def fetchval(self, query: str, *args: Any) -> Any:
        async with self.connection() as conn:
            return await conn.fetchval(query, *args, timeout=self._timeout)

    async def execute(self, query: str, *args: Any) -> str:
        """Run a statement and return its command tag, e.g. ``"DELETE 1"``."""
        async with self.connection() as conn:
            return await conn.execute(query, *args, timeout=self._timeout)


database = Database(engine, statement_timeout=settings.db_statement_timeout)


def get_database() -> Database:
    """FastAPI dependency returning the process-wide `Database`."""
    return database


def rows_affected(command_tag: str) -> int:
    """
    Parse the row count from a command tag.

    "DELETE 3" → 3, "UPDATE 0" → 0, "INSERT 0 5" → 5.
    """
    try:
        return int(command_tag.rsplit(" ", 1)[-1])
    except (AttributeError, ValueError):
        return 0


# ── Error Classification ──────────────────────────────────────────────────
# SQLSTATE codes, see https://www.postgresql.org/docs/current/errcodes-appendix.html
_CONSTRAINT_KINDS = {
    "23503": ConstraintViolationError.FOREIGN_KEY,
    "23505": ConstraintViolationError.UNIQUE,
    "23514": ConstraintViolationError.CHECK,
    "23502": ConstraintViolationError.NOT_NULL,
}
# class 22 is "data exception": the request carried a value Postgres cannot use
_INVALID_INPUT_CLASS = "22"
_TRANSPORT_STATES = {"57014", "57P01", "57P02", "57P03", "53300"}

_TRANSPORT_TYPES = (
    OSError,
    asyncio.TimeoutError,
    asyncpg.exceptions.InterfaceError,
    sa_exc.TimeoutError,
)


def _error_chain(exc: BaseException) -> Iterator[BaseException]:
    """Yield `exc` and the errors it wraps (SQLAlchemy `.orig`, `__cause__`)."""
    seen = set()
    current: Optional[BaseException] = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        wrapped = getattr(current, "orig", None)
        current = wrapped if isinstance(wrapped, BaseException) else current.__cause__


def translate_database_error(exc: Exception) -> SpecialStandardError:
    """
    Classify a driver exception into the application taxonomy.

    Classification reads the structured SQLSTATE code (asyncpg exposes it
    as `.sqlstate`; SQLAlchemy wraps the driver error in `.orig`), then
    falls back to the exception type: argument encoding failures (driver
    `ValueError`s) are invalid input, connection-level failures are
    transport errors.
    Message text is never inspected.
    """
    if isinstance(exc, SpecialStandardError):
        return exc

    for err in _error_chain(exc):
        state = getattr(err, "sqlstate", None)
        if not isinstance(state, str):
            continue
        if state in _CONSTRAINT_KINDS:
            constraint = getattr(err, "constraint_name", None)
            return ConstraintViolationError(
                kind=_CONSTRAINT_KINDS[state],
                constraint=constraint if isinstance(constraint, str) else None,
                context={"sqlstate": state},
            )
        if state.startswith(_INVALID_INPUT_CLASS):
            return ValidationError(
                message="A value in the request has an invalid format",
                context={"sqlstate": state},
            )
        if state.startswith("08") or state in _TRANSPORT_STATES:
            return TransportError(context={"sqlstate": state})
        return InternalError(context={"sqlstate": state, "error_type": type(err).__name__})

    # client-side argument encoding failures (asyncpg DataError is also an InterfaceError)
    for err in _error_chain(exc):
        if isinstance(err, ValueError):
            return ValidationError(
                message="A value in the request cannot be sent to the database",
                context={"error_type": type(err).__name__},
            )

    for err in _error_chain(exc):
        if isinstance(err, _TRANSPORT_TYPES):
            return TransportError(context={"error_type": type(err).__name__})

    return InternalError(context={"error_type": type(exc).__name__})


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def ping_database() -> bool:
    """Run `SELECT 1` through the engine; used by the health check."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except (sa_exc.SQLAlchemyError, OSError, asyncio.TimeoutError) as e:
        logger.warning("Database ping failed: %s", str(e))
        return False


async def dispose_engine() -> None:
    """Close every pooled connection; called on application shutdown."""
    await engine.dispose()
