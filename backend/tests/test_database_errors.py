"""
SpecialStandard Backend — Store Error Translation Tests
========================================================

What we test:
    ✅ SQLSTATE → taxonomy (constraint kinds, invalid input, transport)
    ✅ Codes found through SQLAlchemy's `.orig` wrapper
    ✅ Connection-level failures without a SQLSTATE → TransportError
    ✅ Repositories translate once and let taxonomy errors pass through
    ✅ Values the driver cannot encode (data exceptions) → ValidationError
    ✅ Command tags → affected row counts
    ✅ Database wrapper: statement timeout forwarded, connection released on every exit
"""

import asyncio
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock

import asyncpg
import pytest
from sqlalchemy import exc as sa_exc

from specialstandard.database import Database, rows_affected, translate_database_error
from specialstandard.exceptions import (
    ConstraintViolationError,
    InternalError,
    NotFoundError,
    TransportError,
    ValidationError,
)
from specialstandard.repositories.base import Repository


class DriverError(Exception):
    """Shaped like an asyncpg PostgresError: carries `sqlstate` and `constraint_name`."""

    def __init__(self, sqlstate, constraint_name=None):
        super().__init__(f"driver error {sqlstate}")
        self.sqlstate = sqlstate
        self.constraint_name = constraint_name


class TestTranslateDatabaseError:

    @pytest.mark.parametrize(
        "state,kind,status",
        [
            ("23503", ConstraintViolationError.FOREIGN_KEY, 400),
            ("23505", ConstraintViolationError.UNIQUE, 409),
            ("23514", ConstraintViolationError.CHECK, 400),
            ("23502", ConstraintViolationError.NOT_NULL, 400),
        ],
    )
    def test_constraint_violations(self, state, kind, status):
        error = translate_database_error(DriverError(state, "some_constraint"))
        assert isinstance(error, ConstraintViolationError)
        assert error.kind == kind
        assert error.status_code == status
        assert error.constraint == "some_constraint"

    def test_unique_violation_reads_as_conflict(self):
        error = translate_database_error(DriverError("23505"))
        assert error.error_code == "conflict"

    def test_invalid_text_representation_is_validation(self):
        assert isinstance(translate_database_error(DriverError("22P02")), ValidationError)

    @pytest.mark.parametrize("state", ["08006", "57014", "53300"])
    def test_connection_and_cancellation_states_are_transport(self, state):
        assert isinstance(translate_database_error(DriverError(state)), TransportError)

    def test_unknown_state_is_internal(self):
        error = translate_database_error(DriverError("42P01"))
        assert isinstance(error, InternalError)
        assert error.context["sqlstate"] == "42P01"

    def test_code_is_found_through_sqlalchemy_wrapper(self):
        wrapped = sa_exc.IntegrityError("INSERT ...", {}, DriverError("23505"))
        assert isinstance(translate_database_error(wrapped), ConstraintViolationError)

    @pytest.mark.parametrize("exc", [ConnectionRefusedError(), asyncio.TimeoutError()])
    def test_transport_failures_without_state(self, exc):
        assert isinstance(translate_database_error(exc), TransportError)

    def test_out_of_range_argument_is_validation(self):
        error = translate_database_error(
            asyncpg.exceptions.DataError(
                "invalid input for query argument $2: 100000000000000000000 (value out of int64 range)"
            )
        )
        assert isinstance(error, ValidationError)
        assert error.status_code == 400

    def test_numeric_out_of_range_is_validation(self):
        assert isinstance(translate_database_error(DriverError("22003")), ValidationError)

    def test_unencodable_argument_through_sqlalchemy_wrapper(self):
        wrapped = sa_exc.DBAPIError("SELECT ...", {}, ValueError("value out of int64 range"))
        error = translate_database_error(wrapped)
        assert isinstance(error, ValidationError)
        assert error.context["error_type"] == "ValueError"

    def test_interface_error_is_still_transport(self):
        error = translate_database_error(asyncpg.exceptions.InterfaceError("connection is closed"))
        assert isinstance(error, TransportError)

    def test_message_text_is_not_inspected(self):
        error = translate_database_error(RuntimeError("duplicate key value violates unique constraint"))
        assert isinstance(error, InternalError)

    def test_taxonomy_errors_pass_through(self):
        original = NotFoundError(resource="theme")
        assert translate_database_error(original) is original


class TestRowsAffected:

    @pytest.mark.parametrize(
        "tag,count",
        [("DELETE 3", 3), ("UPDATE 0", 0), ("INSERT 0 5", 5), ("", 0), (None, 0)],
    )
    def test_parses_command_tag(self, tag, count):
        assert rows_affected(tag) == count


class TestRepositoryTranslation:

    def setup_method(self):
        self.repository = Repository()
        self.repository.resource_name = "widget"

    @pytest.mark.asyncio
    async def test_driver_error_is_translated_once(self, fake_db):
        fake_db.error = DriverError("23503", "fk_widget_theme")
        with pytest.raises(ConstraintViolationError) as exc_info:
            await self.repository._fetch(fake_db, "INSERT ...")
        assert isinstance(exc_info.value.__cause__, DriverError)

    @pytest.mark.asyncio
    async def test_taxonomy_error_is_not_rewrapped(self, fake_db):
        fake_db.error = TransportError()
        with pytest.raises(TransportError) as exc_info:
            await self.repository._fetchrow(fake_db, "SELECT 1")
        assert exc_info.value.__cause__ is None

    @pytest.mark.asyncio
    async def test_delete_one_of_zero_rows_is_not_found(self, fake_db):
        fake_db.tag = "DELETE 0"
        with pytest.raises(NotFoundError) as exc_info:
            await self.repository._delete_one(fake_db, "DELETE FROM widget WHERE id = $1", 42)
        assert exc_info.value.context == {"resource": "widget", "resource_id": "42"}

    @pytest.mark.asyncio
    async def test_cancellation_propagates_untouched(self, fake_db):
        fake_db.error = asyncio.CancelledError()
        with pytest.raises(asyncio.CancelledError):
            await self.repository._fetch(fake_db, "SELECT pg_sleep(60)")


class FakeEngine:
    """Hands out one driver connection and counts checkouts and releases."""

    def __init__(self, driver):
        self.driver = driver
        self.checked_out = 0
        self.released = 0

    @asynccontextmanager
    async def connect(self):
        self.checked_out += 1
        raw = MagicMock(driver_connection=self.driver)
        conn = MagicMock(get_raw_connection=AsyncMock(return_value=raw))
        try:
            yield conn
        finally:
            self.released += 1


class TestDatabaseWrapper:

    def setup_method(self):
        self.driver = AsyncMock()
        self.engine = FakeEngine(self.driver)
        self.db = Database(self.engine, statement_timeout=2.5)

    @pytest.mark.asyncio
    async def test_fetch_forwards_timeout(self):
        self.driver.fetch.return_value = [("a",), ("b",)]
        rows = await self.db.fetch("SELECT name FROM theme WHERE year = $1", 2025)
        assert rows == [("a",), ("b",)]
        self.driver.fetch.assert_awaited_once_with(
            "SELECT name FROM theme WHERE year = $1", 2025, timeout=2.5
        )
        assert (self.engine.checked_out, self.engine.released) == (1, 1)

    @pytest.mark.asyncio
    async def test_each_method_forwards_timeout(self):
        self.driver.execute.return_value = "DELETE 1"
        assert await self.db.execute("DELETE FROM theme WHERE id = $1", 7) == "DELETE 1"
        await self.db.fetchrow("SELECT 1")
        await self.db.fetchval("SELECT 1")
        self.driver.execute.assert_awaited_once_with("DELETE FROM theme WHERE id = $1", 7, timeout=2.5)
        self.driver.fetchrow.assert_awaited_once_with("SELECT 1", timeout=2.5)
        self.driver.fetchval.assert_awaited_once_with("SELECT 1", timeout=2.5)
        assert (self.engine.checked_out, self.engine.released) == (3, 3)

    @pytest.mark.asyncio
    async def test_connection_released_when_driver_raises(self):
        self.driver.fetch.side_effect = asyncpg.exceptions.QueryCanceledError("canceling statement")
        with pytest.raises(asyncpg.exceptions.QueryCanceledError):
            await self.db.fetch("SELECT pg_sleep(60)")
        assert self.engine.released == 1

    @pytest.mark.asyncio
    async def test_connection_released_on_cancellation(self):
        self.driver.execute.side_effect = asyncio.CancelledError()
        with pytest.raises(asyncio.CancelledError):
            await self.db.execute("UPDATE student SET grade = grade + 1")
        assert self.engine.released == 1
