"""
SpecialStandard Backend — Repository Base
==========================================

What:  Shared plumbing for every repository: run one statement through the
       `Database`, translate driver errors exactly once, and turn "no row"
       results into NotFoundError.
How:   Each `_fetch*` helper wraps the matching `Database` coroutine. Driver
       exceptions become taxonomy members via `translate_database_error`;
       exceptions that are already in the taxonomy pass through unchanged.
       CancelledError is not an Exception subclass and propagates untouched.
"""

import logging
from typing import Any, List, Optional, Sequence

from specialstandard.database import Database, rows_affected, translate_database_error
from specialstandard.exceptions import (
    ConstraintViolationError,
    NotFoundError,
    SpecialStandardError,
    ValidationError,
)

logger = logging.getLogger(__name__)


class Repository:
    """Base class; subclasses set `resource_name` for NotFound messages."""

    resource_name = "record"

    async def _call(self, method, query: str, args: Sequence[Any]):
        try:
            return await method(query, *args)
        except SpecialStandardError:
            raise
        except Exception as e:
            error = translate_database_error(e)
            if isinstance(error, (ConstraintViolationError, ValidationError)):
                logger.warning(
                    "%s statement rejected: %s | Context: %s",
                    self.resource_name, error.message, error.context,
                )
            else:
                logger.error(
                    "%s statement failed: %s | Context: %s",
                    self.resource_name, str(e), error.context,
                    exc_info=True,
                )
            raise error from e

    async def _fetch(self, db: Database, query: str, args: Sequence[Any] = ()) -> List[Any]:
        rows = await self._call(db.fetch, query, args)
        return list(rows) if rows is not None else []

    async def _fetchrow(self, db: Database, query: str, args: Sequence[Any] = ()) -> Optional[Any]:
        return await self._call(db.fetchrow, query, args)

    async def _fetchval(self, db: Database, query: str, args: Sequence[Any] = ()) -> Any:
        return await self._call(db.fetchval, query, args)

    async def _execute(self, db: Database, query: str, args: Sequence[Any] = ()) -> int:
        """Run a statement and return the number of rows it touched."""
        tag = await self._call(db.execute, query, args)
        return rows_affected(tag)

    async def _delete_one(self, db: Database, query: str, record_id: Any) -> None:
        if await self._execute(db, query, [record_id]) == 0:
            raise NotFoundError(resource=self.resource_name, resource_id=str(record_id))

    def _not_found(self, record_id: Any) -> NotFoundError:
        return NotFoundError(resource=self.resource_name, resource_id=str(record_id))
