"""
SpecialStandard Backend — Row Mapper
=====================================

What:  Decodes positional result rows into pydantic records.
How:   A RowMapper lists the record's fields in the exact order the SELECT
       lists its columns. Joined queries attach child mappers that consume
       the columns following the parent's, so a parent and its embedded
       child (e.g. a resource and its theme) come out of one row in one pass.
Who:   Repositories.

Failure policy:
    A column count or type mismatch means the SQL and the record drifted
    apart. That is raised as InternalError; rows are never partially decoded.
"""

import logging
from typing import Any, Generic, Iterable, List, Optional, Sequence, Tuple, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from specialstandard.exceptions import InternalError

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)


class RowMapper(Generic[RecordT]):
    """
    Maps row columns `[0:len(fields)]` onto `model`, then hands the remaining
    columns to each child mapper in turn.

    Example:
        theme = RowMapper(ThemeInfo, ["theme_name", "month", "year", "created_at", "updated_at"])
        resource = RowMapper(ResourceWithTheme, RESOURCE_FIELDS, children=[("theme", theme)])
        resource.scan(row)  # ResourceWithTheme(..., theme=ThemeInfo(...))
    """

    def __init__(
        self,
        model: Type[RecordT],
        fields: Sequence[str],
        children: Sequence[Tuple[str, "RowMapper[Any]"]] = (),
    ):
        self.model = model
        self.fields = tuple(fields)
        self.children = tuple(children)

    @property
    def width(self) -> int:
        """Number of columns this mapper consumes, children included."""
        return len(self.fields) + sum(child.width for _, child in self.children)

    def _values(self, row: Sequence[Any], start: int) -> dict:
        values = {name: row[start + i] for i, name in enumerate(self.fields)}
        position = start + len(self.fields)
        for name, child in self.children:
            values[name] = child._build(row, position)
            position += child.width
        return values

    def _build(self, row: Sequence[Any], start: int) -> RecordT:
        return self.model.model_validate(self._values(row, start))

    def scan(self, row: Sequence[Any]) -> RecordT:
        if len(row) != self.width:
            raise InternalError(
                context={
                    "record": self.model.__name__,
                    "expected_columns": self.width,
                    "actual_columns": len(row),
                }
            )
        try:
            return self._build(row, 0)
        except (PydanticValidationError, IndexError, KeyError, TypeError) as e:
            logger.error("Row decode failed for %s: %s", self.model.__name__, str(e))
            raise InternalError(
                context={"record": self.model.__name__, "error_type": type(e).__name__}
            ) from e


def collect_all(rows: Optional[Iterable[Sequence[Any]]], mapper: RowMapper[RecordT]) -> List[RecordT]:
    """Decode every row. Zero rows (or a `None` cursor) gives `[]`, never `None`."""
    if rows is None:
        return []
    return [mapper.scan(row) for row in rows]


def collect_one(row: Optional[Sequence[Any]], mapper: RowMapper[RecordT]) -> Optional[RecordT]:
    """Decode a single optional row; `None` is left for the caller to translate."""
    if row is None:
        return None
    return mapper.scan(row)
