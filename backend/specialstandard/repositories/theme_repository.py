"""
SpecialStandard Backend — Theme Repository
===========================================

Monthly curriculum themes. The column is `theme_name`; records call it `name`.
"""

import uuid
from typing import List

from specialstandard.database import Database
from specialstandard.query import (
    Comparison,
    FilterSet,
    Pagination,
    RowMapper,
    build_select,
    build_update,
    collect_all,
    collect_one,
)
from specialstandard.repositories.base import Repository
from specialstandard.schemas.theme import Theme, ThemeCreate, ThemeFilters, ThemeUpdate

THEME_FIELDS = ["id", "name", "month", "year", "created_at", "updated_at"]
_COLUMNS = "id, theme_name, month, year, created_at, updated_at"
ORDER_BY = "year DESC, month DESC, theme_name ASC, id ASC"

theme_mapper = RowMapper(Theme, THEME_FIELDS)


class ThemeRepository(Repository):
    resource_name = "theme"

    async def list(self, db: Database, filters: ThemeFilters, pagination: Pagination) -> List[Theme]:
        filter_set = FilterSet.of([
            ("month", Comparison.EQUALS, filters.month),
            ("year", Comparison.EQUALS, filters.year),
            ("theme_name", Comparison.SUBSTRING, filters.search),
        ])
        query = build_select(f"SELECT {_COLUMNS}\nFROM theme", filter_set, ORDER_BY, pagination)
        return collect_all(await self._fetch(db, query.sql, query.args), theme_mapper)

    async def get(self, db: Database, theme_id: uuid.UUID) -> Theme:
        row = await self._fetchrow(db, f"SELECT {_COLUMNS} FROM theme WHERE id = $1", [theme_id])
        theme = collect_one(row, theme_mapper)
        if theme is None:
            raise self._not_found(theme_id)
        return theme

    async def create(self, db: Database, data: ThemeCreate) -> Theme:
        row = await self._fetchrow(
            db,
            "INSERT INTO theme (theme_name, month, year)\n"
            "VALUES ($1, $2, $3)\n"
            f"RETURNING {_COLUMNS}",
            [data.name, data.month, data.year],
        )
        return theme_mapper.scan(row)

    async def update(self, db: Database, theme_id: uuid.UUID, data: ThemeUpdate) -> Theme:
        changes = data.model_dump(exclude_none=True)
        if "name" in changes:
            changes["theme_name"] = changes.pop("name")
        query = build_update("theme", changes, "id", theme_id, _COLUMNS)
        theme = collect_one(await self._fetchrow(db, query.sql, query.args), theme_mapper)
        if theme is None:
            raise self._not_found(theme_id)
        return theme

    async def delete(self, db: Database, theme_id: uuid.UUID) -> None:
        await self._delete_one(db, "DELETE FROM theme WHERE id = $1", theme_id)


theme_repository = ThemeRepository()
