"""
SpecialStandard Backend — Resource Repository
==============================================

What:  CRUD for curriculum resources and their session links.
How:   Lists join `theme` so every row decodes into a ResourceWithTheme
       (resource columns first, then the theme columns) in one pass.

Query plan (list, theme filter only):
    SELECT r.*, t.theme_name, t.month, t.year, t.created_at, t.updated_at
    FROM resource r JOIN theme t ON r.theme_id = t.id
    WHERE r.theme_id = $1
    ORDER BY r.created_at DESC, r.id ASC
    LIMIT $2 OFFSET $3
"""

import uuid
from typing import List

from specialstandard.database import Database
from specialstandard.exceptions import NotFoundError
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
from specialstandard.schemas.resource import (
    Resource,
    ResourceCreate,
    ResourceFilters,
    ResourceUpdate,
    ResourceWithTheme,
    SessionResource,
    SessionResourceLink,
)
from specialstandard.schemas.theme import ThemeInfo

RESOURCE_FIELDS = [
    "id", "theme_id", "grade_level", "date", "type", "title",
    "category", "content", "created_at", "updated_at",
]
THEME_INFO_FIELDS = ["theme_name", "month", "year", "created_at", "updated_at"]

_RESOURCE_COLUMNS = ", ".join(f"r.{field}" for field in RESOURCE_FIELDS)
_RETURNING = ", ".join(RESOURCE_FIELDS)
_WITH_THEME = (
    f"SELECT {_RESOURCE_COLUMNS}, t.theme_name, t.month, t.year, t.created_at, t.updated_at\n"
    "FROM resource r\n"
    "JOIN theme t ON r.theme_id = t.id"
)
ORDER_BY = "r.created_at DESC, r.id ASC"

resource_mapper = RowMapper(Resource, RESOURCE_FIELDS)
resource_with_theme_mapper = RowMapper(
    ResourceWithTheme,
    RESOURCE_FIELDS,
    children=[("theme", RowMapper(ThemeInfo, THEME_INFO_FIELDS))],
)


def resource_filter_set(filters: ResourceFilters) -> FilterSet:
    return FilterSet.of([
        ("r.theme_id", Comparison.EQUALS, filters.theme_id),
        ("r.grade_level", Comparison.EQUALS, filters.grade_level),
        ("r.type", Comparison.EQUALS, filters.type),
        ("r.title", Comparison.SUBSTRING, filters.title),
        ("r.category", Comparison.EQUALS, filters.category),
        ("r.content", Comparison.EQUALS, filters.content),
        ("r.date", Comparison.EQUALS, filters.date),
        ("t.theme_name", Comparison.SUBSTRING, filters.theme_name),
        ("t.month", Comparison.EQUALS, filters.theme_month),
        ("t.year", Comparison.EQUALS, filters.theme_year),
    ])


class ResourceRepository(Repository):
    resource_name = "resource"

    async def list(
        self, db: Database, filters: ResourceFilters, pagination: Pagination
    ) -> List[ResourceWithTheme]:
        query = build_select(_WITH_THEME, resource_filter_set(filters), ORDER_BY, pagination)
        rows = await self._fetch(db, query.sql, query.args)
        return collect_all(rows, resource_with_theme_mapper)

    async def get(self, db: Database, resource_id: uuid.UUID) -> ResourceWithTheme:
        row = await self._fetchrow(db, f"{_WITH_THEME}\nWHERE r.id = $1", [resource_id])
        resource = collect_one(row, resource_with_theme_mapper)
        if resource is None:
            raise self._not_found(resource_id)
        return resource

    async def create(self, db: Database, data: ResourceCreate) -> Resource:
        row = await self._fetchrow(
            db,
            "INSERT INTO resource (theme_id, grade_level, date, type, title, category, content)\n"
            "VALUES ($1, $2, $3, $4, $5, $6, $7)\n"
            f"RETURNING {_RETURNING}",
            [data.theme_id, data.grade_level, data.date, data.type,
             data.title, data.category, data.content],
        )
        return resource_mapper.scan(row)

    async def update(self, db: Database, resource_id: uuid.UUID, data: ResourceUpdate) -> Resource:
        query = build_update(
            "resource", data.model_dump(exclude_none=True), "id", resource_id, _RETURNING
        )
        resource = collect_one(await self._fetchrow(db, query.sql, query.args), resource_mapper)
        if resource is None:
            raise self._not_found(resource_id)
        return resource

    async def delete(self, db: Database, resource_id: uuid.UUID) -> None:
        await self._delete_one(db, "DELETE FROM resource WHERE id = $1", resource_id)

    async def list_for_session(
        self, db: Database, session_id: uuid.UUID, pagination: Pagination
    ) -> List[Resource]:
        query = build_select(
            f"SELECT {_RESOURCE_COLUMNS}\n"
            "FROM session_resource sr\n"
            "JOIN resource r ON sr.resource_id = r.id",
            None,
            ORDER_BY,
            pagination,
            where=["sr.session_id = $1"],
            args=[session_id],
        )
        return collect_all(await self._fetch(db, query.sql, query.args), resource_mapper)


class SessionResourceRepository(Repository):
    resource_name = "session resource"

    async def create(self, db: Database, link: SessionResourceLink) -> SessionResource:
        row = await self._fetchrow(
            db,
            "INSERT INTO session_resource (session_id, resource_id)\n"
            "VALUES ($1, $2)\n"
            "RETURNING session_id, resource_id, created_at, updated_at",
            [link.session_id, link.resource_id],
        )
        return SessionResource.model_validate(dict(row))

    async def delete(self, db: Database, link: SessionResourceLink) -> None:
        deleted = await self._execute(
            db,
            "DELETE FROM session_resource WHERE session_id = $1 AND resource_id = $2",
            [link.session_id, link.resource_id],
        )
        if deleted == 0:
            raise NotFoundError(
                resource=self.resource_name,
                resource_id=f"{link.session_id}/{link.resource_id}",
            )


resource_repository = ResourceRepository()
session_resource_repository = SessionResourceRepository()
