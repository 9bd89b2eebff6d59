"""
SpecialStandard Backend — Resource Repository Tests
====================================================

What we test:
    ✅ theme_id filter, first page of 10 over 15 matching rows
    ✅ Last page returns the remaining 5 rows at offset 10
    ✅ Full filter declaration order and bound values
    ✅ Get / update / delete NotFound translation
    ✅ Session resource link and unlink
"""

import uuid
from datetime import date

import pytest

from specialstandard.exceptions import NotFoundError, ValidationError
from specialstandard.query import Pagination
from specialstandard.repositories.resource_repository import (
    ORDER_BY,
    resource_repository,
    session_resource_repository,
)
from specialstandard.schemas.resource import ResourceFilters, ResourceUpdate, SessionResourceLink

from conftest import NOW, resource_row


class TestResourceList:

    @pytest.mark.asyncio
    async def test_first_page_of_theme(self, fake_db, resource_rows, theme_x):
        fake_db.rows = resource_rows
        filters = ResourceFilters(theme_id=theme_x, grade_level=None, title=None)

        resources = await resource_repository.list(fake_db, filters, Pagination(page=1, limit=10))

        sql, args = fake_db.last_sql, fake_db.last_args
        assert sql.count("r.theme_id = $1") == 1
        assert "grade_level =" not in sql and "r.title ILIKE" not in sql
        assert f"ORDER BY {ORDER_BY}" in sql
        assert args == [theme_x, 10, 0]
        assert len(resources) == 10
        assert [r.title for r in resources] == [f"Worksheet {i:02d}" for i in range(10)]
        assert all(r.theme_id == theme_x for r in resources)

    @pytest.mark.asyncio
    async def test_last_page_is_short(self, fake_db, resource_rows, theme_x):
        fake_db.rows = resource_rows

        resources = await resource_repository.list(
            fake_db, ResourceFilters(theme_id=theme_x), Pagination(page=2, limit=10)
        )

        assert len(resources) == 5
        assert fake_db.last_args[-1] == 10
        assert resources[0].title == "Worksheet 10"

    @pytest.mark.asyncio
    async def test_no_matches_is_empty_list(self, fake_db):
        assert await resource_repository.list(fake_db, ResourceFilters(), Pagination()) == []

    @pytest.mark.asyncio
    async def test_every_filter_in_declaration_order(self, fake_db):
        theme_id = uuid.uuid4()
        filters = ResourceFilters(
            theme_month=4,
            title="frog",
            theme_id=theme_id,
            grade_level=0,
            type="worksheet",
            category="articulation",
            content="a.pdf",
            date=date(2025, 4, 1),
            theme_name="spring",
            theme_year=2025,
        )

        await resource_repository.list(fake_db, filters, Pagination(page=1, limit=5))

        assert (
            "WHERE r.theme_id = $1 AND r.grade_level = $2 AND r.type = $3 "
            "AND r.title ILIKE $4 AND r.category = $5 AND r.content = $6 "
            "AND r.date = $7 AND t.theme_name ILIKE $8 AND t.month = $9 AND t.year = $10"
        ) in fake_db.last_sql
        assert fake_db.last_args == [
            theme_id, 0, "worksheet", "%frog%", "articulation", "a.pdf",
            date(2025, 4, 1), "%spring%", 4, 2025, 5, 0,
        ]


class TestResourceSingle:

    @pytest.mark.asyncio
    async def test_get_missing_is_not_found(self, fake_db):
        fake_db.row = None
        with pytest.raises(NotFoundError):
            await resource_repository.get(fake_db, uuid.uuid4())

    @pytest.mark.asyncio
    async def test_get_maps_theme(self, fake_db, theme_x):
        fake_db.row = resource_row(theme_x, 2)
        resource = await resource_repository.get(fake_db, uuid.uuid4())
        assert resource.theme.theme_name == "Ocean Animals"
        assert "WHERE r.id = $1" in fake_db.last_sql

    @pytest.mark.asyncio
    async def test_update_only_sets_given_fields(self, fake_db, theme_x):
        resource_id = uuid.uuid4()
        fake_db.row = resource_row(theme_x, 1, title="Renamed", with_theme=False)

        resource = await resource_repository.update(fake_db, resource_id, ResourceUpdate(title="Renamed"))

        assert resource.title == "Renamed"
        assert "SET title = $1, updated_at = NOW()" in fake_db.last_sql
        assert fake_db.last_args == ["Renamed", resource_id]

    @pytest.mark.asyncio
    async def test_empty_update_is_rejected(self, fake_db):
        with pytest.raises(ValidationError):
            await resource_repository.update(fake_db, uuid.uuid4(), ResourceUpdate())
        assert fake_db.calls == []

    @pytest.mark.asyncio
    async def test_delete_missing_is_not_found(self, fake_db):
        fake_db.tag = "DELETE 0"
        with pytest.raises(NotFoundError):
            await resource_repository.delete(fake_db, uuid.uuid4())


class TestSessionResources:

    @pytest.mark.asyncio
    async def test_list_for_session_binds_session_first(self, fake_db, theme_x):
        session_id = uuid.uuid4()
        fake_db.rows = [resource_row(theme_x, i, with_theme=False) for i in range(3)]

        resources = await resource_repository.list_for_session(fake_db, session_id, Pagination())

        assert len(resources) == 3
        assert "WHERE sr.session_id = $1" in fake_db.last_sql
        assert fake_db.last_args == [session_id, 100, 0]

    @pytest.mark.asyncio
    async def test_link(self, fake_db):
        link = SessionResourceLink(session_id=uuid.uuid4(), resource_id=uuid.uuid4())
        fake_db.row = {
            "session_id": link.session_id,
            "resource_id": link.resource_id,
            "created_at": NOW,
            "updated_at": NOW,
        }
        created = await session_resource_repository.create(fake_db, link)
        assert created.resource_id == link.resource_id

    @pytest.mark.asyncio
    async def test_unlink_missing_is_not_found(self, fake_db):
        fake_db.tag = "DELETE 0"
        link = SessionResourceLink(session_id=uuid.uuid4(), resource_id=uuid.uuid4())
        with pytest.raises(NotFoundError):
            await session_resource_repository.delete(fake_db, link)
