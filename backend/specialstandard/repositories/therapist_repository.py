"""
SpecialStandard Backend — Therapist Repository
===============================================

Therapist rows are keyed by the identity-provider user id. The detail view
resolves the district name and the school names in the same statement.
"""

import uuid
from typing import List, Optional

from specialstandard.database import Database
from specialstandard.query import (
    Pagination,
    RowMapper,
    build_select,
    build_update,
    collect_all,
    collect_one,
)
from specialstandard.repositories.base import Repository
from specialstandard.schemas.therapist import (
    Therapist,
    TherapistCreate,
    TherapistDetail,
    TherapistUpdate,
)

THERAPIST_FIELDS = [
    "id", "first_name", "last_name", "email", "active",
    "schools", "district_id", "created_at", "updated_at",
]
_COLUMNS = ", ".join(THERAPIST_FIELDS)
_DETAIL = (
    "SELECT " + ", ".join(f"t.{field}" for field in THERAPIST_FIELDS) + ",\n"
    "       d.name,\n"
    "       ARRAY(SELECT s.name FROM school s WHERE s.id = ANY(t.schools) ORDER BY s.name)\n"
    "FROM therapist t\n"
    "LEFT JOIN district d ON t.district_id = d.id\n"
    "WHERE t.id = $1"
)
ORDER_BY = "first_name ASC, last_name ASC, id ASC"

therapist_mapper = RowMapper(Therapist, THERAPIST_FIELDS)
therapist_detail_mapper = RowMapper(
    TherapistDetail, THERAPIST_FIELDS + ["district_name", "school_names"]
)


class TherapistRepository(Repository):
    resource_name = "therapist"

    async def list(self, db: Database, pagination: Pagination) -> List[Therapist]:
        query = build_select(f"SELECT {_COLUMNS}\nFROM therapist", None, ORDER_BY, pagination)
        return collect_all(await self._fetch(db, query.sql, query.args), therapist_mapper)

    async def get(self, db: Database, therapist_id: uuid.UUID) -> TherapistDetail:
        detail = collect_one(await self._fetchrow(db, _DETAIL, [therapist_id]), therapist_detail_mapper)
        if detail is None:
            raise self._not_found(therapist_id)
        return detail

    async def find_by_email(self, db: Database, email: str) -> Optional[Therapist]:
        row = await self._fetchrow(
            db, f"SELECT {_COLUMNS} FROM therapist WHERE lower(email) = lower($1)", [email]
        )
        return collect_one(row, therapist_mapper)

    async def create(self, db: Database, data: TherapistCreate) -> Therapist:
        row = await self._fetchrow(
            db,
            "INSERT INTO therapist (id, first_name, last_name, email, schools, district_id)\n"
            "VALUES ($1, $2, $3, $4, $5, $6)\n"
            f"RETURNING {_COLUMNS}",
            [data.id, data.first_name, data.last_name, data.email, data.schools, data.district_id],
        )
        return therapist_mapper.scan(row)

    async def update(self, db: Database, therapist_id: uuid.UUID, data: TherapistUpdate) -> Therapist:
        query = build_update(
            "therapist", data.model_dump(exclude_none=True), "id", therapist_id, _COLUMNS
        )
        therapist = collect_one(await self._fetchrow(db, query.sql, query.args), therapist_mapper)
        if therapist is None:
            raise self._not_found(therapist_id)
        return therapist

    async def delete(self, db: Database, therapist_id: uuid.UUID) -> None:
        await self._delete_one(db, "DELETE FROM therapist WHERE id = $1", therapist_id)


therapist_repository = TherapistRepository()
