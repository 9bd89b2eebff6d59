"""
SpecialStandard Backend — Session Student Repository
=====================================================

Attendance rows link a student to a session. Bulk creation links every
listed session with every listed student in one INSERT; a pair that is
already linked fails the whole statement with a unique violation (409).

A PATCH updates attendance and upserts ratings in one statement and
returns the row's full rating set as it stands afterwards.
"""

from typing import List

from specialstandard.database import Database
from specialstandard.exceptions import NotFoundError
from specialstandard.query import RowMapper, collect_all, collect_one
from specialstandard.repositories.base import Repository
from specialstandard.schemas.session import (
    SessionStudent,
    SessionStudentCreate,
    SessionStudentKey,
    SessionStudentPatch,
    SessionStudentRatings,
)

SESSION_STUDENT_FIELDS = [
    "id", "session_id", "student_id", "present", "notes", "created_at", "updated_at",
]
_COLUMNS = ", ".join(SESSION_STUDENT_FIELDS)

session_student_mapper = RowMapper(SessionStudent, SESSION_STUDENT_FIELDS)
session_student_ratings_mapper = RowMapper(
    SessionStudentRatings, ["session_id", "student_id", "present", "notes", "ratings"]
)

_CREATE = f"""INSERT INTO session_student (session_id, student_id, present, notes)
SELECT s.session_id, st.student_id, $3, $4
FROM unnest($1::uuid[]) AS s(session_id)
CROSS JOIN unnest($2::uuid[]) AS st(student_id)
RETURNING {_COLUMNS}"""

_PATCH = """WITH updated AS (
    UPDATE session_student
    SET present = COALESCE($3, present),
        notes = COALESCE($4, notes),
        updated_at = NOW()
    WHERE session_id = $1 AND student_id = $2
    RETURNING id, session_id, student_id, present, notes
), upserted AS (
    INSERT INTO session_rating (session_student_id, category, level, description)
    SELECT u.id, r.category, r.level, r.description
    FROM updated u
    CROSS JOIN unnest($5::text[], $6::text[], $7::text[]) AS r(category, level, description)
    ON CONFLICT (session_student_id, category) DO UPDATE
    SET level = EXCLUDED.level,
        description = EXCLUDED.description,
        updated_at = NOW()
    RETURNING category, level, description
)
SELECT u.session_id, u.student_id, u.present, u.notes,
       COALESCE(
           (SELECT json_agg(json_build_object(
                'category', x.category, 'level', x.level, 'description', x.description
            ) ORDER BY x.category)
            FROM (
                SELECT category, level, description FROM upserted
                UNION ALL
                SELECT sr.category, sr.level, sr.description
                FROM session_rating sr
                WHERE sr.session_student_id = u.id
                  AND sr.category <> ALL($5::text[])
            ) x),
           '[]'::json
       )
FROM updated u"""


class SessionStudentRepository(Repository):
    resource_name = "session student"

    async def create(self, db: Database, data: SessionStudentCreate) -> List[SessionStudent]:
        rows = await self._fetch(
            db, _CREATE, [data.session_ids, data.student_ids, data.present, data.notes]
        )
        return collect_all(rows, session_student_mapper)

    async def delete(self, db: Database, key: SessionStudentKey) -> None:
        deleted = await self._execute(
            db,
            "DELETE FROM session_student WHERE session_id = $1 AND student_id = $2",
            [key.session_id, key.student_id],
        )
        if deleted == 0:
            raise NotFoundError(
                resource=self.resource_name, resource_id=f"{key.session_id}/{key.student_id}"
            )

    async def patch(self, db: Database, data: SessionStudentPatch) -> SessionStudentRatings:
        row = await self._fetchrow(
            db,
            _PATCH,
            [
                data.session_id,
                data.student_id,
                data.present,
                data.notes,
                [rating.category.value for rating in data.ratings],
                [rating.level.value for rating in data.ratings],
                [rating.description for rating in data.ratings],
            ],
        )
        result = collect_one(row, session_student_ratings_mapper)
        if result is None:
            raise NotFoundError(
                resource=self.resource_name, resource_id=f"{data.session_id}/{data.student_id}"
            )
        return result


session_student_repository = SessionStudentRepository()
