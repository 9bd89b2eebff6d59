"""
SpecialStandard Backend — Session Repository
=============================================

What:  Therapy sessions: filtered listing, creation (optionally recurring
       and with attendees), patching, and deletion of one session or of a
       recurring series from a given occurrence onward.
How:   Creation is a single statement. Occurrence slots are passed as two
       parallel timestamptz arrays and unnested into rows; a second CTE
       inserts the session x student cross product. Nothing is left
       half-written when the statement fails.

Recurring series:
    Occurrences created together share `session_parent_id`. Deleting
    "recurring" from a session removes it and every later occurrence with
    the same parent.
"""

import logging
import uuid
from typing import List

from specialstandard.database import Database
from specialstandard.exceptions import ValidationError
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
from specialstandard.repositories.columns import (
    RATINGS_JSON,
    SESSION_FIELDS,
    STUDENT_FIELDS,
    session_columns,
    student_columns,
)
from specialstandard.schemas.session import (
    Session,
    SessionCreate,
    SessionFilters,
    SessionStudentDetail,
    SessionUpdate,
)
from specialstandard.schemas.student import Student

logger = logging.getLogger(__name__)

_COLUMNS = ", ".join(SESSION_FIELDS)
ORDER_BY = "s.start_datetime ASC, s.id ASC"

session_mapper = RowMapper(Session, SESSION_FIELDS)
session_student_detail_mapper = RowMapper(
    SessionStudentDetail,
    ["session_id", "present", "notes", "created_at", "updated_at", "ratings"],
    children=[("student", RowMapper(Student, STUDENT_FIELDS))],
)

_CREATE = f"""WITH created AS (
    INSERT INTO session (session_name, start_datetime, end_datetime, therapist_id, notes, location, session_parent_id)
    SELECT $1, slot.start_datetime, slot.end_datetime, $2, $3, $4, $5
    FROM unnest($6::timestamptz[], $7::timestamptz[]) AS slot(start_datetime, end_datetime)
    RETURNING {_COLUMNS}
), linked AS (
    INSERT INTO session_student (session_id, student_id)
    SELECT c.id, st.student_id
    FROM created c
    CROSS JOIN unnest($8::uuid[]) AS st(student_id)
)
SELECT {_COLUMNS}
FROM created
ORDER BY start_datetime ASC, id ASC"""

_DELETE_RECURRING = """DELETE FROM session s
USING session target
WHERE target.id = $1
  AND (
    s.id = target.id
    OR (
      target.session_parent_id IS NOT NULL
      AND s.session_parent_id = target.session_parent_id
      AND s.start_datetime >= target.start_datetime
    )
  )"""


class SessionRepository(Repository):
    resource_name = "session"

    async def list(self, db: Database, filters: SessionFilters, pagination: Pagination) -> List[Session]:
        filter_set = FilterSet.of([
            ("s.start_datetime", Comparison.RANGE_FROM, filters.startdate),
            ("s.end_datetime", Comparison.RANGE_TO, filters.enddate),
            ("EXTRACT(MONTH FROM s.start_datetime)", Comparison.EQUALS, filters.month),
            ("EXTRACT(YEAR FROM s.start_datetime)", Comparison.EQUALS, filters.year),
            (
                "ARRAY(SELECT ss.student_id FROM session_student ss WHERE ss.session_id = s.id)",
                Comparison.OVERLAPS,
                filters.student_ids,
            ),
        ])
        query = build_select(
            f"SELECT {session_columns('s')}\nFROM session s",
            filter_set,
            ORDER_BY,
            pagination,
            where=["s.therapist_id = $1"],
            args=[filters.therapist_id],
        )
        return collect_all(await self._fetch(db, query.sql, query.args), session_mapper)

    async def get(self, db: Database, session_id: uuid.UUID) -> Session:
        row = await self._fetchrow(db, f"SELECT {_COLUMNS} FROM session WHERE id = $1", [session_id])
        session = collect_one(row, session_mapper)
        if session is None:
            raise self._not_found(session_id)
        return session

    async def create(self, db: Database, data: SessionCreate) -> List[Session]:
        """Create every occurrence of the request and link its students."""
        slots = data.occurrences()
        if not slots:
            raise ValidationError(
                message="repetition window contains no occurrences", field="repetition"
            )
        parent_id = uuid.uuid4() if data.repetition is not None else None
        rows = await self._fetch(
            db,
            _CREATE,
            [
                data.session_name,
                data.therapist_id,
                data.notes,
                data.location,
                parent_id,
                [start for start, _ in slots],
                [end for _, end in slots],
                data.student_ids,
            ],
        )
        logger.info(
            "Created %d session(s) for therapist %s with %d student(s)",
            len(rows), data.therapist_id, len(data.student_ids),
        )
        return collect_all(rows, session_mapper)

    async def update(self, db: Database, session_id: uuid.UUID, data: SessionUpdate) -> Session:
        query = build_update(
            "session", data.model_dump(exclude_none=True), "id", session_id, _COLUMNS
        )
        session = collect_one(await self._fetchrow(db, query.sql, query.args), session_mapper)
        if session is None:
            raise self._not_found(session_id)
        return session

    async def delete(self, db: Database, session_id: uuid.UUID) -> None:
        await self._delete_one(db, "DELETE FROM session WHERE id = $1", session_id)

    async def delete_recurring(self, db: Database, session_id: uuid.UUID) -> int:
        """Delete a session and every later occurrence of its series."""
        deleted = await self._execute(db, _DELETE_RECURRING, [session_id])
        if deleted == 0:
            raise self._not_found(session_id)
        logger.info("Deleted %d occurrence(s) starting at session %s", deleted, session_id)
        return deleted

    async def list_students(
        self, db: Database, session_id: uuid.UUID, pagination: Pagination
    ) -> List[SessionStudentDetail]:
        query = build_select(
            "SELECT ss.session_id, ss.present, ss.notes, ss.created_at, ss.updated_at,\n"
            "       COALESCE(\n"
            f"           (SELECT {RATINGS_JSON} FROM session_rating sr WHERE sr.session_student_id = ss.id),\n"
            "           '[]'::json\n"
            "       ),\n"
            f"       {student_columns('st')}\n"
            "FROM session_student ss\n"
            "JOIN student st ON ss.student_id = st.id\n"
            "LEFT JOIN school sch ON st.school_id = sch.id",
            None,
            "st.first_name ASC, st.last_name ASC, st.id ASC",
            pagination,
            where=["ss.session_id = $1"],
            args=[session_id],
        )
        return collect_all(await self._fetch(db, query.sql, query.args), session_student_detail_mapper)


session_repository = SessionRepository()
