"""
SpecialStandard Backend — Student Repository
=============================================

What:  Student CRUD plus the per-student views the dashboard needs:
       sessions attended, ratings grouped per session, attendance counts
       and the end-of-year grade promotion.
How:   Every student row is read joined with its school so `school_name`
       and `district_id` come back with it. Writes use a CTE around the
       INSERT/UPDATE so the joined shape is returned by the same statement.

Graduated students (grade -1) are hidden from lists unless `grade=-1` is
asked for explicitly.
"""

import logging
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
    build_where,
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
from specialstandard.schemas.session import Session, StudentSessionDetail, StudentSessionRatings
from specialstandard.schemas.student import (
    GRADUATED,
    AttendanceFilters,
    PromoteStudentsInput,
    Student,
    StudentAttendance,
    StudentCreate,
    StudentFilters,
    StudentRatingFilters,
    StudentSessionFilters,
    StudentUpdate,
)

logger = logging.getLogger(__name__)


def _joined(source: str, alias: str) -> str:
    return (
        f"SELECT {student_columns(alias)}\n"
        f"FROM {source} {alias}\n"
        f"LEFT JOIN school sch ON {alias}.school_id = sch.id"
    )


_SELECT = _joined("student", "s")
ORDER_BY = "sch.name ASC NULLS LAST, s.first_name ASC, s.last_name ASC, s.dob ASC, s.id ASC"

student_mapper = RowMapper(Student, STUDENT_FIELDS)
student_session_mapper = RowMapper(
    StudentSessionDetail,
    ["student_id", "present", "notes", "created_at", "updated_at"],
    children=[("session", RowMapper(Session, SESSION_FIELDS))],
)
student_ratings_mapper = RowMapper(
    StudentSessionRatings, ["session_id", "student_id", "session_date", "ratings"]
)


class StudentRepository(Repository):
    resource_name = "student"

    async def list(self, db: Database, filters: StudentFilters, pagination: Pagination) -> List[Student]:
        filter_set = FilterSet.of([
            ("s.grade", Comparison.EQUALS, filters.grade),
            ("s.therapist_id", Comparison.EQUALS, filters.therapist_id),
            ("s.school_id", Comparison.EQUALS, filters.school_id),
            ("CONCAT(s.first_name, ' ', s.last_name)", Comparison.SUBSTRING, filters.name),
        ])
        where = [f"s.grade != {GRADUATED}"] if filters.grade is None else []
        query = build_select(_SELECT, filter_set, ORDER_BY, pagination, where=where)
        return collect_all(await self._fetch(db, query.sql, query.args), student_mapper)

    async def get(self, db: Database, student_id: uuid.UUID) -> Student:
        student = collect_one(
            await self._fetchrow(db, f"{_SELECT}\nWHERE s.id = $1", [student_id]), student_mapper
        )
        if student is None:
            raise self._not_found(student_id)
        return student

    async def create(self, db: Database, data: StudentCreate) -> Student:
        row = await self._fetchrow(
            db,
            "WITH inserted AS (\n"
            "    INSERT INTO student (first_name, last_name, dob, therapist_id, school_id, grade, iep)\n"
            "    VALUES ($1, $2, $3, $4, $5, $6, $7)\n"
            "    RETURNING *\n"
            ")\n" + _joined("inserted", "i"),
            [data.first_name, data.last_name, data.dob, data.therapist_id,
             data.school_id, data.grade, data.iep],
        )
        return student_mapper.scan(row)

    async def update(self, db: Database, student_id: uuid.UUID, data: StudentUpdate) -> Student:
        update = build_update("student", data.model_dump(exclude_none=True), "id", student_id, "*")
        sql = f"WITH updated AS (\n{update.sql}\n)\n" + _joined("updated", "u")
        student = collect_one(await self._fetchrow(db, sql, update.args), student_mapper)
        if student is None:
            raise self._not_found(student_id)
        return student

    async def delete(self, db: Database, student_id: uuid.UUID) -> None:
        await self._delete_one(db, "DELETE FROM student WHERE id = $1", student_id)

    async def sessions(
        self,
        db: Database,
        student_id: uuid.UUID,
        filters: StudentSessionFilters,
        pagination: Pagination,
    ) -> List[StudentSessionDetail]:
        filter_set = FilterSet.of([
            ("EXTRACT(MONTH FROM s.start_datetime)", Comparison.EQUALS, filters.month),
            ("EXTRACT(YEAR FROM s.start_datetime)", Comparison.EQUALS, filters.year),
            ("s.start_datetime::date", Comparison.RANGE_FROM, filters.start_date),
            ("s.start_datetime::date", Comparison.RANGE_TO, filters.end_date),
            ("ss.present", Comparison.EQUALS, filters.present),
        ])
        query = build_select(
            "SELECT ss.student_id, ss.present, ss.notes, ss.created_at, ss.updated_at,\n"
            f"       {session_columns('s')}\n"
            "FROM session_student ss\n"
            "JOIN session s ON ss.session_id = s.id",
            filter_set,
            "s.start_datetime DESC, s.id ASC",
            pagination,
            where=["ss.student_id = $1"],
            args=[student_id],
        )
        return collect_all(await self._fetch(db, query.sql, query.args), student_session_mapper)

    async def ratings(
        self,
        db: Database,
        student_id: uuid.UUID,
        filters: StudentRatingFilters,
        pagination: Pagination,
    ) -> List[StudentSessionRatings]:
        filter_set = FilterSet.of([
            ("EXTRACT(MONTH FROM s.start_datetime)", Comparison.EQUALS, filters.month),
            ("EXTRACT(YEAR FROM s.start_datetime)", Comparison.EQUALS, filters.year),
            ("s.start_datetime::date", Comparison.RANGE_FROM, filters.start_date),
            ("s.start_datetime::date", Comparison.RANGE_TO, filters.end_date),
            ("sr.category", Comparison.IN_SET, [c.value for c in filters.category]),
        ])
        query = build_select(
            "SELECT s.id, ss.student_id, s.start_datetime,\n"
            "       COALESCE(\n"
            f"           {RATINGS_JSON} FILTER (WHERE sr.id IS NOT NULL),\n"
            "           '[]'::json\n"
            "       )\n"
            "FROM session_student ss\n"
            "JOIN session s ON ss.session_id = s.id\n"
            "LEFT JOIN session_rating sr ON sr.session_student_id = ss.id",
            filter_set,
            "s.start_datetime DESC, s.id ASC",
            pagination,
            where=["ss.student_id = $1"],
            args=[student_id],
            group_by="s.id, ss.student_id, s.start_datetime",
        )
        return collect_all(await self._fetch(db, query.sql, query.args), student_ratings_mapper)

    async def attendance(
        self, db: Database, student_id: uuid.UUID, filters: AttendanceFilters
    ) -> StudentAttendance:
        filter_set = FilterSet.of([
            ("s.start_datetime::date", Comparison.RANGE_FROM, filters.date_from),
            ("s.start_datetime::date", Comparison.RANGE_TO, filters.date_to),
        ])
        clause, args = build_where(filter_set, ["ss.student_id = $1"], [student_id])
        row = await self._fetchrow(
            db,
            "SELECT COUNT(*) FILTER (WHERE ss.present), COUNT(*)\n"
            "FROM session_student ss\n"
            "JOIN session s ON ss.session_id = s.id\n" + clause,
            args,
        )
        return StudentAttendance(present_count=row[0] or 0, total_count=row[1] or 0)

    async def promote(self, db: Database, data: PromoteStudentsInput) -> int:
        """Move a therapist's students up one grade; 12th graders graduate."""
        promoted = await self._execute(
            db,
            "UPDATE student\n"
            f"SET grade = CASE WHEN grade = 12 THEN {GRADUATED} ELSE grade + 1 END,\n"
            "    updated_at = NOW()\n"
            "WHERE therapist_id = $1\n"
            "  AND grade BETWEEN 0 AND 12\n"
            "  AND NOT (id = ANY($2::uuid[]))",
            [data.therapist_id, data.excluded_student_ids],
        )
        logger.info("Promoted %d students for therapist %s", promoted, data.therapist_id)
        return promoted


student_repository = StudentRepository()
