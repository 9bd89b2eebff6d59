"""
SpecialStandard Backend — Student Routes
=========================================

What:  Student records plus the per-student views a therapist needs:
       session history, ratings per session, attendance counts, and the
       end-of-year grade promotion.
How:   Filters arrive as query-parameter models; a filter left out does
       not constrain the result. Graduated students (grade -1) are hidden
       from the list unless `grade=-1` is asked for explicitly.
"""

import uuid
from typing import Annotated, List

from fastapi import APIRouter, Depends, Query

from specialstandard.database import Database, get_database
from specialstandard.dependencies import require_user
from specialstandard.query import Pagination, pagination_params
from specialstandard.repositories.student_repository import student_repository
from specialstandard.routes import API_PREFIX, ERROR_RESPONSES, NOT_FOUND
from specialstandard.schemas.common import MessageResponse
from specialstandard.schemas.session import StudentSessionDetail, StudentSessionRatings
from specialstandard.schemas.student import (
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

router = APIRouter(
    prefix=f"{API_PREFIX}/students",
    tags=["Students"],
    dependencies=[Depends(require_user)],
    responses=ERROR_RESPONSES,
)


@router.get("", response_model=List[Student], summary="List students")
async def list_students(
    filters: Annotated[StudentFilters, Query()],
    pagination: Pagination = Depends(pagination_params),
    db: Database = Depends(get_database),
) -> List[Student]:
    return await student_repository.list(db, filters, pagination)


@router.post("", response_model=Student, status_code=201, summary="Add a student")
async def create_student(data: StudentCreate, db: Database = Depends(get_database)) -> Student:
    return await student_repository.create(db, data)


# Registered before /{student_id} so "promote" is never parsed as an id.
@router.patch(
    "/promote",
    response_model=MessageResponse,
    summary="Move a therapist's students up one grade",
    description=(
        "Grades 0-11 advance by one and grade 12 becomes -1 (graduated). "
        "Students listed in excluded_student_ids keep their grade."
    ),
)
async def promote_students(
    data: PromoteStudentsInput, db: Database = Depends(get_database)
) -> MessageResponse:
    promoted = await student_repository.promote(db, data)
    return MessageResponse(message=f"Promoted {promoted} students")


@router.get("/{student_id}", response_model=Student, responses=NOT_FOUND, summary="Get a student")
async def get_student(student_id: uuid.UUID, db: Database = Depends(get_database)) -> Student:
    return await student_repository.get(db, student_id)


@router.patch(
    "/{student_id}", response_model=Student, responses=NOT_FOUND, summary="Update a student"
)
async def update_student(
    student_id: uuid.UUID,
    data: StudentUpdate,
    db: Database = Depends(get_database),
) -> Student:
    return await student_repository.update(db, student_id, data)


@router.delete(
    "/{student_id}", status_code=204, responses=NOT_FOUND, summary="Delete a student"
)
async def delete_student(student_id: uuid.UUID, db: Database = Depends(get_database)) -> None:
    await student_repository.delete(db, student_id)


# ── Per-student views ─────────────────────────────────────────────────────

@router.get(
    "/{student_id}/sessions",
    response_model=List[StudentSessionDetail],
    summary="Sessions the student is enrolled in, newest first",
)
async def list_student_sessions(
    student_id: uuid.UUID,
    filters: Annotated[StudentSessionFilters, Query()],
    pagination: Pagination = Depends(pagination_params),
    db: Database = Depends(get_database),
) -> List[StudentSessionDetail]:
    return await student_repository.sessions(db, student_id, filters, pagination)


@router.get(
    "/{student_id}/ratings",
    response_model=List[StudentSessionRatings],
    summary="The student's ratings grouped per session",
)
async def list_student_ratings(
    student_id: uuid.UUID,
    filters: Annotated[StudentRatingFilters, Query()],
    pagination: Pagination = Depends(pagination_params),
    db: Database = Depends(get_database),
) -> List[StudentSessionRatings]:
    return await student_repository.ratings(db, student_id, filters, pagination)


@router.get(
    "/{student_id}/attendance",
    response_model=StudentAttendance,
    summary="Sessions attended out of sessions enrolled",
)
async def get_student_attendance(
    student_id: uuid.UUID,
    filters: Annotated[AttendanceFilters, Query()],
    db: Database = Depends(get_database),
) -> StudentAttendance:
    return await student_repository.attendance(db, student_id, filters)
