"""
SpecialStandard Backend — Session Student Routes
=================================================

Enrollment of students in sessions. POST links every listed student to
every listed session; PATCH records attendance, notes and ratings for one
enrollment. A rating is replaced per category, other categories are kept.
"""

from typing import List

from fastapi import APIRouter, Depends

from specialstandard.database import Database, get_database
from specialstandard.dependencies import require_user
from specialstandard.repositories.session_student_repository import session_student_repository
from specialstandard.routes import API_PREFIX, CONFLICT, ERROR_RESPONSES, NOT_FOUND
from specialstandard.schemas.session import (
    SessionStudent,
    SessionStudentCreate,
    SessionStudentKey,
    SessionStudentPatch,
    SessionStudentRatings,
)

router = APIRouter(
    prefix=f"{API_PREFIX}/session_students",
    tags=["Session Students"],
    dependencies=[Depends(require_user)],
    responses=ERROR_RESPONSES,
)


@router.post(
    "",
    response_model=List[SessionStudent],
    status_code=201,
    responses=CONFLICT,
    summary="Enroll students in sessions",
)
async def create_session_students(
    data: SessionStudentCreate, db: Database = Depends(get_database)
) -> List[SessionStudent]:
    return await session_student_repository.create(db, data)


@router.patch(
    "",
    response_model=SessionStudentRatings,
    responses=NOT_FOUND,
    summary="Record attendance, notes and ratings",
)
async def patch_session_student(
    data: SessionStudentPatch, db: Database = Depends(get_database)
) -> SessionStudentRatings:
    return await session_student_repository.patch(db, data)


@router.delete("", status_code=204, responses=NOT_FOUND, summary="Remove a student from a session")
async def delete_session_student(
    key: SessionStudentKey, db: Database = Depends(get_database)
) -> None:
    await session_student_repository.delete(db, key)
