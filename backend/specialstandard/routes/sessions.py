"""
SpecialStandard Backend — Session Routes
=========================================

What:  Therapy sessions, including weekly repeating series.
How:   POST creates one session, or one per week slot when `repetition` is
       given; every created occurrence shares a `session_parent_id` and is
       linked to the requested students in the same statement.

Routes:
    /sessions                     GET (therapist_id required), POST
    /sessions/{id}                GET, PATCH, DELETE
    /sessions/{id}/recurring      DELETE this occurrence and later ones
    /sessions/{id}/students       GET students with their ratings
    /sessions/{id}/resources      GET attached resources
"""

import uuid
from typing import Annotated, List

from fastapi import APIRouter, Depends, Query

from specialstandard.database import Database, get_database
from specialstandard.dependencies import require_user
from specialstandard.query import Pagination, pagination_params
from specialstandard.repositories.resource_repository import resource_repository
from specialstandard.repositories.session_repository import session_repository
from specialstandard.routes import API_PREFIX, ERROR_RESPONSES, NOT_FOUND
from specialstandard.schemas.common import MessageResponse
from specialstandard.schemas.resource import Resource
from specialstandard.schemas.session import (
    Session,
    SessionCreate,
    SessionFilters,
    SessionStudentDetail,
    SessionUpdate,
)

router = APIRouter(
    prefix=f"{API_PREFIX}/sessions",
    tags=["Sessions"],
    dependencies=[Depends(require_user)],
    responses=ERROR_RESPONSES,
)


@router.get("", response_model=List[Session], summary="List a therapist's sessions")
async def list_sessions(
    filters: Annotated[SessionFilters, Query()],
    pagination: Pagination = Depends(pagination_params),
    db: Database = Depends(get_database),
) -> List[Session]:
    return await session_repository.list(db, filters, pagination)


@router.post(
    "",
    response_model=List[Session],
    status_code=201,
    summary="Create a session or a weekly series",
)
async def create_session(data: SessionCreate, db: Database = Depends(get_database)) -> List[Session]:
    return await session_repository.create(db, data)


@router.get("/{session_id}", response_model=Session, responses=NOT_FOUND, summary="Get a session")
async def get_session(session_id: uuid.UUID, db: Database = Depends(get_database)) -> Session:
    return await session_repository.get(db, session_id)


@router.patch(
    "/{session_id}", response_model=Session, responses=NOT_FOUND, summary="Update a session"
)
async def update_session(
    session_id: uuid.UUID,
    data: SessionUpdate,
    db: Database = Depends(get_database),
) -> Session:
    return await session_repository.update(db, session_id, data)


@router.delete(
    "/{session_id}", status_code=204, responses=NOT_FOUND, summary="Delete a session"
)
async def delete_session(session_id: uuid.UUID, db: Database = Depends(get_database)) -> None:
    await session_repository.delete(db, session_id)


@router.delete(
    "/{session_id}/recurring",
    response_model=MessageResponse,
    responses=NOT_FOUND,
    summary="Delete this occurrence and every later one in its series",
)
async def delete_recurring_session(
    session_id: uuid.UUID, db: Database = Depends(get_database)
) -> MessageResponse:
    deleted = await session_repository.delete_recurring(db, session_id)
    return MessageResponse(message=f"Deleted {deleted} sessions")


@router.get(
    "/{session_id}/students",
    response_model=List[SessionStudentDetail],
    summary="Students in a session, with attendance and ratings",
)
async def list_session_students(
    session_id: uuid.UUID,
    pagination: Pagination = Depends(pagination_params),
    db: Database = Depends(get_database),
) -> List[SessionStudentDetail]:
    return await session_repository.list_students(db, session_id, pagination)


@router.get(
    "/{session_id}/resources",
    response_model=List[Resource],
    summary="Resources attached to a session",
)
async def list_session_resources(
    session_id: uuid.UUID,
    pagination: Pagination = Depends(pagination_params),
    db: Database = Depends(get_database),
) -> List[Resource]:
    return await resource_repository.list_for_session(db, session_id, pagination)
