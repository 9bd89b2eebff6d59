"""
SpecialStandard Backend — Therapist Routes
===========================================

Therapist profiles. A therapist's id is the identity provider's user id,
so profiles are normally created by signup; POST exists for backfills.
The detail view adds the district name and the names of the therapist's
schools.
"""

import uuid
from typing import List

from fastapi import APIRouter, Depends

from specialstandard.database import Database, get_database
from specialstandard.dependencies import require_user
from specialstandard.query import Pagination, pagination_params
from specialstandard.repositories.therapist_repository import therapist_repository
from specialstandard.routes import API_PREFIX, CONFLICT, ERROR_RESPONSES, NOT_FOUND
from specialstandard.schemas.therapist import (
    Therapist,
    TherapistCreate,
    TherapistDetail,
    TherapistUpdate,
)

router = APIRouter(
    prefix=f"{API_PREFIX}/therapists",
    tags=["Therapists"],
    dependencies=[Depends(require_user)],
    responses=ERROR_RESPONSES,
)


@router.get("", response_model=List[Therapist], summary="List therapists by name")
async def list_therapists(
    pagination: Pagination = Depends(pagination_params),
    db: Database = Depends(get_database),
) -> List[Therapist]:
    return await therapist_repository.list(db, pagination)


@router.post(
    "",
    response_model=Therapist,
    status_code=201,
    responses=CONFLICT,
    summary="Create a therapist profile",
)
async def create_therapist(data: TherapistCreate, db: Database = Depends(get_database)) -> Therapist:
    return await therapist_repository.create(db, data)


@router.get(
    "/{therapist_id}",
    response_model=TherapistDetail,
    responses=NOT_FOUND,
    summary="Get a therapist with district and school names",
)
async def get_therapist(
    therapist_id: uuid.UUID, db: Database = Depends(get_database)
) -> TherapistDetail:
    return await therapist_repository.get(db, therapist_id)


@router.patch(
    "/{therapist_id}",
    response_model=Therapist,
    responses={**NOT_FOUND, **CONFLICT},
    summary="Update a therapist",
)
async def update_therapist(
    therapist_id: uuid.UUID,
    data: TherapistUpdate,
    db: Database = Depends(get_database),
) -> Therapist:
    return await therapist_repository.update(db, therapist_id, data)


@router.delete(
    "/{therapist_id}", status_code=204, responses=NOT_FOUND, summary="Delete a therapist"
)
async def delete_therapist(therapist_id: uuid.UUID, db: Database = Depends(get_database)) -> None:
    await therapist_repository.delete(db, therapist_id)
