"""
SpecialStandard Backend — Reference Data Routes
================================================

Districts and schools (read-only lookup tables used by signup and student
forms) and the newsletter covering a given date.
"""

import datetime as dt
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from starlette.concurrency import run_in_threadpool

from specialstandard.database import Database, get_database
from specialstandard.dependencies import require_user
from specialstandard.repositories.reference_repository import (
    district_repository,
    newsletter_repository,
    school_repository,
)
from specialstandard.routes import API_PREFIX, ERROR_RESPONSES, NOT_FOUND
from specialstandard.schemas.reference import District, NewsletterResponse, School
from specialstandard.services.object_storage import object_storage

NEWSLETTER_URL_EXPIRY = 3600

router = APIRouter(
    prefix=API_PREFIX,
    tags=["Reference"],
    dependencies=[Depends(require_user)],
    responses=ERROR_RESPONSES,
)


@router.get("/districts", response_model=List[District], summary="List districts")
async def list_districts(db: Database = Depends(get_database)) -> List[District]:
    return await district_repository.list(db)


@router.get(
    "/districts/{district_id}", response_model=District, responses=NOT_FOUND, summary="Get a district"
)
async def get_district(district_id: int, db: Database = Depends(get_database)) -> District:
    return await district_repository.get(db, district_id)


@router.get("/schools", response_model=List[School], summary="List schools by name")
async def list_schools(
    district_id: Optional[int] = Query(default=None, description="Only schools in this district"),
    db: Database = Depends(get_database),
) -> List[School]:
    return await school_repository.list(db, district_id=district_id)


@router.get(
    "/newsletter/by-date",
    response_model=NewsletterResponse,
    responses=NOT_FOUND,
    summary="Newsletter whose date range covers `date`",
)
async def get_newsletter_by_date(
    date: dt.date = Query(description="Any date inside the newsletter's range"),
    db: Database = Depends(get_database),
) -> NewsletterResponse:
    newsletter = await newsletter_repository.get_by_date(db, date)
    url = await run_in_threadpool(object_storage.presign, newsletter.s3_url, NEWSLETTER_URL_EXPIRY)
    return NewsletterResponse(**newsletter.model_dump(), presigned_url=url)
