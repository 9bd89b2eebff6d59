"""
SpecialStandard Backend — Theme Routes
=======================================

Monthly themes that resources and game content hang off. The list is
filterable by month, year and a name search, newest month first.
"""

import uuid
from typing import Annotated, List

from fastapi import APIRouter, Depends, Query

from specialstandard.database import Database, get_database
from specialstandard.dependencies import require_user
from specialstandard.query import Pagination, pagination_params
from specialstandard.repositories.theme_repository import theme_repository
from specialstandard.routes import API_PREFIX, ERROR_RESPONSES, NOT_FOUND
from specialstandard.schemas.theme import Theme, ThemeCreate, ThemeFilters, ThemeUpdate

router = APIRouter(
    prefix=f"{API_PREFIX}/themes",
    tags=["Themes"],
    dependencies=[Depends(require_user)],
    responses=ERROR_RESPONSES,
)


@router.get("", response_model=List[Theme], summary="List themes")
async def list_themes(
    filters: Annotated[ThemeFilters, Query()],
    pagination: Pagination = Depends(pagination_params),
    db: Database = Depends(get_database),
) -> List[Theme]:
    return await theme_repository.list(db, filters, pagination)


@router.post("", response_model=Theme, status_code=201, summary="Create a theme")
async def create_theme(data: ThemeCreate, db: Database = Depends(get_database)) -> Theme:
    return await theme_repository.create(db, data)


@router.get("/{theme_id}", response_model=Theme, responses=NOT_FOUND, summary="Get a theme")
async def get_theme(theme_id: uuid.UUID, db: Database = Depends(get_database)) -> Theme:
    return await theme_repository.get(db, theme_id)


@router.patch("/{theme_id}", response_model=Theme, responses=NOT_FOUND, summary="Update a theme")
async def update_theme(
    theme_id: uuid.UUID,
    data: ThemeUpdate,
    db: Database = Depends(get_database),
) -> Theme:
    return await theme_repository.update(db, theme_id, data)


@router.delete("/{theme_id}", status_code=204, responses=NOT_FOUND, summary="Delete a theme")
async def delete_theme(theme_id: uuid.UUID, db: Database = Depends(get_database)) -> None:
    await theme_repository.delete(db, theme_id)
