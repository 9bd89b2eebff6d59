"""
SpecialStandard Backend — Resource Routes
==========================================

What:  Teaching resources (worksheets, PDFs, links) and their links to
       sessions.
How:   Listing and detail responses carry the joined theme and a presigned
       URL for the resource's `content` key. Presigning is a blocking boto3
       call, so it runs in the threadpool. A resource whose key cannot be
       signed is still returned, with an empty URL.

Routes:
    /resources          GET (filtered, paginated), POST
    /resources/{id}     GET, PATCH, DELETE
    /session-resource   POST (link), DELETE (unlink)
"""

import uuid
from typing import Annotated, List

from fastapi import APIRouter, Depends, Query
from starlette.concurrency import run_in_threadpool

from specialstandard.database import Database, get_database
from specialstandard.dependencies import require_user
from specialstandard.query import Pagination, pagination_params
from specialstandard.repositories.resource_repository import (
    resource_repository,
    session_resource_repository,
)
from specialstandard.routes import API_PREFIX, CONFLICT, ERROR_RESPONSES, NOT_FOUND
from specialstandard.schemas.resource import (
    Resource,
    ResourceCreate,
    ResourceFilters,
    ResourceUpdate,
    ResourceWithTheme,
    SessionResource,
    SessionResourceLink,
)
from specialstandard.services.object_storage import object_storage

router = APIRouter(
    prefix=API_PREFIX,
    tags=["Resources"],
    dependencies=[Depends(require_user)],
    responses=ERROR_RESPONSES,
)


def _with_urls(resources: List[ResourceWithTheme]) -> List[ResourceWithTheme]:
    for resource in resources:
        resource.presigned_url = object_storage.try_presign(resource.content)
    return resources


@router.get("/resources", response_model=List[ResourceWithTheme], summary="List resources")
async def list_resources(
    filters: Annotated[ResourceFilters, Query()],
    pagination: Pagination = Depends(pagination_params),
    db: Database = Depends(get_database),
) -> List[ResourceWithTheme]:
    resources = await resource_repository.list(db, filters, pagination)
    return await run_in_threadpool(_with_urls, resources)


@router.post("/resources", response_model=Resource, status_code=201, summary="Create a resource")
async def create_resource(data: ResourceCreate, db: Database = Depends(get_database)) -> Resource:
    return await resource_repository.create(db, data)


@router.get(
    "/resources/{resource_id}",
    response_model=ResourceWithTheme,
    responses=NOT_FOUND,
    summary="Get a resource with its theme",
)
async def get_resource(
    resource_id: uuid.UUID, db: Database = Depends(get_database)
) -> ResourceWithTheme:
    resource = await resource_repository.get(db, resource_id)
    (resource,) = await run_in_threadpool(_with_urls, [resource])
    return resource


@router.patch(
    "/resources/{resource_id}",
    response_model=Resource,
    responses=NOT_FOUND,
    summary="Update a resource",
)
async def update_resource(
    resource_id: uuid.UUID,
    data: ResourceUpdate,
    db: Database = Depends(get_database),
) -> Resource:
    return await resource_repository.update(db, resource_id, data)


@router.delete(
    "/resources/{resource_id}", status_code=204, responses=NOT_FOUND, summary="Delete a resource"
)
async def delete_resource(resource_id: uuid.UUID, db: Database = Depends(get_database)) -> None:
    await resource_repository.delete(db, resource_id)


# ── Session links ─────────────────────────────────────────────────────────

@router.post(
    "/session-resource",
    response_model=SessionResource,
    status_code=201,
    responses=CONFLICT,
    summary="Attach a resource to a session",
)
async def link_session_resource(
    link: SessionResourceLink, db: Database = Depends(get_database)
) -> SessionResource:
    return await session_resource_repository.create(db, link)


@router.delete(
    "/session-resource",
    status_code=204,
    responses=NOT_FOUND,
    summary="Detach a resource from a session",
)
async def unlink_session_resource(
    link: SessionResourceLink, db: Database = Depends(get_database)
) -> None:
    await session_resource_repository.delete(db, link)
