"""
SpecialStandard Backend — Object Storage Routes
================================================

Direct access to the resource bucket for the frontend: presign a single
key, or list every key under a prefix.
"""

from fastapi import APIRouter, Depends, Query
from starlette.concurrency import run_in_threadpool

from specialstandard.config import settings
from specialstandard.dependencies import require_user
from specialstandard.routes import API_PREFIX, ERROR_RESPONSES
from specialstandard.schemas.common import ErrorResponse
from specialstandard.schemas.storage import ObjectListResponse, PresignRequest, PresignResponse
from specialstandard.services.object_storage import normalize_key, object_storage

router = APIRouter(
    prefix=f"{API_PREFIX}/s3",
    tags=["Storage"],
    dependencies=[Depends(require_user)],
    responses={
        **ERROR_RESPONSES,
        502: {"description": "Object storage failed", "model": ErrorResponse},
    },
)


@router.post("/presign", response_model=PresignResponse, summary="Presigned GET URL for a key")
async def presign(data: PresignRequest) -> PresignResponse:
    expiry = data.expiry or settings.s3_presign_default_expiry
    url = await run_in_threadpool(object_storage.presign, data.key, expiry)
    return PresignResponse(
        key=normalize_key(data.key, object_storage.bucket), url=url, expires_in=expiry
    )


@router.get("/list", response_model=ObjectListResponse, summary="Keys under a prefix")
async def list_objects(
    prefix: str = Query(default="", max_length=1024),
) -> ObjectListResponse:
    keys = await object_storage.list_by_prefix(prefix)
    return ObjectListResponse(prefix=prefix, keys=keys)
