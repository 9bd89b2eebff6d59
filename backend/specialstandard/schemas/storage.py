"""
SpecialStandard Backend — Object Storage Schemas
=================================================
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class PresignRequest(BaseModel):
    key: str = Field(min_length=1, max_length=1024)
    expiry: Optional[int] = Field(default=None, ge=60, le=604800, description="Seconds")


class PresignResponse(BaseModel):
    key: str
    url: str
    expires_in: int


class ObjectListResponse(BaseModel):
    prefix: str
    keys: List[str]
