"""
SpecialStandard Backend — Resource Schemas
===========================================

A resource is a curriculum item (worksheet, book, video) filed under a
theme. `content` holds the S3 key of the material itself; list responses
add a time-limited `presigned_url` for it.
"""

import datetime as dt
import uuid
from typing import Optional

from pydantic import BaseModel, Field

from specialstandard.schemas.theme import ThemeInfo


class Resource(BaseModel):
    id: uuid.UUID
    theme_id: uuid.UUID
    grade_level: Optional[int] = None
    date: Optional[dt.date] = None
    type: Optional[str] = None
    title: Optional[str] = None
    category: Optional[str] = None
    content: Optional[str] = None
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None


class ResourceWithTheme(Resource):
    theme: ThemeInfo
    presigned_url: Optional[str] = None


class ResourceCreate(BaseModel):
    theme_id: uuid.UUID
    grade_level: Optional[int] = Field(default=None, ge=0, le=12)
    date: Optional[dt.date] = None
    type: Optional[str] = None
    title: Optional[str] = None
    category: Optional[str] = None
    content: Optional[str] = None


class ResourceUpdate(BaseModel):
    theme_id: Optional[uuid.UUID] = None
    grade_level: Optional[int] = Field(default=None, ge=0, le=12)
    date: Optional[dt.date] = None
    type: Optional[str] = None
    title: Optional[str] = None
    category: Optional[str] = None
    content: Optional[str] = None


class SessionResourceLink(BaseModel):
    session_id: uuid.UUID
    resource_id: uuid.UUID


class SessionResource(SessionResourceLink):
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None


class ResourceFilters(BaseModel):
    """Optional `GET /resources` query parameters."""
    theme_id: Optional[uuid.UUID] = None
    grade_level: Optional[int] = Field(default=None, ge=0, le=12)
    type: Optional[str] = None
    title: Optional[str] = None
    category: Optional[str] = None
    content: Optional[str] = None
    date: Optional[dt.date] = None
    theme_name: Optional[str] = None
    theme_month: Optional[int] = Field(default=None, ge=1, le=12)
    theme_year: Optional[int] = Field(default=None, ge=1900, le=2100)
