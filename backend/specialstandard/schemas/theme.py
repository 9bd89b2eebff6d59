"""
SpecialStandard Backend — Theme Schemas
========================================

A theme is the monthly curriculum topic that resources and game content
hang off. The column is `theme_name`; the API field is `name`.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class Theme(BaseModel):
    id: uuid.UUID
    name: str
    month: int
    year: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ThemeInfo(BaseModel):
    """Theme columns embedded in joined resource rows."""
    theme_name: str
    month: int
    year: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ThemeCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    month: int = Field(ge=1, le=12)
    year: int = Field(ge=1900, le=2100)


class ThemeUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    month: Optional[int] = Field(default=None, ge=1, le=12)
    year: Optional[int] = Field(default=None, ge=1900, le=2100)


class ThemeFilters(BaseModel):
    month: Optional[int] = Field(default=None, ge=1, le=12)
    year: Optional[int] = Field(default=None, ge=1900, le=2100)
    search: Optional[str] = Field(default=None, max_length=255)
