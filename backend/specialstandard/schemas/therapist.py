"""
SpecialStandard Backend — Therapist Schemas
============================================

A therapist row shares its id with the identity-provider user it belongs to.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class Therapist(BaseModel):
    id: uuid.UUID
    first_name: str
    last_name: str
    email: str
    active: bool = True
    schools: List[int] = Field(default_factory=list)
    district_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("schools", mode="before")
    @classmethod
    def null_schools_to_empty(cls, v):
        return [] if v is None else v


class TherapistDetail(Therapist):
    """Therapist with the names of its district and schools resolved."""
    district_name: Optional[str] = None
    school_names: List[str] = Field(default_factory=list)

    @field_validator("school_names", mode="before")
    @classmethod
    def null_names_to_empty(cls, v):
        return [] if v is None else v


class TherapistCreate(BaseModel):
    id: uuid.UUID
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: str = Field(pattern=EMAIL_PATTERN, max_length=255)
    schools: List[int] = Field(default_factory=list)
    district_id: Optional[int] = None


class TherapistUpdate(BaseModel):
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    email: Optional[str] = Field(default=None, pattern=EMAIL_PATTERN, max_length=255)
    active: Optional[bool] = None
    schools: Optional[List[int]] = None
    district_id: Optional[int] = None
