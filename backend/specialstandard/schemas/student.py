"""
SpecialStandard Backend — Student Schemas
==========================================

Grades are integers: 0 is kindergarten, 1..12 are school grades and -1
marks a graduated student (hidden from lists unless asked for).
"""

import datetime as dt
import uuid
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from specialstandard.schemas.rating import RatingCategory

GRADUATED = -1


class Student(BaseModel):
    id: uuid.UUID
    first_name: str
    last_name: str
    dob: Optional[dt.date] = None
    therapist_id: uuid.UUID
    school_id: Optional[int] = None
    school_name: Optional[str] = None
    district_id: Optional[int] = None
    grade: Optional[int] = None
    iep: Optional[str] = None
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None


class StudentCreate(BaseModel):
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    dob: Optional[dt.date] = None
    therapist_id: uuid.UUID
    school_id: Optional[int] = None
    grade: Optional[int] = Field(default=None, ge=GRADUATED, le=12)
    iep: Optional[str] = None


class StudentUpdate(BaseModel):
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    dob: Optional[dt.date] = None
    therapist_id: Optional[uuid.UUID] = None
    school_id: Optional[int] = None
    grade: Optional[int] = Field(default=None, ge=GRADUATED, le=12)
    iep: Optional[str] = None


class PromoteStudentsInput(BaseModel):
    therapist_id: uuid.UUID
    excluded_student_ids: List[uuid.UUID] = Field(default_factory=list)


class StudentAttendance(BaseModel):
    present_count: int
    total_count: int


class StudentFilters(BaseModel):
    """`grade` unset hides graduated students; `grade=-1` lists only them."""
    grade: Optional[int] = Field(default=None, ge=GRADUATED, le=12)
    therapist_id: Optional[uuid.UUID] = None
    school_id: Optional[int] = None
    name: Optional[str] = None


class StudentSessionFilters(BaseModel):
    month: Optional[int] = Field(default=None, ge=1, le=12)
    year: Optional[int] = Field(default=None, ge=1776, le=2200)
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    present: Optional[bool] = None

    @model_validator(mode="after")
    def start_not_after_end(self) -> "StudentSessionFilters":
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class StudentRatingFilters(BaseModel):
    month: Optional[int] = Field(default=None, ge=1, le=12)
    year: Optional[int] = Field(default=None, ge=1776, le=2200)
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    category: List[RatingCategory] = Field(default_factory=list)


class AttendanceFilters(BaseModel):
    date_from: Optional[dt.date] = None
    date_to: Optional[dt.date] = None
