"""
SpecialStandard Backend — Session Schemas
==========================================

What:  Therapy sessions, their attendance rows (session_student) and the
       ratings a therapist records per attendee.

Recurring sessions:
    A create request may carry a `repetition`. Every occurrence shares a
    `session_parent_id`, which is what "delete this and later occurrences"
    targets.
"""

import json
import uuid
from datetime import datetime, timedelta, timezone
from typing import Annotated, List, Optional, Tuple

from pydantic import AfterValidator, BaseModel, Field, field_validator, model_validator

from specialstandard.schemas.rating import RatingCategory, RatingLevel
from specialstandard.schemas.student import Student


def as_utc(v: Optional[datetime]) -> Optional[datetime]:
    """Naive timestamps are read as UTC."""
    if v is not None and v.tzinfo is None:
        return v.replace(tzinfo=timezone.utc)
    return v


UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]


# ══════════════════════════════════════════════════════════════════════════
# Sessions
# ══════════════════════════════════════════════════════════════════════════


class Session(BaseModel):
    id: uuid.UUID
    session_name: str
    start_datetime: datetime
    end_datetime: datetime
    therapist_id: uuid.UUID
    notes: Optional[str] = None
    location: Optional[str] = None
    session_parent_id: Optional[uuid.UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Repetition(BaseModel):
    recur_start: UtcDatetime
    recur_end: UtcDatetime
    every_n_weeks: int = Field(ge=1)

    @model_validator(mode="after")
    def end_after_start(self) -> "Repetition":
        if self.recur_end <= self.recur_start:
            raise ValueError("recur_end must be after recur_start")
        return self


class SessionCreate(BaseModel):
    session_name: str = Field(min_length=1, max_length=255)
    start_datetime: UtcDatetime
    end_datetime: UtcDatetime
    therapist_id: uuid.UUID
    notes: Optional[str] = None
    location: Optional[str] = Field(default=None, min_length=1, max_length=255)
    repetition: Optional[Repetition] = None
    student_ids: List[uuid.UUID] = Field(default_factory=list)

    @model_validator(mode="after")
    def end_not_before_start(self) -> "SessionCreate":
        if self.end_datetime < self.start_datetime:
            raise ValueError("end_datetime must not be before start_datetime")
        if any(sid.int == 0 for sid in self.student_ids):
            raise ValueError("student_ids must not contain empty UUIDs")
        return self

    def occurrences(self) -> List[Tuple[datetime, datetime]]:
        """
        Start/end pairs for every session this request creates.

        Without a repetition that is just the requested slot. With one, the
        slot is shifted by `every_n_weeks` weeks at a time and every shifted
        start inside [recur_start, recur_end] is kept.
        """
        if self.repetition is None:
            return [(self.start_datetime, self.end_datetime)]
        step = timedelta(weeks=self.repetition.every_n_weeks)
        duration = self.end_datetime - self.start_datetime
        start = self.start_datetime
        while start < self.repetition.recur_start:
            start += step
        slots = []
        while start <= self.repetition.recur_end:
            slots.append((start, start + duration))
            start += step
        return slots


class SessionUpdate(BaseModel):
    session_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    start_datetime: Optional[UtcDatetime] = None
    end_datetime: Optional[UtcDatetime] = None
    therapist_id: Optional[uuid.UUID] = None
    notes: Optional[str] = None
    location: Optional[str] = Field(default=None, min_length=1, max_length=255)

    @model_validator(mode="after")
    def end_not_before_start(self) -> "SessionUpdate":
        if (
            self.start_datetime is not None
            and self.end_datetime is not None
            and self.end_datetime < self.start_datetime
        ):
            raise ValueError("end_datetime must not be before start_datetime")
        return self


class SessionFilters(BaseModel):
    """`GET /sessions` query parameters; `therapist_id` is required."""
    therapist_id: uuid.UUID
    startdate: Optional[UtcDatetime] = None
    enddate: Optional[UtcDatetime] = None
    month: Optional[int] = Field(default=None, ge=1, le=12)
    year: Optional[int] = Field(default=None, ge=1776, le=2200)
    student_ids: List[uuid.UUID] = Field(default_factory=list)

    @model_validator(mode="after")
    def enddate_not_before_startdate(self) -> "SessionFilters":
        if self.startdate and self.enddate and self.enddate < self.startdate:
            raise ValueError("enddate must not be before startdate")
        return self


# ══════════════════════════════════════════════════════════════════════════
# Attendance & Ratings
# ══════════════════════════════════════════════════════════════════════════


class SessionRating(BaseModel):
    category: Optional[str] = None
    level: Optional[str] = None
    description: Optional[str] = None


def _decode_ratings(v):
    # json_agg columns arrive from asyncpg as text
    if v is None:
        return []
    if isinstance(v, (str, bytes)):
        return json.loads(v)
    return v


class SessionStudent(BaseModel):
    id: int
    session_id: uuid.UUID
    student_id: uuid.UUID
    present: bool
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SessionStudentCreate(BaseModel):
    session_ids: List[uuid.UUID] = Field(min_length=1)
    student_ids: List[uuid.UUID] = Field(min_length=1)
    present: bool = True
    notes: Optional[str] = None


class SessionStudentKey(BaseModel):
    session_id: uuid.UUID
    student_id: uuid.UUID


class RatingInput(BaseModel):
    category: RatingCategory
    level: RatingLevel
    description: str = Field(min_length=1)


class SessionStudentPatch(SessionStudentKey):
    present: Optional[bool] = None
    notes: Optional[str] = None
    ratings: List[RatingInput] = Field(default_factory=list)

    @field_validator("ratings")
    @classmethod
    def one_rating_per_category(cls, v: List[RatingInput]) -> List[RatingInput]:
        categories = [rating.category for rating in v]
        if len(set(categories)) != len(categories):
            raise ValueError("each rating category may appear only once")
        return v


class SessionStudentRatings(BaseModel):
    """Result of a PATCH on an attendance row."""
    session_id: uuid.UUID
    student_id: uuid.UUID
    present: Optional[bool] = None
    notes: Optional[str] = None
    ratings: List[SessionRating] = Field(default_factory=list)

    @field_validator("ratings", mode="before")
    @classmethod
    def decode_ratings(cls, v):
        return _decode_ratings(v)


class SessionStudentDetail(BaseModel):
    """A student in a session, with attendance and ratings."""
    session_id: uuid.UUID
    present: bool
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    ratings: List[SessionRating] = Field(default_factory=list)
    student: Student

    @field_validator("ratings", mode="before")
    @classmethod
    def decode_ratings(cls, v):
        return _decode_ratings(v)


class StudentSessionDetail(BaseModel):
    """A session a student attended (or missed)."""
    student_id: uuid.UUID
    present: bool
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    session: Session


class StudentSessionRatings(BaseModel):
    session_id: uuid.UUID
    student_id: uuid.UUID
    session_date: datetime
    ratings: List[SessionRating] = Field(default_factory=list)

    @field_validator("ratings", mode="before")
    @classmethod
    def decode_ratings(cls, v):
        return _decode_ratings(v)
