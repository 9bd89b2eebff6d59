"""
SpecialStandard Backend — Session Tables
=========================================

What:  Sessions, the students enrolled in them, per-enrollment ratings,
       attached resources and game results.
How:   Enrollment rows (`session_student`) carry an integer key that
       ratings and game results reference. Deleting a session or a student
       cascades to its enrollments and from there to ratings.

Recurring series:
    Occurrences created together share `session_parent_id`; a one-off
    session has NULL.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.dialects.postgresql import ARRAY, TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column

from specialstandard.database import Base
from specialstandard.models.mixins import TimestampMixin

RATING_CATEGORIES = ("visual_cue", "verbal_cue", "gestural_cue", "engagement")
RATING_LEVELS = ("minimal", "moderate", "maximal", "low", "high")


def _in_list(column: str, values) -> str:
    quoted = ", ".join(f"'{v}'" for v in values)
    return f"{column} IN ({quoted})"


class Session(TimestampMixin, Base):
    __tablename__ = "session"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, server_default=text("gen_random_uuid()")
    )
    session_name: Mapped[str] = mapped_column(String(255), nullable=False)
    start_datetime: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    end_datetime: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    therapist_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("therapist.id"), nullable=False
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    session_parent_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), nullable=True
    )

    __table_args__ = (
        CheckConstraint("end_datetime >= start_datetime", name="ck_session_time_order"),
        Index("idx_session_therapist_start", "therapist_id", "start_datetime"),
        Index("idx_session_parent_id", "session_parent_id"),
    )


class SessionStudent(TimestampMixin, Base):
    __tablename__ = "session_student"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    session_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("session.id", ondelete="CASCADE"), nullable=False
    )
    student_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("student.id", ondelete="CASCADE"), nullable=False
    )
    present: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("true"))
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint("session_id", "student_id", name="uq_session_student"),
        Index("idx_session_student_student_id", "student_id"),
    )


class SessionRating(TimestampMixin, Base):
    __tablename__ = "session_rating"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    session_student_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("session_student.id", ondelete="CASCADE"), nullable=False
    )
    category: Mapped[str] = mapped_column(String(50), nullable=False)
    level: Mapped[str] = mapped_column(String(50), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)

    __table_args__ = (
        # One rating per category per enrollment; the ratings upsert targets this
        UniqueConstraint("session_student_id", "category", name="uq_session_rating_category"),
        CheckConstraint(_in_list("category", RATING_CATEGORIES), name="ck_session_rating_category"),
        CheckConstraint(_in_list("level", RATING_LEVELS), name="ck_session_rating_level"),
    )


class SessionResource(TimestampMixin, Base):
    __tablename__ = "session_resource"

    session_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("session.id", ondelete="CASCADE"), primary_key=True
    )
    resource_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("resource.id", ondelete="CASCADE"), primary_key=True
    )


class GameResult(TimestampMixin, Base):
    __tablename__ = "game_result"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, server_default=text("gen_random_uuid()")
    )
    session_student_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("session_student.id", ondelete="CASCADE"), nullable=False
    )
    content_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("game_content.id"), nullable=False
    )
    time_taken_sec: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("false"))
    count_of_incorrect_attempts: Mapped[int] = mapped_column(
        Integer, nullable=False, server_default=text("0")
    )
    incorrect_attempts: Mapped[List[str]] = mapped_column(
        ARRAY(Text), nullable=False, server_default=text("'{}'")
    )

    __table_args__ = (
        Index("idx_game_result_session_student_id", "session_student_id"),
        Index("idx_game_result_created_at", text("created_at DESC")),
    )
