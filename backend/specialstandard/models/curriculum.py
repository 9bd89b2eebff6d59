"""
SpecialStandard Backend — Curriculum Tables
============================================

Monthly themes, the teaching resources filed under them, and the question
bank the therapy games draw from.
"""

import uuid
import datetime as dt
from typing import List, Optional

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.dialects.postgresql import ARRAY, UUID
from sqlalchemy.orm import Mapped, mapped_column

from specialstandard.database import Base
from specialstandard.models.mixins import TimestampMixin


class Theme(TimestampMixin, Base):
    __tablename__ = "theme"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, server_default=text("gen_random_uuid()")
    )
    theme_name: Mapped[str] = mapped_column(String(255), nullable=False)
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (
        CheckConstraint("month BETWEEN 1 AND 12", name="ck_theme_month"),
        CheckConstraint("year BETWEEN 1900 AND 2100", name="ck_theme_year"),
    )


class Resource(TimestampMixin, Base):
    __tablename__ = "resource"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, server_default=text("gen_random_uuid()")
    )
    theme_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("theme.id"), nullable=False
    )
    grade_level: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    date: Mapped[Optional[dt.date]] = mapped_column(Date, nullable=True)
    type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    title: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    # Object key in the resource bucket
    content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("idx_resource_theme_id", "theme_id"),
        Index("idx_resource_created_at", text("created_at DESC")),
    )


class GameContent(TimestampMixin, Base):
    __tablename__ = "game_content"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, server_default=text("gen_random_uuid()")
    )
    theme_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("theme.id"), nullable=False
    )
    week: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    category: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    question_type: Mapped[str] = mapped_column(String(50), nullable=False)
    difficulty_level: Mapped[int] = mapped_column(Integer, nullable=False)
    question: Mapped[str] = mapped_column(Text, nullable=False)
    options: Mapped[List[str]] = mapped_column(
        ARRAY(Text), nullable=False, server_default=text("'{}'")
    )
    answer: Mapped[str] = mapped_column(Text, nullable=False)
    exercise_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    applicable_game_types: Mapped[List[str]] = mapped_column(
        ARRAY(Text), nullable=False, server_default=text("'{}'")
    )

    __table_args__ = (Index("idx_game_content_theme_id", "theme_id"),)
