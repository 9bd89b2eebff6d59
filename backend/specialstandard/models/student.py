"""
SpecialStandard Backend — Student Table
========================================

Grades run 0 (kindergarten) to 12; -1 marks a graduated student, who is
hidden from the default student list.
"""

import uuid
from datetime import date
from typing import Optional

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from specialstandard.database import Base
from specialstandard.models.mixins import TimestampMixin


class Student(TimestampMixin, Base):
    __tablename__ = "student"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, server_default=text("gen_random_uuid()")
    )
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    dob: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    therapist_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("therapist.id"), nullable=False
    )
    school_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("school.id"), nullable=True
    )
    grade: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    iep: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint("grade BETWEEN -1 AND 12", name="ck_student_grade"),
        Index("idx_student_therapist_id", "therapist_id"),
    )
