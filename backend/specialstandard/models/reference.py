"""
SpecialStandard Backend — Reference Tables
===========================================

Districts and their schools are seeded lookup data with integer keys.
Newsletters are date ranges pointing at a PDF in the resource bucket.
"""

import uuid
from datetime import date
from typing import Optional

from sqlalchemy import Date, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from specialstandard.database import Base
from specialstandard.models.mixins import TimestampMixin


class District(TimestampMixin, Base):
    __tablename__ = "district"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)


class School(TimestampMixin, Base):
    __tablename__ = "school"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    district_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("district.id"), nullable=True
    )

    __table_args__ = (Index("idx_school_district_id", "district_id"),)


class Newsletter(Base):
    __tablename__ = "newsletter"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, server_default=text("gen_random_uuid()")
    )
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    # Stored as "s3://bucket/key", "/key" or "key"
    s3_url: Mapped[str] = mapped_column(Text, nullable=False)

    __table_args__ = (Index("idx_newsletter_dates", "start_date", "end_date"),)
