"""
SpecialStandard Backend — Reference Data Schemas
=================================================

Districts, schools and the monthly newsletter: read-only data maintained
outside the application.
"""

import datetime as dt
import uuid
from typing import Optional

from pydantic import BaseModel


class District(BaseModel):
    id: int
    name: str
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None


class School(BaseModel):
    id: int
    name: str
    district_id: Optional[int] = None
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None


class Newsletter(BaseModel):
    id: uuid.UUID
    start_date: dt.date
    end_date: dt.date
    s3_url: str


class NewsletterResponse(Newsletter):
    presigned_url: str
