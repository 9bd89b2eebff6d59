"""
SpecialStandard Backend — Table Definitions
============================================

SQLAlchemy 2.0 declarative models for every table. They exist for schema
management (Alembic reads `Base.metadata`); runtime queries are raw `$n`
SQL in the repositories.

Importing this package registers every table with `Base.metadata`.
"""

from specialstandard.models.curriculum import GameContent, Resource, Theme
from specialstandard.models.reference import District, Newsletter, School
from specialstandard.models.session import (
    GameResult,
    Session,
    SessionRating,
    SessionResource,
    SessionStudent,
)
from specialstandard.models.student import Student
from specialstandard.models.therapist import Therapist, VerificationCode

__all__ = [
    "District",
    "GameContent",
    "GameResult",
    "Newsletter",
    "Resource",
    "School",
    "Session",
    "SessionRating",
    "SessionResource",
    "SessionStudent",
    "Student",
    "Theme",
    "Therapist",
    "VerificationCode",
]
