"""Create the practice schema

Revision ID: 001
Revises: None
Create Date: 2025-09-01 00:00:00.000000+00:00

What:  Creates every table: reference data, therapists, students, themes,
       resources, sessions and enrollments, ratings, game content and
       results, newsletters and email verification codes.
How:   Parent tables first; downgrade() drops in reverse order.

Rollback: downgrade() drops all tables (destructive, all data lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

RATING_CATEGORIES = ("visual_cue", "verbal_cue", "gestural_cue", "engagement")
RATING_LEVELS = ("minimal", "moderate", "maximal", "low", "high")


def _uuid_pk() -> sa.Column:
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=True),
        server_default=sa.text("gen_random_uuid()"),
        primary_key=True,
    )


def _timestamps() -> list:
    return [
        sa.Column(
            "created_at",
            postgresql.TIMESTAMP(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            postgresql.TIMESTAMP(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def _in_list(column: str, values) -> str:
    quoted = ", ".join(f"'{v}'" for v in values)
    return f"{column} IN ({quoted})"


def upgrade() -> None:
    # gen_random_uuid() is built in from PostgreSQL 13; pgcrypto covers older servers
    op.execute("CREATE EXTENSION IF NOT EXISTS pgcrypto")

    # ── Reference data ────────────────────────────────────────────────────
    op.create_table(
        "district",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        *_timestamps(),
    )
    op.create_table(
        "school",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("district_id", sa.Integer(), sa.ForeignKey("district.id"), nullable=True),
        *_timestamps(),
    )
    op.create_index("idx_school_district_id", "school", ["district_id"])

    op.create_table(
        "newsletter",
        _uuid_pk(),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("s3_url", sa.Text(), nullable=False),
    )
    op.create_index("idx_newsletter_dates", "newsletter", ["start_date", "end_date"])

    # ── Therapists ────────────────────────────────────────────────────────
    op.create_table(
        "therapist",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("active", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        sa.Column(
            "schools",
            postgresql.ARRAY(sa.Integer()),
            server_default=sa.text("'{}'"),
            nullable=False,
        ),
        sa.Column("district_id", sa.Integer(), sa.ForeignKey("district.id"), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "verification_codes",
        _uuid_pk(),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("code", sa.String(6), nullable=False),
        sa.Column("expires_at", postgresql.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("used", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column(
            "created_at",
            postgresql.TIMESTAMP(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    )
    op.create_index(
        "idx_verification_codes_user_code", "verification_codes", ["user_id", "code"]
    )

    # ── Students ──────────────────────────────────────────────────────────
    op.create_table(
        "student",
        _uuid_pk(),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("dob", sa.Date(), nullable=True),
        sa.Column(
            "therapist_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("therapist.id"),
            nullable=False,
        ),
        sa.Column("school_id", sa.Integer(), sa.ForeignKey("school.id"), nullable=True),
        sa.Column("grade", sa.Integer(), nullable=True),
        sa.Column("iep", sa.Text(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("grade BETWEEN -1 AND 12", name="ck_student_grade"),
    )
    op.create_index("idx_student_therapist_id", "student", ["therapist_id"])

    # ── Curriculum ────────────────────────────────────────────────────────
    op.create_table(
        "theme",
        _uuid_pk(),
        sa.Column("theme_name", sa.String(255), nullable=False),
        sa.Column("month", sa.Integer(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("month BETWEEN 1 AND 12", name="ck_theme_month"),
        sa.CheckConstraint("year BETWEEN 1900 AND 2100", name="ck_theme_year"),
    )

    op.create_table(
        "resource",
        _uuid_pk(),
        sa.Column(
            "theme_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("theme.id"), nullable=False
        ),
        sa.Column("grade_level", sa.Integer(), nullable=True),
        sa.Column("date", sa.Date(), nullable=True),
        sa.Column("type", sa.String(100), nullable=True),
        sa.Column("title", sa.Text(), nullable=True),
        sa.Column("category", sa.String(100), nullable=True),
        sa.Column("content", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("idx_resource_theme_id", "resource", ["theme_id"])
    op.create_index("idx_resource_created_at", "resource", [sa.text("created_at DESC")])

    op.create_table(
        "game_content",
        _uuid_pk(),
        sa.Column(
            "theme_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("theme.id"), nullable=False
        ),
        sa.Column("week", sa.Integer(), nullable=True),
        sa.Column("category", sa.String(50), nullable=True),
        sa.Column("question_type", sa.String(50), nullable=False),
        sa.Column("difficulty_level", sa.Integer(), nullable=False),
        sa.Column("question", sa.Text(), nullable=False),
        sa.Column(
            "options", postgresql.ARRAY(sa.Text()), server_default=sa.text("'{}'"), nullable=False
        ),
        sa.Column("answer", sa.Text(), nullable=False),
        sa.Column("exercise_type", sa.String(50), nullable=True),
        sa.Column(
            "applicable_game_types",
            postgresql.ARRAY(sa.Text()),
            server_default=sa.text("'{}'"),
            nullable=False,
        ),
        *_timestamps(),
    )
    op.create_index("idx_game_content_theme_id", "game_content", ["theme_id"])

    # ── Sessions ──────────────────────────────────────────────────────────
    op.create_table(
        "session",
        _uuid_pk(),
        sa.Column("session_name", sa.String(255), nullable=False),
        sa.Column("start_datetime", postgresql.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("end_datetime", postgresql.TIMESTAMP(timezone=True), nullable=False),
        sa.Column(
            "therapist_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("therapist.id"),
            nullable=False,
        ),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("session_parent_id", postgresql.UUID(as_uuid=True), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("end_datetime >= start_datetime", name="ck_session_time_order"),
    )
    op.create_index("idx_session_therapist_start", "session", ["therapist_id", "start_datetime"])
    op.create_index("idx_session_parent_id", "session", ["session_parent_id"])

    op.create_table(
        "session_student",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "session_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("session.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "student_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("student.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("present", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("session_id", "student_id", name="uq_session_student"),
    )
    op.create_index("idx_session_student_student_id", "session_student", ["student_id"])

    op.create_table(
        "session_rating",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "session_student_id",
            sa.Integer(),
            sa.ForeignKey("session_student.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("category", sa.String(50), nullable=False),
        sa.Column("level", sa.String(50), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint(
            "session_student_id", "category", name="uq_session_rating_category"
        ),
        sa.CheckConstraint(
            _in_list("category", RATING_CATEGORIES), name="ck_session_rating_category"
        ),
        sa.CheckConstraint(_in_list("level", RATING_LEVELS), name="ck_session_rating_level"),
    )

    op.create_table(
        "session_resource",
        sa.Column(
            "session_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("session.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "resource_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("resource.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        *_timestamps(),
    )

    op.create_table(
        "game_result",
        _uuid_pk(),
        sa.Column(
            "session_student_id",
            sa.Integer(),
            sa.ForeignKey("session_student.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "content_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("game_content.id"),
            nullable=False,
        ),
        sa.Column("time_taken_sec", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("completed", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column(
            "count_of_incorrect_attempts",
            sa.Integer(),
            server_default=sa.text("0"),
            nullable=False,
        ),
        sa.Column(
            "incorrect_attempts",
            postgresql.ARRAY(sa.Text()),
            server_default=sa.text("'{}'"),
            nullable=False,
        ),
        *_timestamps(),
    )
    op.create_index(
        "idx_game_result_session_student_id", "game_result", ["session_student_id"]
    )
    op.create_index("idx_game_result_created_at", "game_result", [sa.text("created_at DESC")])


def downgrade() -> None:
    for table in (
        "game_result",
        "session_resource",
        "session_rating",
        "session_student",
        "session",
        "game_content",
        "resource",
        "theme",
        "student",
        "verification_codes",
        "therapist",
        "newsletter",
        "school",
        "district",
    ):
        op.drop_table(table)
