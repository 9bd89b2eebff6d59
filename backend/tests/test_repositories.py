"""
SpecialStandard Backend — Repository Tests
===========================================

What we test:
    ✅ Themes: column rename on update, search as ILIKE
    ✅ Students: graduated students hidden by default, promotion, attendance
    ✅ Sessions: therapist scope first, recurring creation, series delete
    ✅ Session students: rating upsert arguments, missing row → 404
    ✅ Games: sampling arguments (distractors, question count)
    ✅ Verification codes: consume hit / miss
    ✅ Reference data: unpaginated lists, newsletter lookup

Repositories run against FakeDatabase; assertions are on the SQL text,
the bound arguments and the decoded records.
"""

import json
import uuid
from datetime import date, datetime, timedelta, timezone

import pytest

from specialstandard.exceptions import NotFoundError, ValidationError
from specialstandard.query import Pagination
from specialstandard.repositories.game_repository import (
    game_content_repository,
    game_result_repository,
)
from specialstandard.repositories.reference_repository import (
    newsletter_repository,
    school_repository,
)
from specialstandard.repositories.session_repository import session_repository
from specialstandard.repositories.session_student_repository import session_student_repository
from specialstandard.repositories.student_repository import student_repository
from specialstandard.repositories.theme_repository import theme_repository
from specialstandard.repositories.therapist_repository import therapist_repository
from specialstandard.repositories.verification_repository import verification_repository
from specialstandard.schemas.game import GameContentFilters, GameResultCreate, GameResultFilters
from specialstandard.schemas.session import (
    SessionCreate,
    SessionFilters,
    SessionStudentPatch,
)
from specialstandard.schemas.student import (
    AttendanceFilters,
    PromoteStudentsInput,
    StudentFilters,
    StudentRatingFilters,
)
from specialstandard.schemas.theme import ThemeFilters, ThemeUpdate

from conftest import NOW, TEST_USER_ID, session_row, student_row


# ══════════════════════════════════════════════════════════════════════════
# Themes & Therapists
# ══════════════════════════════════════════════════════════════════════════

class TestThemeRepository:

    @pytest.mark.asyncio
    async def test_search_is_substring_on_theme_name(self, fake_db):
        await theme_repository.list(fake_db, ThemeFilters(year=2025, search="ocean"), Pagination())
        assert "WHERE year = $1 AND theme_name ILIKE $2" in fake_db.last_sql
        assert fake_db.last_args == [2025, "%ocean%", 100, 0]

    @pytest.mark.asyncio
    async def test_update_renames_name_column(self, fake_db):
        theme_id = uuid.uuid4()
        fake_db.row = (theme_id, "Spring", 4, 2025, NOW, NOW)

        theme = await theme_repository.update(fake_db, theme_id, ThemeUpdate(name="Spring"))

        assert theme.name == "Spring"
        assert "SET theme_name = $1" in fake_db.last_sql

    @pytest.mark.asyncio
    async def test_update_of_missing_theme_is_not_found(self, fake_db):
        with pytest.raises(NotFoundError):
            await theme_repository.update(fake_db, uuid.uuid4(), ThemeUpdate(month=5))


class TestTherapistRepository:

    @pytest.mark.asyncio
    async def test_detail_decodes_district_and_school_names(self, fake_db):
        fake_db.row = (
            TEST_USER_ID, "Grace", "Hopper", "grace@example.com", True,
            [1, 2], 7, NOW, NOW, "Northside", ["Maple Elementary", "Oak Middle"],
        )
        detail = await therapist_repository.get(fake_db, TEST_USER_ID)
        assert detail.district_name == "Northside"
        assert detail.school_names == ["Maple Elementary", "Oak Middle"]

    @pytest.mark.asyncio
    async def test_find_by_email_missing_is_none(self, fake_db):
        assert await therapist_repository.find_by_email(fake_db, "nobody@example.com") is None


# ══════════════════════════════════════════════════════════════════════════
# Students
# ══════════════════════════════════════════════════════════════════════════

class TestStudentRepository:

    @pytest.mark.asyncio
    async def test_graduated_students_hidden_by_default(self, fake_db):
        fake_db.rows = [student_row(), student_row(first_name="Alan")]

        students = await student_repository.list(fake_db, StudentFilters(), Pagination())

        assert "WHERE s.grade != -1" in fake_db.last_sql
        assert fake_db.last_args == [100, 0]
        assert [s.first_name for s in students] == ["Ada", "Alan"]
        assert students[0].school_name == "Maple Elementary"

    @pytest.mark.asyncio
    async def test_explicit_graduated_grade_lists_them(self, fake_db):
        await student_repository.list(fake_db, StudentFilters(grade=-1), Pagination())
        assert "s.grade != -1" not in fake_db.last_sql
        assert "WHERE s.grade = $1" in fake_db.last_sql
        assert fake_db.last_args[0] == -1

    @pytest.mark.asyncio
    async def test_name_search_spans_first_and_last_name(self, fake_db):
        await student_repository.list(fake_db, StudentFilters(name="ada love"), Pagination())
        assert "CONCAT(s.first_name, ' ', s.last_name) ILIKE $1" in fake_db.last_sql
        assert fake_db.last_args[0] == "%ada love%"

    @pytest.mark.asyncio
    async def test_promote_returns_touched_rows(self, fake_db):
        fake_db.tag = "UPDATE 4"
        excluded = [uuid.uuid4()]

        promoted = await student_repository.promote(
            fake_db,
            PromoteStudentsInput(therapist_id=TEST_USER_ID, excluded_student_ids=excluded),
        )

        assert promoted == 4
        assert "WHEN grade = 12 THEN -1" in fake_db.last_sql
        assert fake_db.last_args == [TEST_USER_ID, excluded]

    @pytest.mark.asyncio
    async def test_attendance_counts(self, fake_db):
        student_id = uuid.uuid4()
        fake_db.row = (3, 5)

        attendance = await student_repository.attendance(
            fake_db, student_id, AttendanceFilters(date_from=date(2025, 1, 1))
        )

        assert (attendance.present_count, attendance.total_count) == (3, 5)
        assert "WHERE ss.student_id = $1 AND s.start_datetime::date >= $2" in fake_db.last_sql
        assert fake_db.last_args == [student_id, date(2025, 1, 1)]

    @pytest.mark.asyncio
    async def test_ratings_group_per_session(self, fake_db):
        student_id = uuid.uuid4()
        session_id = uuid.uuid4()
        fake_db.rows = [(
            session_id, student_id, NOW,
            json.dumps([{"category": "engagement", "level": "high", "description": "focused"}]),
        )]

        result = await student_repository.ratings(
            fake_db, student_id, StudentRatingFilters(category=["engagement"]), Pagination()
        )

        assert result[0].ratings[0].level == "high"
        assert "sr.category = ANY($2)" in fake_db.last_sql
        assert fake_db.last_sql.index("GROUP BY") < fake_db.last_sql.index("ORDER BY")
        assert fake_db.last_args == [student_id, ["engagement"], 100, 0]


# ══════════════════════════════════════════════════════════════════════════
# Sessions
# ══════════════════════════════════════════════════════════════════════════

class TestSessionRepository:

    def setup_method(self):
        self.start = datetime(2025, 3, 3, 10, 0, tzinfo=timezone.utc)

    @pytest.mark.asyncio
    async def test_list_is_scoped_to_therapist(self, fake_db):
        students = [uuid.uuid4()]
        await session_repository.list(
            fake_db,
            SessionFilters(therapist_id=TEST_USER_ID, month=3, student_ids=students),
            Pagination(page=2, limit=20),
        )
        sql = fake_db.last_sql
        assert "WHERE s.therapist_id = $1 AND EXTRACT(MONTH FROM s.start_datetime) = $2" in sql
        assert "&& $3" in sql
        assert fake_db.last_args == [TEST_USER_ID, 3, students, 20, 20]

    @pytest.mark.asyncio
    async def test_single_session_has_no_parent(self, fake_db):
        fake_db.rows = [session_row()]
        data = SessionCreate(
            session_name="Articulation group",
            start_datetime=self.start,
            end_datetime=self.start + timedelta(hours=1),
            therapist_id=TEST_USER_ID,
        )

        sessions = await session_repository.create(fake_db, data)

        args = fake_db.last_args
        assert len(sessions) == 1
        assert args[4] is None
        assert args[5] == [self.start]
        assert args[7] == []

    @pytest.mark.asyncio
    async def test_weekly_repetition_creates_every_occurrence(self, fake_db):
        parent = uuid.uuid4()
        fake_db.rows = [session_row(parent_id=parent) for _ in range(4)]
        student_ids = [uuid.uuid4(), uuid.uuid4()]
        data = SessionCreate(
            session_name="Articulation group",
            start_datetime=self.start,
            end_datetime=self.start + timedelta(hours=1),
            therapist_id=TEST_USER_ID,
            repetition={
                "recur_start": self.start,
                "recur_end": self.start + timedelta(weeks=3, hours=1),
                "every_n_weeks": 1,
            },
            student_ids=student_ids,
        )

        sessions = await session_repository.create(fake_db, data)

        args = fake_db.last_args
        assert len(sessions) == 4
        assert isinstance(args[4], uuid.UUID)
        assert args[5] == [self.start + timedelta(weeks=n) for n in range(4)]
        assert args[6] == [self.start + timedelta(weeks=n, hours=1) for n in range(4)]
        assert args[7] == student_ids

    @pytest.mark.asyncio
    async def test_repetition_window_without_occurrences_is_rejected(self, fake_db):
        data = SessionCreate(
            session_name="Articulation group",
            start_datetime=self.start,
            end_datetime=self.start + timedelta(hours=1),
            therapist_id=TEST_USER_ID,
            repetition={
                "recur_start": self.start + timedelta(days=1),
                "recur_end": self.start + timedelta(days=2),
                "every_n_weeks": 1,
            },
        )
        with pytest.raises(ValidationError):
            await session_repository.create(fake_db, data)
        assert fake_db.calls == []

    @pytest.mark.asyncio
    async def test_delete_recurring_counts_rows(self, fake_db):
        fake_db.tag = "DELETE 3"
        assert await session_repository.delete_recurring(fake_db, uuid.uuid4()) == 3

    @pytest.mark.asyncio
    async def test_delete_recurring_of_missing_session(self, fake_db):
        fake_db.tag = "DELETE 0"
        with pytest.raises(NotFoundError):
            await session_repository.delete_recurring(fake_db, uuid.uuid4())


class TestSessionStudentRepository:

    @pytest.mark.asyncio
    async def test_patch_binds_ratings_as_parallel_arrays(self, fake_db):
        key = {"session_id": uuid.uuid4(), "student_id": uuid.uuid4()}
        fake_db.row = (
            key["session_id"], key["student_id"], True, None,
            '[{"category": "verbal_cue", "level": "minimal", "description": "needed one"}]',
        )
        patch = SessionStudentPatch(
            **key,
            present=True,
            ratings=[{"category": "verbal_cue", "level": "minimal", "description": "needed one"}],
        )

        result = await session_student_repository.patch(fake_db, patch)

        assert fake_db.last_args[4:] == [["verbal_cue"], ["minimal"], ["needed one"]]
        assert result.ratings[0].category == "verbal_cue"

    @pytest.mark.asyncio
    async def test_patch_of_unlinked_student_is_not_found(self, fake_db):
        patch = SessionStudentPatch(session_id=uuid.uuid4(), student_id=uuid.uuid4(), notes="x")
        with pytest.raises(NotFoundError):
            await session_student_repository.patch(fake_db, patch)


# ══════════════════════════════════════════════════════════════════════════
# Games, Verification, Reference Data
# ══════════════════════════════════════════════════════════════════════════

class TestGameRepositories:

    @pytest.mark.asyncio
    async def test_sample_binds_distractors_and_question_count(self, fake_db):
        theme_id = uuid.uuid4()
        await game_content_repository.sample(
            fake_db,
            GameContentFilters(theme_id=theme_id, question_count=8, words_count=4),
        )
        assert fake_db.last_args == [3, theme_id, 8, 0]
        assert "ORDER BY random()" in fake_db.last_sql
        assert "WHERE gc.theme_id = $2" in fake_db.last_sql

    @pytest.mark.asyncio
    async def test_result_list_game_type_overlaps(self, fake_db):
        await game_result_repository.list(
            fake_db, GameResultFilters(game_type="sequencing"), Pagination()
        )
        assert "gc.applicable_game_types && $1" in fake_db.last_sql
        assert fake_db.last_args == [["sequencing"], 100, 0]

    @pytest.mark.asyncio
    async def test_result_create_defaults(self, fake_db):
        content_id = uuid.uuid4()
        fake_db.row = (uuid.uuid4(), 12, content_id, 30, False, 0, None, NOW, NOW)

        result = await game_result_repository.create(
            fake_db, GameResultCreate(session_student_id=12, content_id=content_id, time_taken_sec=30)
        )

        assert fake_db.last_args[3:] == [False, 0, []]
        assert result.incorrect_attempts == []


class TestVerificationRepository:

    @pytest.mark.asyncio
    async def test_consume_hit(self, fake_db):
        fake_db.value = uuid.uuid4()
        assert await verification_repository.consume(fake_db, TEST_USER_ID, "123456") is True

    @pytest.mark.asyncio
    async def test_consume_miss(self, fake_db):
        assert await verification_repository.consume(fake_db, TEST_USER_ID, "123456") is False


class TestReferenceRepositories:

    @pytest.mark.asyncio
    async def test_school_list_is_unpaginated(self, fake_db):
        await school_repository.list(fake_db, district_id=3)
        assert "LIMIT" not in fake_db.last_sql
        assert fake_db.last_args == [3]

    @pytest.mark.asyncio
    async def test_newsletter_outside_any_window(self, fake_db):
        with pytest.raises(NotFoundError) as exc_info:
            await newsletter_repository.get_by_date(fake_db, date(2025, 7, 4))
        assert exc_info.value.context["resource_id"] == "2025-07-04"
