"""
SpecialStandard Backend — Game Repository
==========================================

What:  Samples questions for in-session games and records/lists results.
How:   Content is drawn with `ORDER BY random()` and a question-count
       LIMIT. Each question's options are reduced in SQL to
       `words_count - 1` random distractors plus the correct answer.

Game results are listed newest first and can be narrowed by the session,
the student, or attributes of the question they answered.
"""

from enum import Enum
from typing import Any, List

from specialstandard.database import Database
from specialstandard.query import (
    Comparison,
    FilterSet,
    Pagination,
    RowMapper,
    build_select,
    collect_all,
)
from specialstandard.repositories.base import Repository
from specialstandard.schemas.game import (
    GameContent,
    GameContentFilters,
    GameResult,
    GameResultCreate,
    GameResultFilters,
)

GAME_CONTENT_FIELDS = [
    "id", "theme_id", "week", "category", "question_type", "difficulty_level",
    "question", "options", "answer", "exercise_type", "applicable_game_types",
    "created_at", "updated_at",
]
GAME_RESULT_FIELDS = [
    "id", "session_student_id", "content_id", "time_taken_sec", "completed",
    "count_of_incorrect_attempts", "incorrect_attempts", "created_at", "updated_at",
]

game_content_mapper = RowMapper(GameContent, GAME_CONTENT_FIELDS)
game_result_mapper = RowMapper(GameResult, GAME_RESULT_FIELDS)

# $1 is the number of distractors to keep
_CONTENT_SAMPLE = """SELECT gc.id, gc.theme_id, gc.week, gc.category, gc.question_type, gc.difficulty_level,
       gc.question,
       (SELECT array_agg(opt ORDER BY random())
        FROM (
            (SELECT opt FROM unnest(gc.options) AS opt
             WHERE opt IS DISTINCT FROM gc.answer
             ORDER BY random()
             LIMIT $1)
            UNION ALL
            SELECT gc.answer
        ) AS sampled(opt)),
       gc.answer, gc.exercise_type, gc.applicable_game_types, gc.created_at, gc.updated_at
FROM game_content gc"""

_RESULT_LIST = (
    "SELECT " + ", ".join(f"gr.{field}" for field in GAME_RESULT_FIELDS) + "\n"
    "FROM game_result gr\n"
    "JOIN session_student ss ON gr.session_student_id = ss.id\n"
    "JOIN game_content gc ON gr.content_id = gc.id"
)


def _value(member: Any) -> Any:
    return member.value if isinstance(member, Enum) else member


class GameContentRepository(Repository):
    resource_name = "game content"

    async def sample(self, db: Database, filters: GameContentFilters) -> List[GameContent]:
        filter_set = FilterSet.of([
            ("gc.theme_id", Comparison.EQUALS, filters.theme_id),
            ("gc.category", Comparison.EQUALS, _value(filters.category)),
            ("gc.question_type", Comparison.EQUALS, _value(filters.question_type)),
            ("gc.difficulty_level", Comparison.EQUALS, filters.difficulty_level),
            ("gc.exercise_type", Comparison.EQUALS, _value(filters.exercise_type)),
            (
                "gc.applicable_game_types",
                Comparison.OVERLAPS,
                [_value(t) for t in filters.applicable_game_types],
            ),
        ])
        # page 1 of question_count rows: LIMIT question_count OFFSET 0
        query = build_select(
            _CONTENT_SAMPLE,
            filter_set,
            "random()",
            Pagination(page=1, limit=filters.question_count),
            args=[filters.words_count - 1],
        )
        return collect_all(await self._fetch(db, query.sql, query.args), game_content_mapper)


class GameResultRepository(Repository):
    resource_name = "game result"

    async def list(
        self, db: Database, filters: GameResultFilters, pagination: Pagination
    ) -> List[GameResult]:
        filter_set = FilterSet.of([
            ("ss.session_id", Comparison.EQUALS, filters.session_id),
            ("ss.student_id", Comparison.EQUALS, filters.student_id),
            ("gc.category", Comparison.EQUALS, _value(filters.category)),
            ("gc.question_type", Comparison.EQUALS, _value(filters.question_type)),
            ("gc.difficulty_level", Comparison.EQUALS, filters.difficulty_level),
            ("gc.exercise_type", Comparison.EQUALS, _value(filters.exercise_type)),
            (
                "gc.applicable_game_types",
                Comparison.OVERLAPS,
                [filters.game_type] if filters.game_type else None,
            ),
            ("gr.created_at", Comparison.RANGE_FROM, filters.date_from),
            ("gr.created_at", Comparison.RANGE_TO, filters.date_to),
        ])
        query = build_select(
            _RESULT_LIST, filter_set, "gr.created_at DESC, gr.id ASC", pagination
        )
        return collect_all(await self._fetch(db, query.sql, query.args), game_result_mapper)

    async def create(self, db: Database, data: GameResultCreate) -> GameResult:
        row = await self._fetchrow(
            db,
            "INSERT INTO game_result\n"
            "    (session_student_id, content_id, time_taken_sec, completed,\n"
            "     count_of_incorrect_attempts, incorrect_attempts)\n"
            "VALUES ($1, $2, $3, $4, $5, $6)\n"
            f"RETURNING {', '.join(GAME_RESULT_FIELDS)}",
            [
                data.session_student_id,
                data.content_id,
                data.time_taken_sec,
                data.completed if data.completed is not None else False,
                data.count_of_incorrect_attempts or 0,
                data.incorrect_attempts or [],
            ],
        )
        return game_result_mapper.scan(row)


game_content_repository = GameContentRepository()
game_result_repository = GameResultRepository()
