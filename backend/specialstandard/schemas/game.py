"""
SpecialStandard Backend — Game Schemas
=======================================

Game content is the question bank the in-session games draw from; game
results record how one attendee (session_student) did on one question.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class GameCategory(str, Enum):
    RECEPTIVE_LANGUAGE = "receptive_language"
    EXPRESSIVE_LANGUAGE = "expressive_language"
    SOCIAL_PRAGMATIC_LANGUAGE = "social_pragmatic_language"
    SPEECH = "speech"


class QuestionType(str, Enum):
    SEQUENCING = "sequencing"
    FOLLOWING_DIRECTIONS = "following_directions"
    WH_QUESTIONS = "wh_questions"
    TRUE_FALSE = "true_false"
    CONCEPTS_SORTING = "concepts_sorting"
    FILL_IN_THE_BLANK = "fill_in_the_blank"
    CATEGORICAL_LANGUAGE = "categorical_language"
    EMOTIONS = "emotions"
    TEAMWORK_TALK = "teamwork_talk"
    EXPRESS_EXCITEMENT_INTEREST = "express_excitement_interest"
    FLUENCY = "fluency"
    ARTICULATION_S = "articulation_s"
    ARTICULATION_L = "articulation_l"


class ExerciseType(str, Enum):
    GAME = "game"
    PDF = "pdf"


DEFAULT_QUESTION_COUNT = 5
DEFAULT_WORDS_COUNT = 4


def _none_to_list(v):
    return [] if v is None else v


class GameContent(BaseModel):
    id: uuid.UUID
    theme_id: uuid.UUID
    week: Optional[int] = None
    category: Optional[str] = None
    question_type: str
    difficulty_level: int
    question: str
    options: List[str] = Field(default_factory=list)
    answer: str
    exercise_type: Optional[str] = None
    applicable_game_types: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("options", "applicable_game_types", mode="before")
    @classmethod
    def null_arrays_to_empty(cls, v):
        return _none_to_list(v)


class GameResult(BaseModel):
    id: uuid.UUID
    session_student_id: int
    content_id: uuid.UUID
    time_taken_sec: int
    completed: bool
    count_of_incorrect_attempts: int
    incorrect_attempts: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("incorrect_attempts", mode="before")
    @classmethod
    def null_attempts_to_empty(cls, v):
        return _none_to_list(v)


class GameResultCreate(BaseModel):
    session_student_id: int = Field(ge=0)
    content_id: uuid.UUID
    time_taken_sec: int = Field(default=0, ge=0)
    completed: Optional[bool] = None
    count_of_incorrect_attempts: Optional[int] = Field(default=None, ge=0)
    incorrect_attempts: Optional[List[str]] = None


class GameContentFilters(BaseModel):
    """`GET /game-contents` query parameters."""
    theme_id: Optional[uuid.UUID] = None
    category: Optional[GameCategory] = None
    question_type: Optional[QuestionType] = None
    difficulty_level: Optional[int] = Field(default=None, ge=1)
    exercise_type: Optional[ExerciseType] = None
    applicable_game_types: List[QuestionType] = Field(default_factory=list)
    question_count: int = Field(default=DEFAULT_QUESTION_COUNT, ge=2)
    words_count: int = Field(default=DEFAULT_WORDS_COUNT, ge=2)


class GameResultFilters(BaseModel):
    """`GET /game-results` query parameters."""
    session_id: Optional[uuid.UUID] = None
    student_id: Optional[uuid.UUID] = None
    category: Optional[GameCategory] = None
    question_type: Optional[QuestionType] = None
    difficulty_level: Optional[int] = Field(default=None, ge=1)
    exercise_type: Optional[ExerciseType] = None
    game_type: Optional[str] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
