"""
SpecialStandard Backend — Game Routes
======================================

What:  Game content for the therapy games and the results students record.
How:   GET /game-contents draws a random sample of `question_count`
       questions matching the filters. Each question's options are
       `words_count - 1` random wrong answers plus the right one, shuffled.
       Results are listed newest first and filtered through their content
       and enrollment.
"""

from typing import Annotated, List

from fastapi import APIRouter, Depends, Query

from specialstandard.database import Database, get_database
from specialstandard.dependencies import require_user
from specialstandard.query import Pagination, pagination_params
from specialstandard.repositories.game_repository import (
    game_content_repository,
    game_result_repository,
)
from specialstandard.routes import API_PREFIX, ERROR_RESPONSES
from specialstandard.schemas.game import (
    GameContent,
    GameContentFilters,
    GameResult,
    GameResultCreate,
    GameResultFilters,
)

router = APIRouter(
    prefix=API_PREFIX,
    tags=["Games"],
    dependencies=[Depends(require_user)],
    responses=ERROR_RESPONSES,
)


@router.get(
    "/game-contents",
    response_model=List[GameContent],
    summary="Random sample of game questions",
)
async def sample_game_contents(
    filters: Annotated[GameContentFilters, Query()],
    db: Database = Depends(get_database),
) -> List[GameContent]:
    return await game_content_repository.sample(db, filters)


@router.get("/game-results", response_model=List[GameResult], summary="List game results")
async def list_game_results(
    filters: Annotated[GameResultFilters, Query()],
    pagination: Pagination = Depends(pagination_params),
    db: Database = Depends(get_database),
) -> List[GameResult]:
    return await game_result_repository.list(db, filters, pagination)


@router.post(
    "/game-results", response_model=GameResult, status_code=201, summary="Record a game result"
)
async def create_game_result(
    data: GameResultCreate, db: Database = Depends(get_database)
) -> GameResult:
    return await game_result_repository.create(db, data)
