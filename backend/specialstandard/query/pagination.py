"""
SpecialStandard Backend — Pagination
=====================================

What:  Immutable page/limit value with offset arithmetic.
How:   `Pagination()` is page 1 with the default limit; `from_query` applies
       caller-supplied values field by field. Every construction validates,
       so an invalid instance never reaches the query builder.
Who:   Built per request by the `pagination_params` dependency and passed to
       repository list methods.
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Query

from specialstandard.config import settings
from specialstandard.exceptions import ValidationError

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 100
# LIMIT and OFFSET bind as Postgres bigint
MAX_BIGINT = 2**63 - 1


@dataclass(frozen=True)
class Pagination:
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    def __post_init__(self) -> None:
        self.validate(self.page, self.limit)

    @staticmethod
    def validate(page: int, limit: int, max_limit: Optional[int] = None) -> None:
        """Raise ValidationError unless both values are positive and bigint-sized (and within the cap, if set)."""
        if isinstance(page, bool) or not isinstance(page, int) or page < 1:
            raise ValidationError(message="page must be a positive integer", field="page")
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise ValidationError(message="limit must be a positive integer", field="limit")
        if limit > MAX_BIGINT:
            raise ValidationError(message="limit is out of range", field="limit")
        if (page - 1) * limit > MAX_BIGINT:
            raise ValidationError(message="page is out of range", field="page")
        if max_limit is not None and limit > max_limit:
            raise ValidationError(
                message=f"limit must not exceed {max_limit}",
                field="limit",
                context={"max_limit": max_limit},
            )

    @classmethod
    def from_query(
        cls,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        default_limit: int = DEFAULT_LIMIT,
        max_limit: Optional[int] = None,
    ) -> "Pagination":
        resolved_page = DEFAULT_PAGE if page is None else page
        resolved_limit = default_limit if limit is None else limit
        cls.validate(resolved_page, resolved_limit, max_limit)
        return cls(page=resolved_page, limit=resolved_limit)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def pagination_params(
    page: Optional[int] = Query(default=None, description="1-based page number"),
    limit: Optional[int] = Query(default=None, description="Rows per page"),
) -> Pagination:
    """FastAPI dependency: `?page=&limit=` → validated Pagination."""
    return Pagination.from_query(
        page=page,
        limit=limit,
        default_limit=settings.pagination_default_limit,
        max_limit=settings.pagination_max_limit,
    )
