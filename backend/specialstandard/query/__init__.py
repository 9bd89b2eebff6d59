"""
SpecialStandard Backend — Query Construction
=============================================

Pure helpers shared by every repository: Pagination, FilterSet, the
SELECT/UPDATE builder and the row mapper. Nothing here performs I/O.
"""

from specialstandard.query.builder import BuiltQuery, build_select, build_update, build_where
from specialstandard.query.filters import Comparison, FilterSet, is_absent
from specialstandard.query.pagination import Pagination, pagination_params
from specialstandard.query.row_mapper import RowMapper, collect_all, collect_one

__all__ = [
    "BuiltQuery",
    "Comparison",
    "FilterSet",
    "Pagination",
    "RowMapper",
    "build_select",
    "build_update",
    "build_where",
    "collect_all",
    "collect_one",
    "is_absent",
    "pagination_params",
]
