"""
SpecialStandard Backend — Query Builder Tests
==============================================

What we test:
    ✅ Identical inputs give byte-identical SQL and args
    ✅ No WHERE keyword without predicates
    ✅ Parameter numbering continues after static predicates
    ✅ Operators per comparison, substring wrapping, array-typed IN
    ✅ LIMIT/OFFSET bound last; omitted without pagination
    ✅ Partial UPDATE assembly
"""

import uuid

import pytest

from specialstandard.exceptions import ValidationError
from specialstandard.query.builder import build_select, build_update, build_where
from specialstandard.query.filters import Comparison, FilterSet
from specialstandard.query.pagination import Pagination

BASE = "SELECT r.id FROM resource r"
ORDER = "r.created_at DESC, r.id ASC"


class TestBuildSelect:

    def test_is_deterministic(self):
        theme_id = uuid.uuid4()

        def build():
            filters = FilterSet.of([
                ("r.theme_id", Comparison.EQUALS, theme_id),
                ("r.title", Comparison.SUBSTRING, "frog"),
            ])
            return build_select(BASE, filters, ORDER, Pagination(page=2, limit=5))

        first, second = build(), build()
        assert first.sql == second.sql
        assert first.args == second.args

    def test_without_filters_has_no_where(self):
        query = build_select(BASE, FilterSet([("r.title", Comparison.EQUALS)]), ORDER, Pagination())
        assert "WHERE" not in query.sql
        assert query.sql == f"{BASE}\nORDER BY {ORDER}\nLIMIT $1 OFFSET $2"
        assert query.args == [100, 0]

    def test_single_filter(self):
        theme_id = uuid.uuid4()
        filters = FilterSet.of([
            ("r.theme_id", Comparison.EQUALS, theme_id),
            ("r.grade_level", Comparison.EQUALS, None),
            ("r.title", Comparison.SUBSTRING, None),
        ])
        query = build_select(BASE, filters, ORDER, Pagination(page=1, limit=10))
        assert query.sql == (
            f"{BASE}\nWHERE r.theme_id = $1\nORDER BY {ORDER}\nLIMIT $2 OFFSET $3"
        )
        assert query.args == [theme_id, 10, 0]

    def test_operators(self):
        filters = FilterSet.of([
            ("a", Comparison.EQUALS, 1),
            ("b", Comparison.RANGE_FROM, 2),
            ("c", Comparison.RANGE_TO, 3),
            ("d", Comparison.SUBSTRING, "x"),
            ("e", Comparison.IN_SET, ["p", "q"]),
            ("f", Comparison.OVERLAPS, ["r"]),
        ])
        query = build_select(BASE, filters, ORDER, None)
        assert (
            "WHERE a = $1 AND b >= $2 AND c <= $3 AND d ILIKE $4 "
            "AND e = ANY($5) AND f && $6"
        ) in query.sql
        assert query.args == [1, 2, 3, "%x%", ["p", "q"], ["r"]]
        assert "LIMIT" not in query.sql

    def test_static_predicates_come_first(self):
        therapist_id = uuid.uuid4()
        filters = FilterSet.of([("s.month", Comparison.EQUALS, 4)])
        query = build_select(
            "SELECT s.id FROM session s",
            filters,
            "s.start_datetime ASC",
            Pagination(page=3, limit=20),
            where=["s.therapist_id = $1"],
            args=[therapist_id],
        )
        assert "WHERE s.therapist_id = $1 AND s.month = $2" in query.sql
        assert query.sql.endswith("LIMIT $3 OFFSET $4")
        assert query.args == [therapist_id, 4, 20, 40]

    def test_group_by_sits_between_where_and_order(self):
        query = build_select(
            "SELECT s.id, COUNT(*) FROM session s",
            None,
            "s.id",
            Pagination(),
            where=["s.id IS NOT NULL"],
            group_by="s.id",
        )
        lines = query.sql.split("\n")
        assert lines[1:4] == ["WHERE s.id IS NOT NULL", "GROUP BY s.id", "ORDER BY s.id"]

    def test_build_where_empty(self):
        assert build_where(None) == ("", [])


class TestBuildUpdate:

    def test_assignments_follow_changes_order(self):
        key = uuid.uuid4()
        query = build_update("theme", {"theme_name": "Space", "month": 4}, "id", key, "id, month")
        assert query.sql == (
            "UPDATE theme\n"
            "SET theme_name = $1, month = $2, updated_at = NOW()\n"
            "WHERE id = $3\n"
            "RETURNING id, month"
        )
        assert query.args == ["Space", 4, key]

    def test_empty_changes_are_rejected(self):
        with pytest.raises(ValidationError):
            build_update("theme", {}, "id", uuid.uuid4(), "id")
