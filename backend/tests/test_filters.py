"""
SpecialStandard Backend — Filter Set Tests
===========================================

What we test:
    ✅ Absent values (None, blank strings, zero UUID, empty lists) are skipped
    ✅ Zero and False are present values
    ✅ Descriptors come back in declaration order whatever the add order
    ✅ Undeclared or duplicate filters are programmer errors
"""

import uuid

import pytest

from specialstandard.query.filters import ZERO_UUID, Comparison, FilterSet, is_absent


def _resource_filters() -> FilterSet:
    return FilterSet([
        ("r.theme_id", Comparison.EQUALS),
        ("r.grade_level", Comparison.EQUALS),
        ("r.title", Comparison.SUBSTRING),
        ("r.date", Comparison.RANGE_FROM),
        ("r.category", Comparison.IN_SET),
    ])


class TestAbsentValues:

    @pytest.mark.parametrize("value", [None, "", "   ", ZERO_UUID, [], (), set()])
    def test_absent_values_leave_the_set_empty(self, value):
        filters = FilterSet([("col", Comparison.EQUALS)])
        filters.add("col", Comparison.EQUALS, value)
        assert filters.is_empty()
        assert len(filters) == 0

    @pytest.mark.parametrize("value", [0, False, "x", uuid.uuid4(), ["a"]])
    def test_present_values(self, value):
        assert not is_absent(value)

    def test_grade_zero_is_a_real_filter(self):
        filters = _resource_filters().add("r.grade_level", Comparison.EQUALS, 0)
        assert [d.value for d in filters.descriptors()] == [0]


class TestDeclarationOrder:

    def test_add_order_does_not_change_descriptor_order(self):
        theme_id = uuid.uuid4()
        forwards = (
            _resource_filters()
            .add("r.theme_id", Comparison.EQUALS, theme_id)
            .add("r.title", Comparison.SUBSTRING, "frog")
        )
        backwards = (
            _resource_filters()
            .add("r.title", Comparison.SUBSTRING, "frog")
            .add("r.theme_id", Comparison.EQUALS, theme_id)
        )
        assert forwards.descriptors() == backwards.descriptors()
        assert [d.column for d in backwards.descriptors()] == ["r.theme_id", "r.title"]

    def test_same_column_with_two_comparisons(self):
        filters = FilterSet.of([
            ("s.start", Comparison.RANGE_FROM, "2025-01-01"),
            ("s.start", Comparison.RANGE_TO, "2025-01-31"),
        ])
        assert [d.comparison for d in filters.descriptors()] == [
            Comparison.RANGE_FROM,
            Comparison.RANGE_TO,
        ]

    def test_set_values_are_copied_to_lists(self):
        filters = _resource_filters().add("r.category", Comparison.IN_SET, ("a", "b"))
        assert filters.descriptors()[0].value == ["a", "b"]


class TestDeclarationErrors:

    def test_undeclared_filter_raises(self):
        with pytest.raises(ValueError):
            _resource_filters().add("r.content", Comparison.EQUALS, "x")

    def test_duplicate_declaration_raises(self):
        with pytest.raises(ValueError):
            FilterSet([("a", Comparison.EQUALS), ("a", Comparison.EQUALS)])
