"""
SpecialStandard Backend — Row Mapper Tests
===========================================

What we test:
    ✅ Positional decode, parent and embedded child from one row
    ✅ Zero rows → [] (serialized as `[]`, never `null`)
    ✅ Column count / type drift → InternalError, no partial decode
"""

import json
import uuid

import pytest
from pydantic import TypeAdapter

from specialstandard.exceptions import InternalError
from specialstandard.query.row_mapper import RowMapper, collect_all, collect_one
from specialstandard.repositories.resource_repository import (
    resource_mapper,
    resource_with_theme_mapper,
)
from specialstandard.schemas.resource import ResourceWithTheme

from conftest import resource_row


class TestScan:

    def test_joined_row_fills_parent_and_child(self):
        theme_id = uuid.uuid4()
        row = resource_row(theme_id, 4)
        resource = resource_with_theme_mapper.scan(row)
        assert resource.theme_id == theme_id
        assert resource.title == "Worksheet 04"
        assert resource.theme.theme_name == "Ocean Animals"
        assert resource.theme.month == 3
        assert resource.presigned_url is None

    def test_width_counts_children(self):
        assert resource_with_theme_mapper.width == resource_mapper.width + 5

    def test_column_count_mismatch(self):
        row = resource_row(uuid.uuid4(), with_theme=False)
        with pytest.raises(InternalError) as exc_info:
            resource_with_theme_mapper.scan(row)
        assert exc_info.value.context["expected_columns"] == 15
        assert exc_info.value.context["actual_columns"] == 10

    def test_type_mismatch(self):
        row = ("not-a-uuid",) + resource_row(uuid.uuid4(), with_theme=False)[1:]
        with pytest.raises(InternalError):
            resource_mapper.scan(row)


class TestCollect:

    def test_zero_rows_is_an_empty_list(self):
        assert collect_all([], resource_mapper) == []
        assert collect_all(None, resource_mapper) == []

    def test_empty_result_serializes_as_json_array(self):
        records = collect_all([], resource_with_theme_mapper)
        payload = TypeAdapter(list[ResourceWithTheme]).dump_json(records)
        assert json.loads(payload) == []

    def test_collect_one_leaves_none_to_caller(self):
        assert collect_one(None, resource_mapper) is None

    def test_generic_mapper(self):
        from pydantic import BaseModel

        class Pair(BaseModel):
            left: int
            right: str

        assert RowMapper(Pair, ["left", "right"]).scan((1, "a")) == Pair(left=1, right="a")
