"""
SpecialStandard Backend — Filter Set
=====================================

What:  An ordered collection of optional WHERE predicates.
How:   A FilterSet is declared with the `(column, comparison)` pairs its call
       site may filter on. `add()` records a predicate only when the value is
       present; `descriptors()` returns them in declaration order, whatever
       order they were added in, so the generated SQL and its parameter
       numbering depend only on which filters are present.

Absent values:
    None, empty or whitespace-only strings, the all-zero UUID, and empty
    lists/tuples/sets. Zero and False are present values (grade 0 is
    kindergarten, present=false is a real attendance filter).
"""

import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Sequence, Tuple

ZERO_UUID = uuid.UUID(int=0)


class Comparison(str, Enum):
    EQUALS = "equals"
    RANGE_FROM = "range_from"
    RANGE_TO = "range_to"
    SUBSTRING = "substring"
    IN_SET = "in_set"
    OVERLAPS = "overlaps"


@dataclass(frozen=True)
class FilterDescriptor:
    column: str
    comparison: Comparison
    value: Any


def is_absent(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, uuid.UUID):
        return value == ZERO_UUID
    if isinstance(value, (list, tuple, set, frozenset)):
        return len(value) == 0
    return False


class FilterSet:
    """
    Ordered optional predicates for one query.

    Example:
        filters = FilterSet([
            ("r.theme_id", Comparison.EQUALS),
            ("r.title", Comparison.SUBSTRING),
        ])
        filters.add("r.title", Comparison.SUBSTRING, "frog")
        filters.add("r.theme_id", Comparison.EQUALS, theme_id)
        [d.column for d in filters.descriptors()]
        # ['r.theme_id', 'r.title']
    """

    def __init__(self, declaration: Sequence[Tuple[str, Comparison]]):
        keys = [(column, Comparison(comparison)) for column, comparison in declaration]
        if len(set(keys)) != len(keys):
            raise ValueError("filter declaration contains duplicate entries")
        self._positions: Dict[Tuple[str, Comparison], int] = {key: i for i, key in enumerate(keys)}
        self._present: Dict[Tuple[str, Comparison], FilterDescriptor] = {}

    def add(self, column: str, comparison: Comparison, value: Any) -> "FilterSet":
        key = (column, Comparison(comparison))
        if key not in self._positions:
            raise ValueError(f"{comparison} filter on {column!r} is not declared on this filter set")
        if is_absent(value):
            return self
        if key[1] in (Comparison.IN_SET, Comparison.OVERLAPS):
            value = list(value)
        self._present[key] = FilterDescriptor(column, key[1], value)
        return self

    def is_empty(self) -> bool:
        return not self._present

    def descriptors(self) -> List[FilterDescriptor]:
        return [
            self._present[key]
            for key in sorted(self._present, key=self._positions.__getitem__)
        ]

    def __len__(self) -> int:
        return len(self._present)

    @classmethod
    def of(cls, entries: Iterable[Tuple[str, Comparison, Any]]) -> "FilterSet":
        """
        Declare and fill a FilterSet from `(column, comparison, value)`
        triples; the triples' order is the declaration order.
        """
        triples = list(entries)
        filters = cls([(column, comparison) for column, comparison, _ in triples])
        for column, comparison, value in triples:
            filters.add(column, comparison, value)
        return filters
