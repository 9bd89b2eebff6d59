"""
SpecialStandard Backend — Query Builder
========================================

What:  Assembles parameterized SELECT and partial UPDATE statements.
How:   Pure string/list construction. Parameters are numbered `$1..$n` in
       the order their values are appended to `args`, so the SQL text and
       the argument list always agree.
Who:   Repositories.

SELECT layout:

    <base_query>
    WHERE <static predicate> AND ... AND <filter> AND ...
    GROUP BY <group_by>
    ORDER BY <order_by>
    LIMIT $n OFFSET $n+1

Static predicates reference `$1..$k` themselves and come with their `args`;
filter parameters continue from `$k+1`.
"""

from typing import Any, List, Mapping, NamedTuple, Optional, Sequence

from specialstandard.exceptions import ValidationError
from specialstandard.query.filters import Comparison, FilterDescriptor, FilterSet
from specialstandard.query.pagination import Pagination


class BuiltQuery(NamedTuple):
    sql: str
    args: List[Any]


def _render(descriptor: FilterDescriptor, placeholder: str) -> str:
    column = descriptor.column
    comparison = descriptor.comparison
    if comparison is Comparison.EQUALS:
        return f"{column} = {placeholder}"
    if comparison is Comparison.RANGE_FROM:
        return f"{column} >= {placeholder}"
    if comparison is Comparison.RANGE_TO:
        return f"{column} <= {placeholder}"
    if comparison is Comparison.SUBSTRING:
        return f"{column} ILIKE {placeholder}"
    if comparison is Comparison.IN_SET:
        return f"{column} = ANY({placeholder})"
    if comparison is Comparison.OVERLAPS:
        return f"{column} && {placeholder}"
    raise ValueError(f"unsupported comparison: {comparison}")


def _bind(descriptor: FilterDescriptor) -> Any:
    if descriptor.comparison is Comparison.SUBSTRING:
        return f"%{descriptor.value}%"
    return descriptor.value


def build_where(
    filters: Optional[FilterSet],
    where: Sequence[str] = (),
    args: Sequence[Any] = (),
) -> BuiltQuery:
    """
    Render static predicates plus the present filters as a WHERE clause.

    Returns an empty clause (and just the static args) when there is
    nothing to filter on.
    """
    bound: List[Any] = list(args)
    clauses: List[str] = list(where)
    if filters is not None:
        for descriptor in filters.descriptors():
            bound.append(_bind(descriptor))
            clauses.append(_render(descriptor, f"${len(bound)}"))
    if not clauses:
        return BuiltQuery("", bound)
    return BuiltQuery("WHERE " + " AND ".join(clauses), bound)


def build_select(
    base_query: str,
    filters: Optional[FilterSet],
    order_by: str,
    pagination: Optional[Pagination],
    *,
    where: Sequence[str] = (),
    args: Sequence[Any] = (),
    group_by: Optional[str] = None,
) -> BuiltQuery:
    """
    Compose a filtered, ordered, paginated SELECT.

    Identical inputs always produce an identical SQL string and argument
    list. A short last page is not special-cased. Passing `pagination=None`
    omits LIMIT/OFFSET (used by small reference lists).
    """
    clause, bound = build_where(filters, where, args)
    parts = [base_query.strip()]
    if clause:
        parts.append(clause)
    if group_by:
        parts.append(f"GROUP BY {group_by}")
    parts.append(f"ORDER BY {order_by}")
    if pagination is not None:
        bound.extend([pagination.limit, pagination.offset])
        parts.append(f"LIMIT ${len(bound) - 1} OFFSET ${len(bound)}")
    return BuiltQuery("\n".join(parts), bound)


def build_update(
    table: str,
    changes: Mapping[str, Any],
    key_column: str,
    key_value: Any,
    returning: str,
    touch_updated_at: bool = True,
) -> BuiltQuery:
    """
    Compose `UPDATE <table> SET ... WHERE <key> = $n RETURNING ...`.

    `changes` is applied in its iteration order (pydantic dumps fields in
    declaration order). An empty `changes` is a client error.
    """
    if not changes:
        raise ValidationError(message="no fields to update")
    bound: List[Any] = []
    assignments = []
    for column, value in changes.items():
        bound.append(value)
        assignments.append(f"{column} = ${len(bound)}")
    if touch_updated_at:
        assignments.append("updated_at = NOW()")
    bound.append(key_value)
    sql = (
        f"UPDATE {table}\n"
        f"SET {', '.join(assignments)}\n"
        f"WHERE {key_column} = ${len(bound)}\n"
        f"RETURNING {returning}"
    )
    return BuiltQuery(sql, bound)
