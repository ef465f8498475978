"""Query builder — Translates filter and sort criteria into the store query DSL.

Filters become a conjunctive ``bool``/``must`` query with one ``prefix``
or ``range`` clause per constrained field; an empty filter matches every
document.

Sort expressions are comma-separated tokens, each of which must start with
``+`` (ascending) or ``-`` (descending); tokens without a direction are
ignored. Text fields are not sortable in the store without a keyword
sub-field, so a directed token that resolves to a non-identifier ``str``
field discards the whole sort::

    parse_sort("-age,+createdAt", table)   # two clauses
    parse_sort("-age,+username", table)    # [] (username is text)
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from docbridge.models.fields import ID_TAG, FieldTable
from docbridge.models.filters import FilterSpec, RangeConstraint, SortClause, SortDirection

logger = logging.getLogger(__name__)

_DIRECTIONS = {"+": SortDirection.ASC, "-": SortDirection.DESC}


def build_query(criteria: FilterSpec | Mapping[str, Any] | None = None) -> dict[str, Any]:
    """Build the ``query`` section of a search body."""
    spec = criteria if isinstance(criteria, FilterSpec) else FilterSpec.from_mapping(criteria)
    if not spec:
        return {"match_all": {}}

    must: list[dict[str, Any]] = []
    for constraint in spec.constraints:
        if isinstance(constraint, RangeConstraint):
            must.append({"range": {constraint.field: dict(constraint.bounds)}})
        else:
            must.append({"prefix": {constraint.field: constraint.value}})
    return {"bool": {"must": must}}


def parse_sort(expression: str | None, table: FieldTable) -> list[SortClause]:
    """Parse a sort expression against a model's field table."""
    clauses: list[SortClause] = []
    if not expression:
        return clauses

    for raw in expression.split(","):
        token = raw.strip()
        if not token or token[0] not in _DIRECTIONS:
            continue
        wire_name = token[1:].strip()
        if not wire_name:
            continue

        meta = table.by_wire_name(wire_name)
        if meta is not None and meta.is_id:
            field = ID_TAG
        elif meta is not None and meta.is_text:
            logger.debug("Sort on text field %r is not supported, ignoring sort %r", wire_name, expression)
            return []
        else:
            field = wire_name
        clauses.append(SortClause(field=field, direction=_DIRECTIONS[token[0]]))
    return clauses


def build_sort(expression: str | None, table: FieldTable) -> list[dict[str, Any]]:
    """Build the ``sort`` section of a search body."""
    return [clause.to_dict() for clause in parse_sort(expression, table)]
