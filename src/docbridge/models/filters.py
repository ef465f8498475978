"""Filter and sort models — Typed search criteria for document queries.

A ``FilterSpec`` is an ordered list of per-field constraints:

  - ``PrefixConstraint`` — the field value starts with a literal
  - ``RangeConstraint`` — the field value lies within comparison bounds

Callers that build criteria dynamically from request parameters can use
``FilterSpec.from_mapping``, which keeps the loose mapping form: a nested
mapping becomes a range constraint, anything else a prefix constraint::

    FilterSpec.from_mapping({"username": "al", "age": {">=": 18, "$lt": 65}})
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Annotated, Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from docbridge.exceptions import ValidationError

BOUND_NAMES = frozenset({"gte", "gt", "lte", "lt"})
BOUND_MARKERS = "$@:"
SYMBOLIC_BOUNDS = {">=": "gte", ">": "gt", "<=": "lte", "<": "lt"}


def bound_name(token: str) -> str:
    """Map a range operator token to its bound name.

    ``$gte`` → ``gte``, ``>=`` → ``gte``, ``gte`` → ``gte``.

    Raises:
        ValidationError: If the token names no known bound.
    """
    if token in SYMBOLIC_BOUNDS:
        return SYMBOLIC_BOUNDS[token]
    name = token[1:] if token[:1] in BOUND_MARKERS else token
    if name not in BOUND_NAMES:
        raise ValidationError(f"Unsupported range operator: {token!r}")
    return name


class PrefixConstraint(BaseModel):
    """Match documents whose field value starts with ``value``."""

    kind: Literal["prefix"] = "prefix"
    field: str = Field(description="Wire name of the constrained field")
    value: Any = Field(description="Literal prefix")


class RangeConstraint(BaseModel):
    """Match documents whose field value falls within ``bounds``."""

    kind: Literal["range"] = "range"
    field: str = Field(description="Wire name of the constrained field")
    bounds: dict[str, Any] = Field(description="Bound name (gte, gt, lte, lt) to bound value")

    @field_validator("bounds")
    @classmethod
    def _normalize_bounds(cls, v: dict[str, Any]) -> dict[str, Any]:
        if not v:
            raise ValidationError("Range constraint needs at least one bound")
        return {bound_name(token): value for token, value in v.items()}


Constraint = Annotated[PrefixConstraint | RangeConstraint, Field(discriminator="kind")]


class FilterSpec(BaseModel):
    """Conjunction of field constraints.

    A field appears at most once: a later constraint on the same field
    replaces the earlier one in its original position.
    """

    constraints: list[Constraint] = Field(default_factory=list, description="Constraints, all of which must match")

    @model_validator(mode="after")
    def _collapse_duplicates(self) -> FilterSpec:
        positions: dict[str, int] = {}
        collapsed: list[PrefixConstraint | RangeConstraint] = []
        for constraint in self.constraints:
            if constraint.field in positions:
                collapsed[positions[constraint.field]] = constraint
            else:
                positions[constraint.field] = len(collapsed)
                collapsed.append(constraint)
        self.constraints = collapsed
        return self

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any] | None) -> FilterSpec:
        """Build a spec from a loosely typed ``{wire_name: value}`` mapping."""
        constraints: list[PrefixConstraint | RangeConstraint] = []
        for key, value in (mapping or {}).items():
            if isinstance(value, Mapping):
                constraints.append(RangeConstraint(field=key, bounds=dict(value)))
            else:
                constraints.append(PrefixConstraint(field=key, value=value))
        return cls(constraints=constraints)

    def __bool__(self) -> bool:
        return bool(self.constraints)


class SortDirection(str, Enum):
    """Sort order of a single sort clause."""

    ASC = "asc"
    DESC = "desc"


class SortClause(BaseModel):
    """One resolved ``(field, direction)`` pair."""

    field: str = Field(description="Store-side field name to sort on")
    direction: SortDirection = Field(description="Sort order")

    def to_dict(self) -> dict[str, Any]:
        return {self.field: {"order": self.direction.value}}


class Range(BaseModel):
    """Comparison bounds for a range criterion on a ``SearchFilter``."""

    gte: Any = None
    gt: Any = None
    lte: Any = None
    lt: Any = None

    def to_bounds(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class SearchFilter(BaseModel):
    """Base model for typed search criteria.

    Subclasses declare one optional field per searchable document field.
    ``sort``, ``limit``, ``offset`` and ``page`` control ordering and paging;
    every other non-``None`` field becomes a constraint (``Range`` values and
    mappings become range constraints, anything else a prefix constraint).

    Example::

        class UserFilter(SearchFilter):
            username: str | None = None
            age: Range | None = None

        UserFilter(username="al", age=Range(gte=18), sort="-age", limit=10)
    """

    model_config = ConfigDict(populate_by_name=True)

    PAGING_FIELDS: ClassVar[frozenset[str]] = frozenset({"sort", "limit", "offset", "page"})

    sort: str | None = Field(default=None, description="Sort expression, e.g. '-age,+createdAt'")
    limit: int = Field(default=20, ge=0, description="Page size")
    offset: int | None = Field(default=None, ge=0, description="Number of hits to skip")
    page: int | None = Field(default=None, ge=1, description="1-based page number, used when offset is unset")

    @property
    def skip(self) -> int:
        """Number of hits to skip, from ``offset`` or else ``page``."""
        if self.offset is not None:
            return self.offset
        if self.page is not None:
            return (self.page - 1) * self.limit
        return 0

    def to_filter_spec(self) -> FilterSpec:
        criteria: dict[str, Any] = {}
        for name, info in type(self).model_fields.items():
            if name in self.PAGING_FIELDS:
                continue
            value = getattr(self, name)
            if value is None:
                continue
            if isinstance(value, Range):
                value = value.to_bounds()
                if not value:
                    continue
            criteria[info.alias or name] = value
        return FilterSpec.from_mapping(criteria)
