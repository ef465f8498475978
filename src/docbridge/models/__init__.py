"""Document, filter and page models."""

from docbridge.models.fields import ID_TAG, FieldMeta, FieldTable, IdField, resolve_fields
from docbridge.models.filters import (
    FilterSpec,
    PrefixConstraint,
    Range,
    RangeConstraint,
    SearchFilter,
    SortClause,
    SortDirection,
)
from docbridge.models.page import SearchPage

__all__ = [
    "ID_TAG",
    "FieldMeta",
    "FieldTable",
    "FilterSpec",
    "IdField",
    "PrefixConstraint",
    "Range",
    "RangeConstraint",
    "SearchFilter",
    "SearchPage",
    "SortClause",
    "SortDirection",
    "resolve_fields",
]
