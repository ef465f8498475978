"""docbridge — Typed pydantic models over schemaless Elasticsearch documents.

Resolve a model's field table once, convert models to and from documents,
turn filter maps and sort expressions into the query DSL, and run CRUD and
paged searches through ``Repository``.
"""

from docbridge.exceptions import (
    ConfigurationError,
    DecodeError,
    DocBridgeError,
    DocumentNotFoundError,
    MissingIdentifierError,
    QueryError,
    StoreConnectionError,
    ValidationError,
)
from docbridge.models import FilterSpec, IdField, Range, SearchFilter, SearchPage, resolve_fields
from docbridge.store import DocumentStore, Repository, SearchBuilder

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "DecodeError",
    "DocBridgeError",
    "DocumentNotFoundError",
    "DocumentStore",
    "FilterSpec",
    "IdField",
    "MissingIdentifierError",
    "QueryError",
    "Range",
    "Repository",
    "SearchBuilder",
    "SearchFilter",
    "SearchPage",
    "StoreConnectionError",
    "ValidationError",
    "__version__",
    "resolve_fields",
]
