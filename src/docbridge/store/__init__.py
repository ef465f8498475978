"""Store layer — Elasticsearch-backed repositories for pydantic models."""

from docbridge.store.client import DocumentStore
from docbridge.store.repository import Repository
from docbridge.store.search import SearchBuilder

__all__ = ["DocumentStore", "Repository", "SearchBuilder"]
