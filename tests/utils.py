"""Test models and response builders."""

from __future__ import annotations

from datetime import datetime
from typing import Any
from unittest.mock import MagicMock

from elasticsearch import ConflictError, NotFoundError
from pydantic import BaseModel, ConfigDict, Field

from docbridge.models.fields import IdField
from docbridge.models.filters import Range, SearchFilter


class User(BaseModel):
    """A model with an identifier, aliased wire names and mixed field types."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = IdField()
    username: str
    email: str | None = None
    age: int = 0
    score: float = 0.0
    active: bool = True
    date_of_birth: str | None = Field(default=None, alias="dateOfBirth")
    tags: list[str] = Field(default_factory=list)
    created_at: datetime | None = Field(default=None, alias="createdAt")


class Note(BaseModel):
    """A model without an identifier field."""

    title: str
    body: str = ""


class Profile(BaseModel):
    """A model with a write-only alias and a field that is never stored."""

    id: str = IdField()
    full_name: str = Field(default="", serialization_alias="fullName")
    secret: str = Field(default="s", exclude=True)


class Address(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    city: str = ""
    zip_code: str = Field(default="", alias="zipCode")


class Customer(BaseModel):
    """A model with a required nested model."""

    id: str = IdField()
    name: str
    address: Address


class UserFilter(SearchFilter):
    username: str | None = None
    age: Range | None = None
    created_at: Range | None = Field(default=None, alias="createdAt")


def make_hit(doc_id: str, **source: Any) -> dict[str, Any]:
    return {"_index": "users", "_id": doc_id, "_score": 1.0, "_source": source}


def search_response(hits: list[dict[str, Any]], total: int | None = None) -> dict[str, Any]:
    return {
        "took": 3,
        "hits": {
            "total": {"value": len(hits) if total is None else total, "relation": "eq"},
            "hits": hits,
        },
    }


def write_response(doc_id: str = "42", result: str = "updated", version: int = 2) -> dict[str, Any]:
    return {
        "_index": "users",
        "_id": doc_id,
        "_version": version,
        "result": result,
        "_shards": {"total": 2, "successful": 1, "failed": 0},
    }


def not_found() -> NotFoundError:
    return NotFoundError("not_found", meta=MagicMock(status=404), body={"found": False})


def conflict() -> ConflictError:
    return ConflictError("version_conflict_engine_exception", meta=MagicMock(status=409), body={})
