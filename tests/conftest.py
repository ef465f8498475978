"""Shared test fixtures and configuration."""

from __future__ import annotations

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from docbridge.config.settings import Settings
from docbridge.models.fields import FieldTable, clear_field_cache, resolve_fields
from docbridge.store.repository import Repository
from tests.utils import Note, User


@pytest.fixture(autouse=True)
def _fresh_field_cache() -> None:
    clear_field_cache()


@pytest.fixture
def settings() -> Settings:
    """Create a test Settings instance with defaults."""
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        debug=True,
        store={"hosts": ["http://es-test:9200"], "refresh": "wait_for"},
    )


@pytest.fixture
def user_table() -> FieldTable:
    return resolve_fields(User)


@pytest.fixture
def sample_user() -> User:
    return User(
        id="42",
        username="alice",
        email="alice@example.com",
        age=31,
        score=4.5,
        active=True,
        date_of_birth="1993-04-01",
        tags=["admin", "ops"],
        created_at=datetime(2024, 6, 15, 8, 30, tzinfo=UTC),
    )


@pytest.fixture
def es_client() -> MagicMock:
    """An ``AsyncElasticsearch`` stand-in whose API methods are async."""
    client = MagicMock()
    for name in ("info", "get", "exists", "search", "create", "index", "update", "delete", "close"):
        setattr(client, name, AsyncMock())
    client.options.return_value = client
    return client


@pytest.fixture
def users(es_client: MagicMock) -> Repository[User]:
    return Repository(es_client, "users", User)


@pytest.fixture
def notes(es_client: MagicMock) -> Repository[Note]:
    return Repository(es_client, "notes", Note)
