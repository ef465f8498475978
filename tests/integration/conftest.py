"""Integration test fixtures — Docker-based Elasticsearch with seed data.

Expects Elasticsearch to be running, e.g.:
    docker run -p 9200:9200 -e discovery.type=single-node -e xpack.security.enabled=false elasticsearch:8.13.0

The ``users`` index is recreated and seeded on first use.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any

import httpx
import pytest

ES_HOST = "http://localhost:9200"
USERS_INDEX = "docbridge-test-users"

SEED_USERS: list[dict[str, Any]] = [
    {"id": "u-001", "username": "alice", "email": "alice@example.com", "age": 31, "score": 4.5, "active": True},
    {"id": "u-002", "username": "albert", "email": "albert@example.com", "age": 17, "score": 3.0, "active": True},
    {"id": "u-003", "username": "bob", "email": "bob@example.com", "age": 45, "score": 2.5, "active": False},
    {"id": "u-004", "username": "carol", "email": "carol@example.com", "age": 28, "score": 5.0, "active": True},
    {"id": "u-005", "username": "dave", "email": "dave@example.com", "age": 62, "score": 1.5, "active": True},
]


def _wait_for_service(url: str, timeout: float = 10.0) -> bool:
    """Block until *url* returns HTTP 200, or timeout."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        try:
            r = httpx.get(url, timeout=5)
            if r.status_code == 200:
                return True
        except httpx.HTTPError:
            pass
        time.sleep(1)
    return False


async def _seed_users(host: str = ES_HOST, index: str = USERS_INDEX) -> None:
    async with httpx.AsyncClient(base_url=host, timeout=30) as client:
        await client.delete(f"/{index}", params={"ignore_unavailable": "true"})

        mapping = {
            "mappings": {
                "properties": {
                    "username": {"type": "keyword"},
                    "email": {"type": "keyword"},
                    "age": {"type": "integer"},
                    "score": {"type": "float"},
                    "active": {"type": "boolean"},
                    "dateOfBirth": {"type": "keyword"},
                    "tags": {"type": "keyword"},
                    "createdAt": {"type": "date"},
                }
            }
        }
        resp = await client.put(f"/{index}", json=mapping)
        resp.raise_for_status()

        for user in SEED_USERS:
            doc = {k: v for k, v in user.items() if k != "id"}
            resp = await client.put(f"/{index}/_doc/{user['id']}", json=doc)
            resp.raise_for_status()

        await client.post(f"/{index}/_refresh")


@pytest.fixture(scope="session")
def elasticsearch_ready() -> str:
    """Ensure Elasticsearch is running and seeded."""
    if not _wait_for_service(ES_HOST):
        pytest.skip(f"Elasticsearch not available at {ES_HOST}")
    asyncio.run(_seed_users(ES_HOST))
    return ES_HOST
