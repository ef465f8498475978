"""Result materializer — Decodes raw search hits into typed models."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import BaseModel

from docbridge.core.codec import from_document
from docbridge.exceptions import DecodeError
from docbridge.models.fields import FieldTable


def decode_hits(
    hits: Sequence[Mapping[str, Any]],
    table: FieldTable,
    target_type: type[BaseModel] | None = None,
) -> list[Any]:
    """Decode *hits* in store order.

    All or nothing: the first hit that fails to decode aborts the whole
    batch, so a caller never receives a silently shortened page.

    Raises:
        DecodeError: If any hit is malformed or holds a mistyped value.
    """
    models: list[Any] = []
    for position, hit in enumerate(hits):
        if not isinstance(hit, Mapping):
            raise DecodeError(f"Hit {position} is not an object")
        hit_id = hit.get("_id")
        try:
            models.append(from_document(hit.get("_source") or {}, hit_id, table, target_type))
        except DecodeError as e:
            raise DecodeError(f"Failed to decode hit {position} (_id={hit_id!r}): {e}") from e
    return models


def hits_and_total(response: Mapping[str, Any]) -> tuple[list[Mapping[str, Any]], int]:
    """Extract the hit list and total match count from a search response.

    Accepts both ``{"total": {"value": n}}`` and a bare integer total.

    Raises:
        DecodeError: If the response envelope is malformed.
    """
    try:
        hits = response["hits"]
        total = hits.get("total", 0)
        if isinstance(total, Mapping):
            total = total["value"]
        return list(hits["hits"]), int(total)
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise DecodeError(f"Malformed search response: {e!r}") from e
