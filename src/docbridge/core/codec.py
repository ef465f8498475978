"""Document codec — Converts typed models to and from store documents.

Documents are plain ``dict`` objects keyed by wire name. The identifier
never travels inside a write body; it addresses the document instead.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from docbridge.exceptions import DecodeError, MissingIdentifierError, ValidationError
from docbridge.models.fields import NO_ZERO_VALUE, FieldTable, resolve_fields, zero_value


def to_document(model: BaseModel, table: FieldTable | None = None) -> dict[str, Any]:
    """Build an insert/update body from *model*, leaving out the identifier.

    Values are dumped in JSON mode, so datetimes, enums and nested models
    arrive as their JSON-native forms.
    """
    table = table or resolve_fields(type(model))
    id_field = table.id_field
    exclude = {id_field.name} if id_field else None
    dumped = model.model_dump(mode="json", by_alias=True, exclude=exclude)
    return {
        meta.wire_name: dumped[meta.wire_name] for meta in table.fields if not (meta.is_id or meta.excluded)
    }


def to_patch_document(changes: Mapping[str, Any] | BaseModel, id_wire_name: str) -> tuple[dict[str, Any], str]:
    """Split a partial update into ``(body, identifier)``.

    Works on a copy: *changes* is never modified, whether or not the call
    succeeds. A model is reduced to the fields that were explicitly set.

    Raises:
        MissingIdentifierError: If the identifier key is absent or empty.
        ValidationError: If the identifier is not a string.
    """
    if isinstance(changes, BaseModel):
        body = changes.model_dump(mode="json", by_alias=True, exclude_unset=True)
    else:
        body = dict(changes)

    if id_wire_name not in body:
        raise MissingIdentifierError(f"'{id_wire_name}' must be present for patch")
    identifier = body.pop(id_wire_name)
    if not isinstance(identifier, str):
        raise ValidationError(f"'{id_wire_name}' must be a string for patch, got {type(identifier).__name__}")
    if not identifier:
        raise MissingIdentifierError(f"'{id_wire_name}' must not be empty for patch")
    return body, identifier


def from_document(
    document: Mapping[str, Any],
    hit_id: str | None,
    table: FieldTable,
    target_type: type[BaseModel] | None = None,
) -> Any:
    """Materialize a model from a stored document.

    *hit_id* is injected into the identifier field. Keys that match no wire
    name are ignored; required fields with no matching key get their zero
    value (a nested model whose fields all have defaults counts). Values must already have the JSON type the field expects: ``"42"``
    does not decode into an ``int`` field.

    Raises:
        DecodeError: If a value cannot be assigned to its field.
    """
    target = target_type or table.model_type
    payload: dict[str, Any] = {}
    for meta in table.fields:
        if meta.is_id and hit_id is not None:
            payload[meta.input_key] = hit_id
        elif meta.wire_name in document:
            payload[meta.input_key] = document[meta.wire_name]
        elif meta.required:
            zero = zero_value(meta.annotation)
            if zero is not NO_ZERO_VALUE:
                # a nested model's zero is what its defaults validate to
                payload[meta.input_key] = {} if isinstance(zero, BaseModel) else zero

    try:
        return target.model_validate_json(json.dumps(payload), strict=True)
    except (PydanticValidationError, TypeError, ValueError) as e:
        raise DecodeError(f"Cannot decode document {hit_id!r} into {target.__name__}: {e}") from e
