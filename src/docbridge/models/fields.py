"""Field metadata — Wire names and identifier lookup for document models.

Every model stored through docbridge is a pydantic ``BaseModel``. Its field
table is resolved once per model type and cached for the lifetime of the
process:

  - ``wire_name`` is the key the field is stored under: its
    ``serialization_alias``, else its ``alias``, else its name
  - ``input_key`` is the key pydantic validates the field from
  - fields declared with ``exclude=True`` are never written
  - the identifier field carries the ``_id`` tag (see ``IdField``) and is
    typed ``str``; at most one field may be the identifier

Example::

    class User(BaseModel):
        id: str = IdField()
        username: str
        date_of_birth: str | None = Field(default=None, alias="dateOfBirth")

    table = resolve_fields(User)
    table.id_wire_name                        # "id"
    table.by_name("date_of_birth").wire_name  # "dateOfBirth"
"""

from __future__ import annotations

import threading
import types
from dataclasses import dataclass, field
from typing import Any, Union, get_args, get_origin

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic.fields import FieldInfo

from docbridge.exceptions import ConfigurationError

ID_TAG = "_id"
TAGS_KEY = "tags"

NO_ZERO_VALUE = object()
"""Returned by ``zero_value`` when a type has no natural zero value."""


def IdField(default: Any = "", **kwargs: Any) -> Any:  # noqa: N802
    """Declare the identifier field of a model.

    Wraps ``pydantic.Field`` and adds the ``_id`` tag to the field's
    ``json_schema_extra["tags"]``. All other keyword arguments (``alias``,
    ``description``, ...) are passed through.
    """
    extra = dict(kwargs.pop("json_schema_extra", None) or {})
    tags = _split_tags(extra.get(TAGS_KEY))
    if ID_TAG not in tags:
        tags.append(ID_TAG)
    extra[TAGS_KEY] = tags
    return Field(default, json_schema_extra=extra, **kwargs)


@dataclass(frozen=True)
class FieldMeta:
    """Resolved metadata for one model field."""

    index: int
    name: str
    wire_name: str
    annotation: Any
    required: bool = False
    is_id: bool = False
    input_key: str = ""
    excluded: bool = False

    def __post_init__(self) -> None:
        if not self.input_key:
            object.__setattr__(self, "input_key", self.wire_name)

    @property
    def is_text(self) -> bool:
        """True when the declared type is ``str`` or ``str | None``."""
        return _strip_optional(self.annotation) is str


@dataclass(frozen=True)
class FieldTable:
    """Immutable field table for one model type.

    Point lookups return ``None`` when nothing matches so callers can probe
    optional fields without exception handling.
    """

    model_type: type[BaseModel]
    fields: tuple[FieldMeta, ...]
    _by_wire: dict[str, FieldMeta] = field(default_factory=dict, repr=False, compare=False)
    _by_name: dict[str, FieldMeta] = field(default_factory=dict, repr=False, compare=False)

    def __post_init__(self) -> None:
        for meta in self.fields:
            self._by_wire.setdefault(meta.wire_name, meta)
            self._by_name.setdefault(meta.name, meta)

    @property
    def id_field(self) -> FieldMeta | None:
        return next((meta for meta in self.fields if meta.is_id), None)

    @property
    def id_wire_name(self) -> str | None:
        meta = self.id_field
        return meta.wire_name if meta else None

    def by_wire_name(self, wire_name: str) -> FieldMeta | None:
        return self._by_wire.get(wire_name)

    def by_name(self, name: str) -> FieldMeta | None:
        return self._by_name.get(name)

    def by_index(self, index: int) -> FieldMeta | None:
        if 0 <= index < len(self.fields):
            return self.fields[index]
        return None

    def require_id(self, operation: str) -> FieldMeta:
        """Return the identifier field or fail for an identifier-dependent operation.

        Raises:
            ConfigurationError: If the model declares no identifier field.
        """
        meta = self.id_field
        if meta is None:
            raise ConfigurationError(
                f"{self.model_type.__name__} declares no identifier field; '{operation}' requires one"
            )
        return meta


_cache: dict[type[BaseModel], FieldTable] = {}
_lock = threading.Lock()


def resolve_fields(model_type: type[BaseModel]) -> FieldTable:
    """Return the cached field table for *model_type*, building it on first use.

    Construction happens at most once per type, even under concurrent first
    access from several threads.

    Raises:
        ConfigurationError: If *model_type* is not a pydantic model or tags
            more than one identifier field.
    """
    table = _cache.get(model_type)
    if table is not None:
        return table
    with _lock:
        table = _cache.get(model_type)
        if table is None:
            table = _build_table(model_type)
            _cache[model_type] = table
    return table


def clear_field_cache() -> None:
    """Drop every cached field table."""
    with _lock:
        _cache.clear()


def zero_value(annotation: Any) -> Any:
    """Zero value for a declared type, or ``NO_ZERO_VALUE`` if it has none.

    A nested model's zero value is the instance built from its defaults,
    when every one of its fields has a default.
    """
    if _is_optional(annotation):
        return None
    origin = get_origin(annotation) or annotation
    if origin in (list, tuple, set, frozenset, dict):
        return origin()
    if annotation is bool:
        return False
    if annotation is str:
        return ""
    if annotation is int:
        return 0
    if annotation is float:
        return 0.0
    if isinstance(annotation, type) and issubclass(annotation, BaseModel):
        try:
            return annotation()
        except PydanticValidationError:
            return NO_ZERO_VALUE
    return NO_ZERO_VALUE


def _build_table(model_type: type[BaseModel]) -> FieldTable:
    if not (isinstance(model_type, type) and issubclass(model_type, BaseModel)):
        raise ConfigurationError(f"{model_type!r} is not a pydantic model")

    metas: list[FieldMeta] = []
    for index, (name, info) in enumerate(model_type.model_fields.items()):
        extra = info.json_schema_extra if isinstance(info.json_schema_extra, dict) else {}
        metas.append(
            FieldMeta(
                index=index,
                name=name,
                wire_name=info.serialization_alias or info.alias or name,
                annotation=info.annotation,
                required=info.is_required(),
                is_id=ID_TAG in _split_tags(extra.get(TAGS_KEY)),
                input_key=_input_key(model_type, name, info),
                excluded=bool(info.exclude),
            )
        )

    id_fields = [meta for meta in metas if meta.is_id]
    if len(id_fields) > 1:
        raise ConfigurationError(
            f"{model_type.__name__} tags more than one identifier field: {', '.join(m.name for m in id_fields)}"
        )
    if id_fields and _strip_optional(id_fields[0].annotation) is not str:
        # document ids are always strings in the store
        raise ConfigurationError(
            f"Identifier field {model_type.__name__}.{id_fields[0].name} must be typed str, "
            f"not {id_fields[0].annotation!r}"
        )
    return FieldTable(model_type=model_type, fields=tuple(metas))


def _input_key(model_type: type[BaseModel], name: str, info: FieldInfo) -> str:
    alias = info.validation_alias
    if alias is None:
        return name
    if isinstance(alias, str):
        return alias
    raise ConfigurationError(
        f"{model_type.__name__}.{name} uses a {type(alias).__name__} validation alias; "
        "only plain string aliases can be mapped to a document key"
    )


def _split_tags(value: Any) -> list[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [tag.strip() for tag in value.split(",") if tag.strip()]
    return [str(tag).strip() for tag in value]


def _is_optional(annotation: Any) -> bool:
    return get_origin(annotation) in (Union, types.UnionType) and type(None) in get_args(annotation)


def _strip_optional(annotation: Any) -> Any:
    if get_origin(annotation) in (Union, types.UnionType):
        args = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation
