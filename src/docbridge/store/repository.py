"""Repository — Typed CRUD and search operations over one store index.

Each operation is a single request/response round trip. The repository
holds no mutable state besides its configuration; the field table it uses
is shared, read-only metadata.

Outcome conventions:
  - ``load`` of a missing document returns ``None``
  - ``create`` of an existing identifier returns ``0``
  - ``update``/``patch``/``delete`` of a missing document raise
    ``DocumentNotFoundError``
  - identifier problems raise before any request is sent
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any, Generic, Literal

from elastic_transport import TransportError
from elasticsearch import ApiError, AsyncElasticsearch, ConflictError, NotFoundError
from pydantic import BaseModel

from docbridge.core.codec import from_document, to_document, to_patch_document
from docbridge.core.materializer import decode_hits, hits_and_total
from docbridge.core.query import build_query, build_sort
from docbridge.exceptions import (
    DecodeError,
    DocumentNotFoundError,
    MissingIdentifierError,
    QueryError,
    StoreConnectionError,
)
from docbridge.models.fields import FieldMeta, resolve_fields
from docbridge.models.filters import FilterSpec
from docbridge.models.page import ModelT, SearchPage

logger = logging.getLogger(__name__)

Criteria = FilterSpec | Mapping[str, Any] | None
Refresh = Literal["true", "false", "wait_for"]


class Repository(Generic[ModelT]):
    """CRUD and search for one model type stored in one index.

    Args:
        client: An ``AsyncElasticsearch`` client (or compatible).
        index: Target index name.
        model_type: The pydantic model stored in the index.
        refresh: Refresh policy applied to writes.

    Every operation accepts a keyword-only ``request_timeout`` that is
    handed to the client untouched.
    """

    def __init__(
        self,
        client: AsyncElasticsearch,
        index: str,
        model_type: type[ModelT],
        *,
        refresh: Refresh = "true",
    ) -> None:
        self._client = client
        self.index = index
        self.model_type = model_type
        self.refresh = refresh
        self._table = resolve_fields(model_type)

    # ── Reads ────────────────────────────────────────────────────────────

    async def load(self, doc_id: str, *, request_timeout: float | None = None) -> ModelT | None:
        """Fetch one document by identifier, or ``None`` if it does not exist."""
        _require_identifier(doc_id, "load")
        with self._store_errors("load"):
            try:
                resp = await self._client_for(request_timeout).get(index=self.index, id=doc_id)
            except NotFoundError:
                logger.debug("Document %r not found in %r", doc_id, self.index)
                return None
        body = _body(resp)
        return from_document(body.get("_source") or {}, body.get("_id", doc_id), self._table)

    async def exists(self, doc_id: str, *, request_timeout: float | None = None) -> bool:
        _require_identifier(doc_id, "exists")
        with self._store_errors("exists"):
            resp = await self._client_for(request_timeout).exists(index=self.index, id=doc_id)
        return bool(_body(resp))

    async def all(self, *, request_timeout: float | None = None) -> list[ModelT]:
        """Fetch documents without a filter (bounded by the store's default page size)."""
        return await self.find(request_timeout=request_timeout)

    async def find(
        self,
        criteria: Criteria = None,
        *,
        size: int | None = None,
        request_timeout: float | None = None,
    ) -> list[ModelT]:
        """Fetch the documents matching *criteria*, in store order."""
        kwargs: dict[str, Any] = {"index": self.index, "query": build_query(criteria)}
        if size is not None:
            kwargs["size"] = size
        with self._store_errors("find"):
            resp = await self._client_for(request_timeout).search(**kwargs)
        hits, _ = hits_and_total(_body(resp))
        return decode_hits(hits, self._table)

    async def find_one(self, criteria: Criteria = None, *, request_timeout: float | None = None) -> ModelT | None:
        """First document matching *criteria*, or ``None``."""
        found = await self.find(criteria, size=1, request_timeout=request_timeout)
        return found[0] if found else None

    async def search(
        self,
        criteria: Criteria = None,
        sort: str | None = None,
        *,
        limit: int = 20,
        offset: int = 0,
        request_timeout: float | None = None,
    ) -> SearchPage[ModelT]:
        """Fetch one page of matching documents plus the total match count.

        Args:
            criteria: Filter spec or loose ``{wire_name: value}`` mapping.
            sort: Sort expression such as ``"-age,+createdAt"``.
            limit: Page size.
            offset: Number of hits to skip.

        Returns:
            A page whose ``total`` is the store's match count, which may
            exceed the number of items returned.
        """
        kwargs: dict[str, Any] = {
            "index": self.index,
            "query": build_query(criteria),
            "size": limit,
            "from_": offset,
            "track_total_hits": True,
        }
        sort_spec = build_sort(sort, self._table)
        if sort_spec:
            kwargs["sort"] = sort_spec

        with self._store_errors("search"):
            resp = await self._client_for(request_timeout).search(**kwargs)
        hits, total = hits_and_total(_body(resp))
        items = decode_hits(hits, self._table)
        logger.debug("Search on %r matched %d, returned %d", self.index, total, len(items))
        return SearchPage[self.model_type](total=total, items=items)  # type: ignore[name-defined]

    # ── Writes ───────────────────────────────────────────────────────────

    async def create(self, model: ModelT, *, request_timeout: float | None = None) -> int:
        """Insert *model* unless its identifier already exists.

        A model without an identifier value gets one assigned by the store,
        which is written back onto the model.

        Returns:
            The new document version, or ``0`` if the identifier was taken.
        """
        id_field = self._table.id_field
        identifier = getattr(model, id_field.name) if id_field else None
        document = to_document(model, self._table)
        client = self._client_for(request_timeout)

        with self._store_errors("create"):
            try:
                if identifier:
                    resp = await client.create(
                        index=self.index, id=str(identifier), document=document, refresh=self.refresh
                    )
                else:
                    resp = await client.index(
                        index=self.index, document=document, op_type="create", refresh=self.refresh
                    )
            except ConflictError:
                logger.info("Document %r already exists in %r", identifier, self.index)
                return 0

        body = _body(resp)
        if not identifier and id_field is not None:
            self._assign_identifier(model, id_field, body.get("_id"))
        try:
            version = int(body["_version"])
        except (KeyError, TypeError, ValueError) as e:
            raise DecodeError(f"Malformed create response: {e!r}") from e
        logger.info("[%s] %s; version=%d", self.index, body.get("result"), version)
        return version

    async def update(self, model: ModelT, *, request_timeout: float | None = None) -> int:
        """Overwrite the stored fields of an existing document with *model*.

        Returns:
            Number of shards that acknowledged the write.
        """
        id_field = self._table.require_id("update")
        identifier = getattr(model, id_field.name)
        if not identifier:
            raise MissingIdentifierError(
                f"'{id_field.wire_name}' of {self.model_type.__name__} is required for update"
            )
        return await self._update(str(identifier), to_document(model, self._table), request_timeout)

    async def save(self, model: ModelT, *, request_timeout: float | None = None) -> int:
        """Insert or fully replace the document addressed by *model*'s identifier."""
        id_field = self._table.require_id("save")
        identifier = getattr(model, id_field.name)
        if not identifier:
            raise MissingIdentifierError(
                f"'{id_field.wire_name}' of {self.model_type.__name__} is required for save"
            )
        with self._store_errors("save"):
            resp = await self._client_for(request_timeout).index(
                index=self.index,
                id=str(identifier),
                document=to_document(model, self._table),
                refresh=self.refresh,
            )
        return _successful_shards(resp)

    async def patch(
        self,
        changes: Mapping[str, Any] | BaseModel,
        *,
        request_timeout: float | None = None,
    ) -> int:
        """Apply a partial update; *changes* must carry the identifier.

        *changes* itself is left untouched.
        """
        id_field = self._table.require_id("patch")
        document, identifier = to_patch_document(changes, id_field.wire_name)
        return await self._update(identifier, document, request_timeout)

    async def delete(self, doc_id: str, *, request_timeout: float | None = None) -> int:
        """Delete a document by identifier.

        Returns:
            Number of shards that acknowledged the delete.
        """
        _require_identifier(doc_id, "delete")
        with self._store_errors("delete"):
            try:
                resp = await self._client_for(request_timeout).delete(
                    index=self.index, id=doc_id, refresh=self.refresh
                )
            except NotFoundError as e:
                raise DocumentNotFoundError(f"Document '{doc_id}' not found in '{self.index}'") from e
        return _successful_shards(resp)

    # ── Helpers ──────────────────────────────────────────────────────────

    async def _update(self, doc_id: str, document: dict[str, Any], request_timeout: float | None) -> int:
        with self._store_errors("update"):
            try:
                resp = await self._client_for(request_timeout).update(
                    index=self.index, id=doc_id, doc=document, refresh=self.refresh
                )
            except NotFoundError as e:
                raise DocumentNotFoundError(f"Document '{doc_id}' not found in '{self.index}'") from e
        return _successful_shards(resp)

    def _client_for(self, request_timeout: float | None) -> AsyncElasticsearch:
        if request_timeout is None:
            return self._client
        return self._client.options(request_timeout=request_timeout)

    @contextmanager
    def _store_errors(self, operation: str) -> Iterator[None]:
        try:
            yield
        except ApiError as e:
            raise QueryError(f"{operation} on '{self.index}' failed: {e}") from e
        except TransportError as e:
            raise StoreConnectionError(f"{operation} on '{self.index}' could not reach the store: {e}") from e

    def _assign_identifier(self, model: ModelT, id_field: FieldMeta, value: Any) -> None:
        if not value:
            return
        if model.model_config.get("frozen"):
            logger.debug("Not writing assigned id %r back onto frozen %s", value, type(model).__name__)
            return
        setattr(model, id_field.name, value)


def _body(resp: Any) -> Any:
    return getattr(resp, "body", resp)


def _require_identifier(doc_id: str, operation: str) -> None:
    if not doc_id:
        raise MissingIdentifierError(f"A document identifier is required for {operation}")


def _successful_shards(resp: Any) -> int:
    try:
        return int(_body(resp)["_shards"]["successful"])
    except (KeyError, TypeError, ValueError) as e:
        raise DecodeError(f"Malformed write response: {e!r}") from e
