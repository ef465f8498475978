"""Document store — Elasticsearch connection lifecycle and repository factory.

Uses the official ``elasticsearch`` client (async, v8+). One store owns one
client; repositories created from it share that client.

Usage::

    store = DocumentStore.from_settings(settings.store)
    await store.initialize()
    users = store.repository(User)          # index "users"
    await users.create(User(id="42", username="alice"))
    await store.shutdown()
"""

from __future__ import annotations

import logging
from typing import Any

from elastic_transport import TransportError
from elasticsearch import ApiError, AsyncElasticsearch

from docbridge.exceptions import StoreConnectionError
from docbridge.models.page import ModelT
from docbridge.store.repository import Refresh, Repository

logger = logging.getLogger(__name__)


class DocumentStore:
    """Owns an ``AsyncElasticsearch`` client and hands out repositories.

    Args:
        hosts: List of Elasticsearch node URLs.
        username: Optional HTTP basic-auth username.
        password: Optional HTTP basic-auth password.
        api_key: Optional API key (takes precedence over basic auth).
        verify_certs: Whether to verify TLS certificates.
        request_timeout: Default request timeout in seconds.
        refresh: Refresh policy applied to writes.
        indices: Model class name to index name overrides.
        **kwargs: Additional keyword arguments forwarded to ``AsyncElasticsearch``.
    """

    def __init__(
        self,
        hosts: list[str] | None = None,
        username: str | None = None,
        password: str | None = None,
        api_key: str | None = None,
        verify_certs: bool = True,
        request_timeout: float = 30.0,
        refresh: Refresh = "true",
        indices: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> None:
        self._hosts = hosts or ["http://localhost:9200"]
        self._username = username
        self._password = password
        self._api_key = api_key
        self._verify_certs = verify_certs
        self._request_timeout = request_timeout
        self._refresh = refresh
        self._indices = dict(indices or {})
        self._extra_kwargs = kwargs
        self._client: AsyncElasticsearch | None = None
        self._repositories: dict[tuple[type, str], Repository[Any]] = {}

    @classmethod
    def from_settings(cls, settings: Any) -> DocumentStore:
        """Create a store from ``StoreSettings``."""
        return cls(
            hosts=settings.hosts,
            username=settings.username,
            password=settings.password,
            api_key=settings.api_key,
            verify_certs=settings.verify_certs,
            request_timeout=settings.request_timeout,
            refresh=settings.refresh,
            indices=settings.indices,
            **settings.extra,
        )

    async def __aenter__(self) -> DocumentStore:
        await self.initialize()
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.shutdown()

    @property
    def client(self) -> AsyncElasticsearch:
        if self._client is None:
            raise StoreConnectionError("Document store not initialized. Call initialize() first.")
        return self._client

    async def initialize(self) -> None:
        """Create the client and verify the cluster is reachable."""
        client_kwargs: dict[str, Any] = {
            "hosts": self._hosts,
            "verify_certs": self._verify_certs,
            "request_timeout": self._request_timeout,
        }
        if self._api_key:
            client_kwargs["api_key"] = self._api_key
        elif self._username and self._password:
            client_kwargs["basic_auth"] = (self._username, self._password)
        client_kwargs.update(self._extra_kwargs)

        client = AsyncElasticsearch(**client_kwargs)
        try:
            info = await client.info()
        except (ApiError, TransportError) as e:
            await client.close()
            raise StoreConnectionError(f"Failed to connect to Elasticsearch: {e}") from e

        self._client = client
        info = getattr(info, "body", info)
        version = info.get("version", {}).get("number", "unknown")
        cluster = info.get("cluster_name", "unknown")
        logger.info("Connected to Elasticsearch cluster: %s (v%s)", cluster, version)

    async def shutdown(self) -> None:
        """Close the client and forget every repository bound to it."""
        if self._client:
            await self._client.close()
            self._client = None
        self._repositories.clear()

    def repository(self, model_type: type[ModelT], index: str | None = None) -> Repository[ModelT]:
        """Return the repository for *model_type* in *index*.

        The index defaults to the configured override for the model's class
        name, else the lowercase class name with an ``s`` appended.
        """
        index = index or self.index_for(model_type)
        key = (model_type, index)
        repo = self._repositories.get(key)
        if repo is None:
            repo = Repository(self.client, index, model_type, refresh=self._refresh)
            self._repositories[key] = repo
            logger.debug("Created repository for %s on index %r", model_type.__name__, index)
        return repo

    def index_for(self, model_type: type) -> str:
        return self._indices.get(model_type.__name__) or f"{model_type.__name__.lower()}s"
