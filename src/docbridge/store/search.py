"""Search builder — Runs paged searches from typed search criteria.

Binds a repository to the functions that derive a filter and a sort
expression from a criteria object. The defaults read a ``SearchFilter``;
callers with their own criteria types pass their own functions.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Generic

from docbridge.models.filters import FilterSpec, SearchFilter
from docbridge.models.page import ModelT, SearchPage
from docbridge.store.repository import Repository


def _default_filter(criteria: SearchFilter) -> FilterSpec:
    return criteria.to_filter_spec()


def _default_sort(criteria: SearchFilter) -> str | None:
    return criteria.sort


class SearchBuilder(Generic[ModelT]):
    """Paged search over one repository.

    Example::

        builder = SearchBuilder(store.repository(User))
        page = await builder.search(UserFilter(username="al", sort="-age", limit=10))
    """

    def __init__(
        self,
        repository: Repository[ModelT],
        build_filter: Callable[[Any], FilterSpec] = _default_filter,
        get_sort: Callable[[Any], str | None] = _default_sort,
    ) -> None:
        self.repository = repository
        self.build_filter = build_filter
        self.get_sort = get_sort

    async def search(
        self,
        criteria: SearchFilter,
        *,
        request_timeout: float | None = None,
    ) -> SearchPage[ModelT]:
        return await self.repository.search(
            self.build_filter(criteria),
            self.get_sort(criteria),
            limit=criteria.limit,
            offset=criteria.skip,
            request_timeout=request_timeout,
        )
