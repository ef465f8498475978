"""Search result page model."""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, Field

ModelT = TypeVar("ModelT", bound=BaseModel)


class SearchPage(BaseModel, Generic[ModelT]):
    """One page of decoded search hits.

    ``total`` is the match count reported by the store and may exceed
    ``len(items)``.
    """

    total: int = Field(default=0, description="Total number of matching documents")
    items: list[ModelT] = Field(default_factory=list, description="Decoded models, in store order")
