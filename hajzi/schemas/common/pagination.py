"""
Page-numbered listing schemas.
"""

import math
from typing import Generic, List, TypeVar

from pydantic import Field, computed_field

from hajzi.core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from hajzi.schemas.common.base import BaseSchema

T = TypeVar("T")

__all__ = ["PaginationParams", "PaginationMeta", "PaginatedResponse"]


class PaginationParams(BaseSchema):
    """1-based page window, with the matching SQL offset and limit."""

    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)

    @computed_field  # type: ignore[misc]
    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    @computed_field  # type: ignore[misc]
    @property
    def limit(self) -> int:
        return self.page_size


class PaginationMeta(BaseSchema):
    total_items: int = Field(..., ge=0)
    total_pages: int = Field(..., ge=0)
    current_page: int = Field(..., ge=1)
    page_size: int = Field(..., ge=1)
    has_next: bool
    has_previous: bool

    @classmethod
    def for_window(cls, total_items: int, page: int, page_size: int) -> "PaginationMeta":
        total_pages = math.ceil(total_items / page_size)
        return cls(
            total_items=total_items,
            total_pages=total_pages,
            current_page=page,
            page_size=page_size,
            has_next=page < total_pages,
            has_previous=page > 1,
        )


class PaginatedResponse(BaseSchema, Generic[T]):
    items: List[T]
    meta: PaginationMeta

    @classmethod
    def create(cls, items: List[T], total_items: int, page: int, page_size: int) -> "PaginatedResponse[T]":
        return cls(items=items, meta=PaginationMeta.for_window(total_items, page, page_size))
