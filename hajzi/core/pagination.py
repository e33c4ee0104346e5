"""
Turning raw page inputs and query results into listing pages.
"""

from typing import Callable, Optional, Sequence, TypeVar

from hajzi.core.constants import DEFAULT_PAGE, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from hajzi.schemas.common.pagination import PaginatedResponse, PaginationParams

TRow = TypeVar("TRow")
TItem = TypeVar("TItem")


def normalize_pagination(page: Optional[int], page_size: Optional[int]) -> PaginationParams:
    """Missing or non-positive inputs fall back to defaults; page_size is capped."""
    page = page if page and page > 0 else DEFAULT_PAGE
    page_size = page_size if page_size and page_size > 0 else DEFAULT_PAGE_SIZE
    return PaginationParams(page=page, page_size=min(page_size, MAX_PAGE_SIZE))


def paginate_items(
    *,
    items: Sequence[TRow],
    total_items: int,
    params: PaginationParams,
    mapper: Callable[[TRow], TItem],
) -> PaginatedResponse[TItem]:
    return PaginatedResponse.create(
        items=[mapper(row) for row in items],
        total_items=total_items,
        page=params.page,
        page_size=params.page_size,
    )
