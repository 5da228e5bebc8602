"""Offset (page number) pagination."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from dynamic_query.core.pagination.schemas import OffsetPaginationRequest, Page, total_pages
from dynamic_query.core.query import Queryable, as_queryable
from dynamic_query.core.settings import get_pagination_settings
from dynamic_query.core.sorting.builder import apply_ordering
from dynamic_query.core.sorting.terms import parse_sort
from dynamic_query.infra.logging import get_lazy_logger

_lazy = get_lazy_logger(__name__)


async def paginate_offset[T](
    source: Queryable[T] | Iterable[T],
    page: int = 1,
    size: int | None = None,
    *,
    sort: str | None = None,
    model: type[T] | None = None,
) -> Page[T]:
    """Fetch one page by page number.

    Always counts the matching rows so the result carries ``total_items``
    and ``total_pages``. A page past the end returns no items.

    Args:
        source: Queryable, or any iterable (wrapped in a ListQuery)
        page: Page number, starting at 1
        size: Page size; defaults to the configured default page size
        sort: Optional sort string applied before slicing
        model: Entity type, required for empty collections

    Raises:
        pydantic.ValidationError: If ``page`` < 1 or ``size`` < 1
        InvalidSortError: If ``sort`` is malformed

    Example:
        >>> page = await paginate_offset(people, page=2, size=10, sort="name")
        >>> page.total_pages, page.has_next_page
    """
    if size is None:
        size = get_pagination_settings().default_page_size
    request = OffsetPaginationRequest(page=page, size=size)

    query: Queryable[Any] = as_queryable(source, model)
    if sort and sort.strip():
        query = apply_ordering(query, parse_sort(sort, query.model))

    total = await query.count()
    rows = await query.skip(request.offset).take(request.size).all()

    _lazy.debug(lambda: f"paginate_offset: {query.model.__name__} page={request.page} -> {len(rows)}/{total} rows")
    return Page(
        items=rows,
        page_size=request.size,
        current_page=request.page,
        total_items=total,
        total_pages=total_pages(total, request.size),
    )


__all__ = ["paginate_offset"]
