"""Reusable pagination dependencies for FastAPI routes.

Two dependency styles are provided:
    - get_offset_pagination: page/size query parameters
    - cursor_pagination(unique_sort): factory for before/after/size/sort
      query parameters bound to a route's unique tiebreaker field

Requested sizes are capped at ``PaginationSettings.max_page_size``.

Usage:
    from dynamic_query.core.dependencies.pagination import (
        OffsetPagination,
        cursor_pagination,
    )

    @router.get("/people")
    async def list_people(
        request: Annotated[CursorPaginationRequest, Depends(cursor_pagination("id"))],
        session: AsyncSession = Depends(get_session),
    ) -> Page[PersonOut]:
        return await paginate_cursor(SelectQuery.of(session, model=Person), request)

    @router.get("/people/by-page")
    async def list_people_by_page(pagination: OffsetPagination) -> Page[PersonOut]:
        return await paginate_offset(query, pagination.page, pagination.size)
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Annotated

from fastapi import Depends, Query

from dynamic_query.core.pagination.schemas import CursorPaginationRequest, OffsetPaginationRequest
from dynamic_query.core.settings import get_pagination_settings


def _effective_size(size: int | None) -> int:
    settings = get_pagination_settings()
    if size is None:
        return settings.default_page_size
    # Enforce max size from settings
    return min(size, settings.max_page_size)


def get_offset_pagination(
    page: Annotated[
        int,
        Query(ge=1, description="Page number, starting at 1"),
    ] = 1,
    size: Annotated[
        int | None,
        Query(ge=1, description="Items per page (default and maximum from settings)"),
    ] = None,
) -> OffsetPaginationRequest:
    """Get offset pagination parameters.

    Args:
        page: Page number (1-indexed).
        size: Items per page; capped at the configured maximum.

    Returns:
        OffsetPaginationRequest with validated page and size.
    """
    return OffsetPaginationRequest(page=page, size=_effective_size(size))


def cursor_pagination(unique_sort: str) -> Callable[..., CursorPaginationRequest]:
    """Build a dependency that reads cursor pagination query parameters.

    Args:
        unique_sort: Sort term on a field unique per row (e.g. ``"id"``),
            fixed by the route rather than the client.

    Returns:
        Dependency callable producing a CursorPaginationRequest.
    """

    def get_cursor_pagination(
        before: Annotated[
            str | None,
            Query(description="Cursor of the page to move backward from"),
        ] = None,
        after: Annotated[
            str | None,
            Query(description="Cursor of the page to move forward from"),
        ] = None,
        size: Annotated[
            int | None,
            Query(ge=1, description="Items per page (default and maximum from settings)"),
        ] = None,
        sort: Annotated[
            str | None,
            Query(description="Sort string, e.g. 'age,name:desc'"),
        ] = None,
    ) -> CursorPaginationRequest:
        return CursorPaginationRequest(
            before=before,
            after=after,
            size=_effective_size(size),
            sort=sort,
            unique_sort=unique_sort,
        )

    return get_cursor_pagination


# Type aliases for cleaner route signatures
OffsetPagination = Annotated[OffsetPaginationRequest, Depends(get_offset_pagination)]


__all__ = [
    "OffsetPagination",
    "cursor_pagination",
    "get_offset_pagination",
]
