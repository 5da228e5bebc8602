"""Cursor (keyset) and offset pagination.

Usage:
    from dynamic_query.core.pagination import CursorPaginationRequest, paginate_cursor

    request = CursorPaginationRequest(size=20, sort="age:desc", unique_sort="id")
    page = await paginate_cursor(query, request)
    if page.next_cursor:
        page = await paginate_cursor(query, request.model_copy(update={"after": page.next_cursor}))
"""

from dynamic_query.core.pagination.cursor import CursorCodec, CursorPayload
from dynamic_query.core.pagination.engine import CursorPaginator, paginate_cursor
from dynamic_query.core.pagination.keyset import anchor_values, build_keyset_predicate
from dynamic_query.core.pagination.offset import paginate_offset
from dynamic_query.core.pagination.schemas import (
    CursorPaginationRequest,
    NavigationState,
    OffsetPaginationRequest,
    Page,
    total_pages,
)

__all__ = [
    "CursorCodec",
    "CursorPaginationRequest",
    "CursorPaginator",
    "CursorPayload",
    "NavigationState",
    "OffsetPaginationRequest",
    "Page",
    "anchor_values",
    "build_keyset_predicate",
    "paginate_cursor",
    "paginate_offset",
    "total_pages",
]
