"""FastAPI dependencies for pagination query parameters."""

from dynamic_query.core.dependencies.pagination import (
    OffsetPagination,
    cursor_pagination,
    get_offset_pagination,
)

__all__ = [
    "OffsetPagination",
    "cursor_pagination",
    "get_offset_pagination",
]
