"""Dynamic ordering plus cursor (keyset) and offset pagination.

Usage:
    from dynamic_query import CursorPaginationRequest, SelectQuery, paginate_cursor, sort

    people = sort(people, "age,name:desc")

    query = SelectQuery.of(session, model=Person)
    page = await paginate_cursor(query, CursorPaginationRequest(size=20, sort="age", unique_sort="id"))
"""

from dynamic_query.core.exceptions import (
    CursorDecodeError,
    CursorMismatchError,
    InvalidFieldError,
    InvalidSortError,
    InvariantViolationError,
    QueryError,
    ValueCoercionError,
)
from dynamic_query.core.pagination import (
    CursorCodec,
    CursorPaginationRequest,
    CursorPaginator,
    NavigationState,
    OffsetPaginationRequest,
    Page,
    paginate_cursor,
    paginate_offset,
)
from dynamic_query.core.query import ListQuery, Queryable, SelectQuery
from dynamic_query.core.sorting import SortDirection, SortSpec, SortTerm, apply_ordering, parse_sort, sort

__version__ = "0.1.0"

__all__ = [
    "CursorCodec",
    "CursorDecodeError",
    "CursorMismatchError",
    "CursorPaginationRequest",
    "CursorPaginator",
    "InvalidFieldError",
    "InvalidSortError",
    "InvariantViolationError",
    "ListQuery",
    "NavigationState",
    "OffsetPaginationRequest",
    "Page",
    "QueryError",
    "Queryable",
    "SelectQuery",
    "SortDirection",
    "SortSpec",
    "SortTerm",
    "ValueCoercionError",
    "apply_ordering",
    "paginate_cursor",
    "paginate_offset",
    "parse_sort",
    "sort",
]
