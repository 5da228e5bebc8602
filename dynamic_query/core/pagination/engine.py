"""Cursor pagination engine.

Each request is in one of three states:

    FIRST_PAGE  no cursor: order forward, take size + 1 to learn whether
                more rows follow
    FORWARD     ``after`` cursor: seek past the anchor under the forward
                ordering
    BACKWARD    ``before`` cursor: seek past the anchor under the reversed
                ordering, then restore the caller's order

Paging forward or backward consults the data set's edge row in the
direction of travel (global last when moving forward, global first when
moving backward). A full page whose trailing row is that edge row gets no
cursor on that side, so the caller never follows a cursor to an empty page.
Every request issues at most two data queries, plus a count when
``include_total`` is on.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from dynamic_query.core.exceptions import CursorDecodeError, CursorMismatchError, InvariantViolationError
from dynamic_query.core.pagination.cursor import CursorCodec
from dynamic_query.core.pagination.keyset import build_keyset_predicate
from dynamic_query.core.pagination.schemas import CursorPaginationRequest, NavigationState, Page, total_pages
from dynamic_query.core.query import Queryable, as_queryable
from dynamic_query.core.schema import registry
from dynamic_query.core.settings import get_pagination_settings
from dynamic_query.core.sorting.builder import apply_ordering
from dynamic_query.core.sorting.comparators import ordering_equal
from dynamic_query.infra.logging import get_lazy_logger

logger = logging.getLogger(__name__)
_lazy = get_lazy_logger(__name__)


class CursorPaginator[T]:
    """Run one cursor pagination request against a queryable.

    Field paths are validated in the constructor, before any query runs.

    Example:
        paginator = CursorPaginator(query, CursorPaginationRequest(size=2, sort="age", unique_sort="id"))
        page = await paginator.paginate()
    """

    __slots__ = ("query", "request", "model", "base_sort", "unique_field", "include_total")

    def __init__(
        self,
        query: Queryable[T],
        request: CursorPaginationRequest,
        *,
        include_total: bool | None = None,
    ) -> None:
        self.query = query
        self.request = request
        self.model = query.model
        self.base_sort = request.resolve_sort(self.model)
        self.unique_field = registry.resolve(self.model, request.tiebreaker(self.model).path)
        if include_total is None:
            include_total = get_pagination_settings().include_total
        self.include_total = include_total

    @property
    def state(self) -> NavigationState:
        return self.request.state

    async def paginate(self) -> Page[T]:
        """Fetch the requested page.

        Raises:
            CursorDecodeError: Malformed or foreign cursor
            CursorMismatchError: Cursor was issued under a different sort
            InvariantViolationError: A sort field is null on a boundary row
        """
        state = self.state
        _lazy.debug(lambda: f"paginate_cursor: {self.model.__name__} {state} size={self.request.size} sort={self.base_sort}")

        pages: int | None = None
        if self.include_total:
            pages = total_pages(await self.query.count(), self.request.size)

        if state is NavigationState.FIRST_PAGE:
            page = await self._first_page()
        else:
            page = await self._seek(backward=state is NavigationState.BACKWARD)

        if pages is not None:
            page = page.model_copy(update={"total_pages": pages})
        return page

    async def _first_page(self) -> Page[T]:
        size = self.request.size
        rows = await apply_ordering(self.query, self.base_sort).take(size + 1).all()
        has_more = len(rows) > size
        rows = rows[:size]

        next_cursor = self._cursor(rows[-1]) if has_more else None
        _lazy.debug(lambda: f"paginate_cursor: first page -> {len(rows)} rows, has_next={has_more}")
        return Page(items=rows, page_size=size, next_cursor=next_cursor)

    async def _seek(self, *, backward: bool) -> Page[T]:
        size = self.request.size
        try:
            payload = CursorCodec.decode(self.request.cursor or "")
        except CursorDecodeError as exc:
            logger.warning("Invalid cursor", extra={"state": str(self.state), "error": exc.message})
            raise
        if not self.base_sort.matches(payload.sort):
            logger.warning(
                "Cursor sort mismatch",
                extra={"expected_sort": str(self.base_sort), "cursor_sort": payload.sort},
            )
            raise CursorMismatchError(expected=str(self.base_sort), actual=payload.sort)

        effective = self.base_sort.reversed() if backward else self.base_sort

        # The edge row in the direction of travel: global first when moving
        # backward, global last when moving forward.
        edge = await apply_ordering(self.query, effective.reversed()).first()

        predicate = build_keyset_predicate(effective, payload.properties, self.model)
        rows = await apply_ordering(self.query, effective).filter(predicate).take(size).all()
        if backward:
            rows.reverse()

        next_cursor = self._cursor(rows[-1]) if rows else None
        previous_cursor = self._cursor(rows[0]) if rows else None

        if len(rows) < size or self._is_edge(rows[0] if backward else rows[-1], edge):
            if backward:
                previous_cursor = None
            else:
                next_cursor = None

        _lazy.debug(
            lambda: f"paginate_cursor: {'backward' if backward else 'forward'} -> {len(rows)} rows, "
            f"has_next={next_cursor is not None}, has_previous={previous_cursor is not None}"
        )
        return Page(items=rows, page_size=size, next_cursor=next_cursor, previous_cursor=previous_cursor)

    def _cursor(self, row: T) -> str:
        # Cursors always carry the forward ordering so they work as either
        # ``after`` or ``before`` tokens.
        return CursorCodec.create_cursor(row, self.base_sort, self.model)

    def _is_edge(self, row: T, edge: T | None) -> bool:
        """Whether ``row`` is the data set's edge row, compared on the unique field."""
        if edge is None:
            msg = "Boundary row is missing while checking for the end of the data set"
            raise InvariantViolationError(msg, details={"path": self.unique_field.path})

        row_key = self.unique_field.read(row)
        edge_key = self.unique_field.read(edge)
        if row_key is None or edge_key is None:
            msg = f"Unique sort field '{self.unique_field.path}' is null"
            raise InvariantViolationError(msg, details={"path": self.unique_field.path})
        return ordering_equal(row_key, edge_key)


async def paginate_cursor[T](
    source: Queryable[T] | Iterable[T],
    request: CursorPaginationRequest,
    *,
    model: type[T] | None = None,
    include_total: bool | None = None,
) -> Page[T]:
    """Fetch one cursor page from a queryable or an in-memory collection.

    Args:
        source: Queryable, or any iterable (wrapped in a ListQuery)
        request: Cursor pagination request
        model: Entity type, required for empty collections
        include_total: Count rows to fill total_pages; defaults to settings

    Example:
        >>> request = CursorPaginationRequest(size=2, sort="age", unique_sort="id")
        >>> page = await paginate_cursor(people, request)
        >>> page = await paginate_cursor(people, request.model_copy(update={"after": page.next_cursor}))
    """
    query: Queryable[Any] = as_queryable(source, model)
    return await CursorPaginator(query, request, include_total=include_total).paginate()


__all__ = ["CursorPaginator", "paginate_cursor"]
