"""Pagination request and response schemas.

Two styles share one response shape:

1. Offset pagination: ``current_page``/``total_items`` are set, cursors are not.
2. Cursor (keyset) pagination: ``next_cursor``/``previous_cursor`` are set;
   ``total_pages`` only when counting was requested.

``has_next_page``/``has_previous_page`` are derived from whichever style
filled the page.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator

from dynamic_query.core.sorting.terms import TERM_SEPARATOR, SortSpec, SortTerm, parse_sort

T = TypeVar("T")


class NavigationState(StrEnum):
    """Which way a cursor request moves."""

    FIRST_PAGE = "first_page"
    FORWARD = "forward"
    BACKWARD = "backward"


class CursorPaginationRequest(BaseModel):
    """Cursor pagination request.

    ``before`` and ``after`` are mutually exclusive in practice; when both
    are present ``before`` wins.

    Attributes:
        before: Cursor to page backward from (previous page)
        after: Cursor to page forward from (next page)
        size: Page size
        sort: Sort string; defaults to ``unique_sort`` when blank
        unique_sort: Single-term sort on a field unique per row (the tiebreaker)

    Example:
        request = CursorPaginationRequest(size=20, sort="age:desc", unique_sort="id")
        page = await paginate_cursor(query, request)
        request = request.model_copy(update={"after": page.next_cursor})
    """

    before: str | None = Field(default=None, description="Cursor to page backward from")
    after: str | None = Field(default=None, description="Cursor to page forward from")
    size: int = Field(gt=0, description="Page size")
    sort: str | None = Field(default=None, description="Sort string, e.g. 'age,name:desc'")
    unique_sort: str = Field(description="Sort term on a unique field, e.g. 'id'")

    model_config = ConfigDict(frozen=True)

    @field_validator("unique_sort")
    @classmethod
    def validate_unique_sort(cls, value: str) -> str:
        """unique_sort must be a single non-blank term."""
        if not value or not value.strip():
            msg = "unique_sort cannot be null, empty, or whitespace"
            raise ValueError(msg)
        if TERM_SEPARATOR in value:
            msg = "unique_sort must name exactly one field"
            raise ValueError(msg)
        return value.strip()

    @field_validator("before", "after", "sort", mode="before")
    @classmethod
    def blank_to_none(cls, value: Any) -> Any:
        """Treat blank strings as absent."""
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def state(self) -> NavigationState:
        if self.before:
            return NavigationState.BACKWARD
        if self.after:
            return NavigationState.FORWARD
        return NavigationState.FIRST_PAGE

    @property
    def cursor(self) -> str | None:
        """The cursor consulted for this request."""
        return self.before or self.after

    @property
    def requested_sort(self) -> str:
        return self.sort or self.unique_sort

    def tiebreaker(self, model: type | None = None) -> SortTerm:
        return parse_sort(self.unique_sort, model)[0]

    def resolve_sort(self, model: type | None = None) -> SortSpec:
        """Effective forward ordering: requested sort plus the unique tiebreaker.

        Raises:
            InvalidSortError: If the sort string is malformed
            InvalidFieldError: If a field does not resolve on ``model``
        """
        spec = parse_sort(self.requested_sort, model)
        return spec.with_tiebreaker(self.tiebreaker(model))


class OffsetPaginationRequest(BaseModel):
    """Offset pagination request (1-indexed page number)."""

    page: int = Field(default=1, ge=1, description="Page number, starting at 1")
    size: int = Field(gt=0, description="Page size")

    model_config = ConfigDict(frozen=True)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.size


class Page(BaseModel, Generic[T]):
    """One page of results plus navigation metadata.

    Attributes:
        items: Rows of this page in the requested order
        page_size: Requested page size
        next_cursor: Cursor for the next page (None on the last page)
        previous_cursor: Cursor for the previous page (None on the first page)
        current_page: Page number (offset pagination only)
        total_items: Total matching rows (offset pagination only)
        total_pages: ceil(total rows / page size), when counted
    """

    items: list[T] = Field(default_factory=list, description="Items of this page")
    page_size: int = Field(description="Requested page size")
    next_cursor: str | None = Field(default=None, description="Cursor to fetch the next page")
    previous_cursor: str | None = Field(default=None, description="Cursor to fetch the previous page")
    current_page: int | None = Field(default=None, description="Current page number (offset only)")
    total_items: int | None = Field(default=None, description="Total item count (optional)")
    total_pages: int | None = Field(default=None, description="Total page count (optional)")

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @model_validator(mode="after")
    def check_cursor_or_offset(self) -> Page[T]:
        """A page is either cursor-based or offset-based, never both."""
        has_cursor = self.next_cursor is not None or self.previous_cursor is not None
        if has_cursor and self.current_page is not None:
            msg = "A page cannot carry both cursors and a page number"
            raise ValueError(msg)
        return self

    @computed_field  # type: ignore[prop-decorator]
    @property
    def has_next_page(self) -> bool:
        if self.next_cursor is not None:
            return True
        if self.current_page is not None and self.total_pages is not None:
            return self.current_page < self.total_pages
        return False

    @computed_field  # type: ignore[prop-decorator]
    @property
    def has_previous_page(self) -> bool:
        if self.previous_cursor is not None:
            return True
        if self.current_page is not None:
            return self.current_page > 1
        return False


def total_pages(total_items: int, size: int) -> int:
    """ceil(total_items / size); zero rows means zero pages."""
    if total_items <= 0:
        return 0
    return (total_items + size - 1) // size


__all__ = [
    "CursorPaginationRequest",
    "NavigationState",
    "OffsetPaginationRequest",
    "Page",
    "total_pages",
]
