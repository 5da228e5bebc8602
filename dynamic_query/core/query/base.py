"""Abstract queryable sequence.

A ``Queryable`` is an immutable description of a query: builder methods
return a new instance and nothing touches the store until one of the
coroutine methods (``all``, ``count``, ``first``) is awaited. Cancelling
the awaiting task cancels the store query; no partial result escapes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Self

if TYPE_CHECKING:
    from dynamic_query.core.query.expressions import Expression
    from dynamic_query.core.sorting.terms import SortDirection


class Queryable[T](ABC):
    """Deferred filter/order/limit composition over entities of one type.

    Ordering is composed: the first ``order_by`` is the primary key and each
    later call adds a then-by tie-break beneath the ones before it.
    """

    @property
    @abstractmethod
    def model(self) -> type[T]:
        """Entity type the field paths are resolved against."""

    @abstractmethod
    def filter(self, expression: Expression) -> Self:
        """Add a predicate; multiple filters combine with AND."""

    @abstractmethod
    def order_by(self, path: str, direction: SortDirection) -> Self:
        """Append an ordering term."""

    @abstractmethod
    def clear_ordering(self) -> Self:
        """Drop every ordering term."""

    @abstractmethod
    def take(self, count: int) -> Self:
        """Limit the number of rows returned."""

    @abstractmethod
    def skip(self, count: int) -> Self:
        """Skip leading rows."""

    @abstractmethod
    async def all(self) -> list[T]:
        """Execute and materialize the rows in order."""

    @abstractmethod
    async def count(self) -> int:
        """Count matching rows, ignoring ordering, skip and take."""

    async def first(self) -> T | None:
        """First row, or None when nothing matches."""
        rows = await self.take(1).all()
        return rows[0] if rows else None


__all__ = ["Queryable"]
