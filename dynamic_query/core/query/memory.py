"""In-memory query backend.

``ListQuery`` realises the queryable contract over a materialized
collection. Predicates and ordering read fields through the same cached
sort-key functions, so a row the predicate puts "after" the anchor is also
sorted after it.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, replace
from typing import Any, Self

from dynamic_query.core.query.base import Queryable
from dynamic_query.core.query.expressions import And, Expression, FieldEquals, FieldGreater, FieldLess, Or
from dynamic_query.core.sorting.comparators import comparator_cache, compare, null_safe_key, order_items
from dynamic_query.core.sorting.terms import SortDirection, SortTerm

Predicate = Callable[[Any], bool]


def compile_predicate(expression: Expression, model: type, *, null_safe: bool = True) -> Predicate:
    """Compile an expression tree to a closure over entities of ``model``."""
    if isinstance(expression, And):
        parts = [compile_predicate(operand, model, null_safe=null_safe) for operand in expression.operands]
        return lambda item: all(part(item) for part in parts)

    if isinstance(expression, Or):
        parts = [compile_predicate(operand, model, null_safe=null_safe) for operand in expression.operands]
        return lambda item: any(part(item) for part in parts)

    key = comparator_cache.get(model, expression.path, null_safe=null_safe)
    anchor = null_safe_key(expression.value) if null_safe else expression.value

    if isinstance(expression, FieldEquals):
        return lambda item: compare(key(item), anchor) == 0
    if isinstance(expression, FieldGreater):
        return lambda item: compare(key(item), anchor) > 0
    if isinstance(expression, FieldLess):
        return lambda item: compare(key(item), anchor) < 0

    msg = f"Unsupported expression node: {type(expression).__name__}"
    raise TypeError(msg)


@dataclass(frozen=True, slots=True)
class ListQuery[T](Queryable[T]):
    """Queryable over an in-memory collection.

    Example:
        query = ListQuery(users, User).filter(FieldGreater("age", 18))
        adults = await query.order_by("age", SortDirection.ASC).take(10).all()
    """

    items: tuple[T, ...]
    entity: type[T]
    predicates: tuple[Expression, ...] = ()
    ordering: tuple[SortTerm, ...] = ()
    limit: int | None = None
    offset: int = 0
    null_safe: bool = field(default=True)

    @classmethod
    def of(cls, items: Iterable[T], model: type[T] | None = None, *, null_safe: bool = True) -> ListQuery[T]:
        """Wrap a collection, taking the entity type from the first item if not given."""
        materialized = tuple(items)
        if model is None:
            if not materialized:
                msg = "Cannot infer entity type from an empty collection; pass model="
                raise ValueError(msg)
            model = type(materialized[0])
        return cls(items=materialized, entity=model, null_safe=null_safe)

    @property
    def model(self) -> type[T]:
        return self.entity

    def filter(self, expression: Expression) -> Self:
        return replace(self, predicates=(*self.predicates, expression))

    def order_by(self, path: str, direction: SortDirection) -> Self:
        return replace(self, ordering=(*self.ordering, SortTerm(path, direction)))

    def clear_ordering(self) -> Self:
        return replace(self, ordering=())

    def take(self, count: int) -> Self:
        limit = count if self.limit is None else min(self.limit, count)
        return replace(self, limit=limit)

    def skip(self, count: int) -> Self:
        return replace(self, offset=self.offset + count)

    def _filtered(self) -> list[T]:
        rows: Iterable[T] = self.items
        for expression in self.predicates:
            predicate = compile_predicate(expression, self.entity, null_safe=self.null_safe)
            rows = [row for row in rows if predicate(row)]
        return list(rows)

    async def all(self) -> list[T]:
        rows = self._filtered()
        if self.ordering:
            rows = order_items(rows, self.ordering, self.entity, null_safe=self.null_safe)
        end = None if self.limit is None else self.offset + self.limit
        return rows[self.offset:end]

    async def count(self) -> int:
        return len(self._filtered())


__all__ = ["ListQuery", "compile_predicate"]
