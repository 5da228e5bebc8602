"""Dynamic order builder.

Applies a parsed sort specification to a queryable (deferred) or to a
plain collection (immediately, via the comparator cache).

Usage:
    ordered = apply_ordering(query, parse_sort("age,name:desc", User))
    people = sort(people, "age,name:desc")
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, overload

from dynamic_query.core.query.base import Queryable
from dynamic_query.core.settings import get_pagination_settings
from dynamic_query.core.sorting.comparators import order_items
from dynamic_query.core.sorting.terms import SortSpec, parse_sort
from dynamic_query.infra.logging import get_lazy_logger

_lazy = get_lazy_logger(__name__)


def apply_ordering[Q: Queryable[Any]](query: Q, spec: SortSpec) -> Q:
    """Replace the query's ordering with ``spec``.

    The first term becomes the primary order and every later term a
    then-by beneath all preceding ones.
    """
    ordered = query.clear_ordering()
    for term in spec:
        ordered = ordered.order_by(term.path, term.direction)
    return ordered


@overload
def sort[Q: Queryable[Any]](source: Q, sort_by: str | None, *, model: type | None = ..., null_safe: bool | None = ...) -> Q: ...


@overload
def sort[T](source: Iterable[T], sort_by: str | None, *, model: type | None = ..., null_safe: bool | None = ...) -> list[T]: ...


def sort(
    source: Any,
    sort_by: str | None,
    *,
    model: type | None = None,
    null_safe: bool | None = None,
) -> Any:
    """Order a queryable or a collection by a sort string.

    A blank ``sort_by`` leaves the source unordered (a collection comes back
    as a list in its original order).

    Args:
        source: Queryable or iterable of entities
        sort_by: Sort string such as ``"age,name:desc"``
        model: Entity type; defaults to the queryable's model or the first item's type
        null_safe: Order None first in memory; defaults to settings

    Raises:
        InvalidFieldError: If a field path does not resolve
    """
    if isinstance(source, Queryable):
        if sort_by is None or not sort_by.strip():
            return source
        return apply_ordering(source, parse_sort(sort_by, model or source.model))

    items = list(source)
    if sort_by is None or not sort_by.strip() or not items and model is None:
        return items

    entity = model or type(items[0])
    spec = parse_sort(sort_by, entity)
    if null_safe is None:
        null_safe = get_pagination_settings().null_safe_sort
    _lazy.debug(lambda: f"sort: {entity.__name__}[{len(items)}] by {spec}")
    return order_items(items, spec, entity, null_safe=null_safe)


__all__ = ["apply_ordering", "sort"]
