"""Process-wide cache of compiled sort-key accessors.

Sorting materialized collections needs one key function per
(entity type, field path, null-handling mode). Building one means walking
the schema, so each is compiled once and reused for the process lifetime.

The key space is bounded by the application's own entity and field
vocabulary (every path is validated against a type before it gets here),
so entries are never evicted. Concurrent misses may compile the same key
twice; the first published value wins and both are equivalent.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterable
from typing import Any, NamedTuple

from dynamic_query.core.schema import registry
from dynamic_query.core.sorting.terms import SortTerm
from dynamic_query.infra.logging import get_lazy_logger

_lazy = get_lazy_logger(__name__)

KeyFunc = Callable[[Any], Any]


class ComparatorKey(NamedTuple):
    model: type
    path: str
    null_safe: bool


def null_safe_key(value: Any) -> tuple[bool, Any]:
    """Sort key that orders None before every other value."""
    return (value is not None, value)


def compare(left: Any, right: Any) -> int:
    """Three-way comparison of two sort keys.

    Uses only ``<`` so any totally ordered type works, including
    identifier types that define ordering but not subtraction.
    """
    if left < right:
        return -1
    if right < left:
        return 1
    return 0


def ordering_equal(left: Any, right: Any) -> bool:
    """Equality under the ordering (compare == 0), not ``==``."""
    return compare(left, right) == 0


class ComparatorCache:
    """Write-once-per-key cache of sort-key functions.

    Example:
        key = comparator_cache.get(User, "profile.age", null_safe=True)
        users.sort(key=key)
    """

    def __init__(self) -> None:
        self._entries: dict[ComparatorKey, KeyFunc] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def get(self, model: type, path: str, *, null_safe: bool = True) -> KeyFunc:
        """Get the key function for a field, compiling it on first use."""
        return self.get_or_add(ComparatorKey(model, path, null_safe), self._compile)

    def get_or_add(self, key: ComparatorKey, factory: Callable[[ComparatorKey], KeyFunc]) -> KeyFunc:
        cached = self._entries.get(key)
        if cached is not None:
            return cached

        compiled = factory(key)
        with self._lock:
            published = self._entries.setdefault(key, compiled)
        if published is compiled:
            _lazy.debug(lambda: f"comparator.compile: {key.model.__name__}.{key.path} (null_safe={key.null_safe})")
        return published

    @staticmethod
    def _compile(key: ComparatorKey) -> KeyFunc:
        descriptor = registry.resolve(key.model, key.path)
        read = descriptor.read
        if key.null_safe:
            return lambda item: null_safe_key(read(item))
        return read


comparator_cache = ComparatorCache()


def order_items[T](
    items: Iterable[T],
    terms: Iterable[SortTerm],
    model: type,
    *,
    null_safe: bool = True,
) -> list[T]:
    """Stable lexicographic multi-key sort.

    Sorts by the lowest-precedence term first and the primary term last;
    because each pass is stable, rows equal on earlier terms keep the order
    established by later ones.
    """
    result = list(items)
    for term in reversed(list(terms)):
        key = comparator_cache.get(model, term.path, null_safe=null_safe)
        result.sort(key=key, reverse=term.descending)
    return result


__all__ = [
    "ComparatorCache",
    "ComparatorKey",
    "KeyFunc",
    "compare",
    "comparator_cache",
    "null_safe_key",
    "order_items",
    "ordering_equal",
]
