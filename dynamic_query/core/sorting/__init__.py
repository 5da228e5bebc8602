"""Sort specification parsing and dynamic ordering."""

from dynamic_query.core.sorting.builder import apply_ordering, sort
from dynamic_query.core.sorting.comparators import (
    ComparatorCache,
    ComparatorKey,
    compare,
    comparator_cache,
    null_safe_key,
    order_items,
    ordering_equal,
)
from dynamic_query.core.sorting.terms import (
    SortDirection,
    SortSpec,
    SortTerm,
    canonicalize,
    parse_sort,
)

__all__ = [
    "ComparatorCache",
    "ComparatorKey",
    "SortDirection",
    "SortSpec",
    "SortTerm",
    "apply_ordering",
    "canonicalize",
    "comparator_cache",
    "compare",
    "null_safe_key",
    "order_items",
    "ordering_equal",
    "parse_sort",
    "sort",
]
