"""Unit tests for the comparator cache and in-memory ordering."""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal

import pytest

from dynamic_query.core.exceptions import InvalidFieldError
from dynamic_query.core.sorting.comparators import (
    ComparatorCache,
    ComparatorKey,
    compare,
    null_safe_key,
    order_items,
    ordering_equal,
)
from dynamic_query.core.sorting.terms import parse_sort
from tests.fixtures.models import Address, Person


class TestCompare:
    """Tests for ordering-aware comparison."""

    @pytest.mark.parametrize(
        ("left", "right", "expected"),
        [
            (1, 2, -1),
            (2, 1, 1),
            (2, 2, 0),
            ("a", "b", -1),
            ((True, 3), (True, 3), 0),
        ],
    )
    def test_compare(self, left, right, expected):
        assert compare(left, right) == expected

    def test_ordering_equal_across_numeric_types(self):
        """Equality follows the ordering, so numeric representations compare equal."""
        assert ordering_equal(Decimal("1.0"), 1)
        assert not ordering_equal(1, 2)

    def test_null_safe_key_puts_none_first(self):
        assert sorted([3, None, 1], key=null_safe_key) == [None, 1, 3]


class TestComparatorCache:
    """Tests for the write-once cache."""

    def test_compiles_once_per_key(self):
        cache = ComparatorCache()

        first = cache.get(Person, "age")
        second = cache.get(Person, "age")

        assert first is second
        assert len(cache) == 1
        assert ComparatorKey(Person, "age", True) in cache

    def test_null_mode_is_part_of_the_key(self):
        cache = ComparatorCache()

        safe = cache.get(Person, "age", null_safe=True)
        raw = cache.get(Person, "age", null_safe=False)

        assert safe is not raw
        assert safe(Person(1, 5)) == (True, 5)
        assert raw(Person(1, 5)) == 5

    def test_first_published_value_wins(self):
        cache = ComparatorCache()
        key = ComparatorKey(Person, "name", True)

        winner = cache.get_or_add(key, lambda _: lambda item: "first")
        loser = cache.get_or_add(key, lambda _: lambda item: "second")

        assert loser is winner

    def test_concurrent_readers_share_one_entry(self):
        cache = ComparatorCache()

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda _: cache.get(Person, "address.city"), range(32)))

        assert all(result is results[0] for result in results)
        assert len(cache) == 1

    def test_invalid_path_is_not_cached(self):
        cache = ComparatorCache()

        with pytest.raises(InvalidFieldError):
            cache.get(Person, "missing")

        assert len(cache) == 0

    def test_nested_key_tolerates_missing_intermediate(self):
        key = ComparatorCache().get(Person, "address.city")

        assert key(Person(1, 1)) == (False, None)
        assert key(Person(1, 1, address=Address("Rome", "00100"))) == (True, "Rome")


class TestOrderItems:
    """Tests for the stable multi-pass sort."""

    def test_lexicographic_mixed_directions(self, people):
        ordered = order_items(people, parse_sort("age:desc,id"), Person)

        assert [p.id for p in ordered] == [1, 2, 3, 4]

    def test_equal_keys_keep_input_order(self):
        """Rows equal on every term stay in input order."""
        rows = [Person(3, 1), Person(1, 1), Person(2, 1)]

        assert [p.id for p in order_items(rows, parse_sort("age"), Person)] == [3, 1, 2]

    def test_null_safe_nested_ordering(self):
        rows = [
            Person(1, 1, address=Address("Rome", "1")),
            Person(2, 1),
            Person(3, 1, address=Address("Oslo", "2")),
        ]

        ascending = order_items(rows, parse_sort("address.city"), Person)
        descending = order_items(rows, parse_sort("address.city:desc"), Person)

        assert [p.id for p in ascending] == [2, 3, 1]
        assert [p.id for p in descending] == [1, 3, 2]
