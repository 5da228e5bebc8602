"""Unit tests for the dynamic order builder."""
from __future__ import annotations

import pytest

from dynamic_query.core.exceptions import InvalidFieldError
from dynamic_query.core.query import ListQuery
from dynamic_query.core.settings import clear_settings_cache
from dynamic_query.core.sorting import SortDirection, apply_ordering, parse_sort, sort
from tests.fixtures.models import Person


class TestSortCollections:
    """sort() over plain collections."""

    def test_sorts_by_string(self, people):
        assert [p.id for p in sort(people, "age,id")] == [4, 2, 3, 1]

    def test_descending_then_ascending(self, people):
        assert [p.id for p in sort(people, "age:desc,id:desc")] == [1, 3, 2, 4]

    @pytest.mark.parametrize("sort_by", [None, "", "   "])
    def test_blank_sort_keeps_order(self, people, sort_by):
        result = sort(people, sort_by)

        assert result == people
        assert result is not people

    def test_empty_collection(self):
        assert sort([], "age") == []

    def test_empty_collection_with_model_still_validates(self):
        with pytest.raises(InvalidFieldError):
            sort([], "height", model=Person)

    def test_invalid_field(self, people):
        with pytest.raises(InvalidFieldError):
            sort(people, "age,height")

    def test_none_sorts_first_by_default(self):
        rows = [Person(1, 3), Person(2, None)]

        assert [p.id for p in sort(rows, "age")] == [2, 1]

    def test_null_handling_follows_settings(self, monkeypatch):
        """With null-safe sorting off, None cannot be ordered against ints."""
        monkeypatch.setenv("PAGINATION_NULL_SAFE_SORT", "false")
        clear_settings_cache()

        with pytest.raises(TypeError):
            sort([Person(1, None), Person(2, 3)], "age")

    def test_explicit_null_mode_overrides_settings(self):
        with pytest.raises(TypeError):
            sort([Person(1, None), Person(2, 3)], "age", null_safe=False)


class TestSortQueryables:
    """sort()/apply_ordering() over queryables."""

    async def test_sort_is_deferred(self, people):
        query = sort(ListQuery.of(people), "age:desc")

        assert isinstance(query, ListQuery)
        assert [p.id for p in await query.all()] == [1, 2, 3, 4]

    async def test_apply_ordering_replaces_previous_order(self, people):
        query = ListQuery.of(people).order_by("id", SortDirection.DESC)

        ordered = apply_ordering(query, parse_sort("age,id"))

        assert [term.path for term in ordered.ordering] == ["age", "id"]
        assert [p.id for p in await ordered.all()] == [4, 2, 3, 1]

    async def test_blank_sort_returns_query_unchanged(self, people):
        query = ListQuery.of(people)

        assert sort(query, "") is query
