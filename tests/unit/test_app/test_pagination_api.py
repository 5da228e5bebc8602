"""Tests for the FastAPI surface: query-parameter dependencies and error handlers."""
from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Annotated, Any

import pytest
from fastapi import Depends, FastAPI
from httpx import ASGITransport, AsyncClient

from dynamic_query.api.exception_handlers import configure_exception_handlers, problem_type
from dynamic_query.core.dependencies import OffsetPagination, cursor_pagination
from dynamic_query.core.exceptions import (
    CursorDecodeError,
    CursorMismatchError,
    InvalidFieldError,
    QueryError,
    ValueCoercionError,
)
from dynamic_query.core.pagination import CursorPaginationRequest, paginate_cursor, paginate_offset
from tests.fixtures.models import spec_people


@pytest.fixture
def app() -> FastAPI:
    """Minimal application exposing the people collection both ways."""
    app = FastAPI()
    configure_exception_handlers(app)
    people = spec_people()

    @app.get("/people")
    async def list_people(
        request: Annotated[CursorPaginationRequest, Depends(cursor_pagination("id"))],
    ) -> dict[str, Any]:
        page = await paginate_cursor(people, request)
        return page.model_dump(mode="json")

    @app.get("/people/by-page")
    async def list_people_by_page(pagination: OffsetPagination) -> dict[str, Any]:
        page = await paginate_offset(people, pagination.page, pagination.size, sort="age")
        return page.model_dump(mode="json")

    return app


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


def _ids(body: dict[str, Any]) -> list[int]:
    return [item["id"] for item in body["items"]]


class TestCursorEndpoint:
    """Cursor pagination through query parameters."""

    async def test_follow_cursors(self, client):
        first = (await client.get("/people", params={"size": 2, "sort": "age"})).json()
        second = (await client.get("/people", params={"size": 2, "sort": "age", "after": first["next_cursor"]})).json()
        back = (
            await client.get("/people", params={"size": 2, "sort": "age", "before": second["previous_cursor"]})
        ).json()

        assert _ids(first) == [4, 2]
        assert _ids(second) == [3, 1]
        assert second["has_next_page"] is False
        assert _ids(back) == [4, 2]
        assert back["has_previous_page"] is False

    async def test_size_capped_at_maximum(self, client):
        body = (await client.get("/people", params={"size": 1000})).json()

        assert body["page_size"] == 100

    async def test_default_size(self, client):
        body = (await client.get("/people")).json()

        assert body["page_size"] == 20
        assert _ids(body) == [1, 2, 3, 4]

    async def test_non_positive_size_rejected(self, client):
        response = await client.get("/people", params={"size": 0})

        assert response.status_code == 422

    async def test_unknown_sort_field(self, client):
        response = await client.get("/people", params={"sort": "height"})

        assert response.status_code == 400
        body = response.json()
        assert body["type"] == "invalid-field"
        assert body["status"] == 400
        assert body["details"]["segment"] == "height"

    async def test_garbage_cursor(self, client):
        response = await client.get("/people", params={"after": "not-a-cursor"})

        assert response.status_code == 400
        assert response.json()["type"] == "cursor-decode"

    async def test_sort_changed_between_requests(self, client):
        first = (await client.get("/people", params={"size": 2, "sort": "age"})).json()

        response = await client.get("/people", params={"size": 2, "sort": "age:desc", "after": first["next_cursor"]})

        assert response.status_code == 400
        assert response.json()["type"] == "cursor-mismatch"
        assert response.json()["details"] == {"expected": "age:desc,id", "actual": "age,id"}


class TestOffsetEndpoint:
    """Offset pagination through query parameters."""

    async def test_page(self, client):
        body = (await client.get("/people/by-page", params={"page": 2, "size": 3})).json()

        assert _ids(body) == [1]
        assert body["current_page"] == 2
        assert body["total_pages"] == 2
        assert body["has_previous_page"] is True

    async def test_page_must_be_positive(self, client):
        response = await client.get("/people/by-page", params={"page": 0})

        assert response.status_code == 422


@pytest.mark.parametrize(
    ("exc", "expected"),
    [
        (QueryError("x"), "query"),
        (InvalidFieldError("Person", "height", "height"), "invalid-field"),
        (CursorDecodeError("x"), "cursor-decode"),
        (ValueCoercionError("age", "x", int), "value-coercion"),
        (CursorMismatchError("a", "b"), "cursor-mismatch"),
    ],
)
def test_problem_type(exc: Exception, expected: str) -> None:
    assert problem_type(exc) == expected
