"""Unit tests for cursor encoding and decoding."""
from __future__ import annotations

import base64
import json
import zlib
from datetime import date

import pytest

from dynamic_query.core.exceptions import CursorDecodeError, InvariantViolationError
from dynamic_query.core.pagination.cursor import MAX_CURSOR_BYTES, CursorCodec, CursorPayload
from dynamic_query.core.sorting.terms import parse_sort
from tests.fixtures.models import Address, Article, Person


def _raw_token(document: object) -> str:
    compressed = zlib.compress(json.dumps(document).encode())
    return base64.urlsafe_b64encode(compressed).decode()


class TestCursorCodec:
    """Tests for CursorCodec encode/decode."""

    def test_token_is_url_safe(self):
        token = CursorCodec.encode(CursorPayload(sort="name,id", properties={"name": "a/b+c?" * 20, "id": 1}))

        assert set(token) <= set("ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_=")

    def test_decode_restores_payload(self):
        token = CursorCodec.encode(CursorPayload(sort="age,id", properties={"age": 25, "id": 2}))

        payload = CursorCodec.decode(token)

        assert payload.sort == "age,id"
        assert payload.properties == {"age": 25, "id": 2}

    def test_values_are_stored_in_json_form(self):
        """Dates travel as ISO strings and come back as such until coerced."""
        token = CursorCodec.encode(CursorPayload(sort="published", properties={"published": date(2024, 3, 1)}))

        assert CursorCodec.decode(token).properties == {"published": "2024-03-01"}

    @pytest.mark.parametrize(
        "token",
        [
            "not-a-cursor",
            "%%%",
            base64.urlsafe_b64encode(b"plain text").decode(),
            base64.urlsafe_b64encode(zlib.compress(b"{not json")).decode(),
            "é",
        ],
    )
    def test_malformed_tokens(self, token):
        with pytest.raises(CursorDecodeError, match="Invalid cursor"):
            CursorCodec.decode(token)

    @pytest.mark.parametrize(
        "document",
        [
            {"properties": {"id": 1}},
            {"sort": "", "properties": {"id": 1}},
            {"sort": "id", "properties": [1]},
            ["id", 1],
            {"sort": "age:sideways,id", "properties": {"age": 25, "id": 2}},
            {"sort": ",", "properties": {"id": 1}},
            {"sort": "age,,id", "properties": {"age": 25, "id": 2}},
        ],
    )
    def test_unexpected_structure(self, document):
        with pytest.raises(CursorDecodeError) as exc_info:
            CursorCodec.decode(_raw_token(document))

        assert exc_info.value.details["errors"] >= 1

    def test_recorded_sort_is_canonicalized(self):
        payload = CursorCodec.decode(_raw_token({"sort": "age:ASC, id:DESC", "properties": {"age": 1, "id": 2}}))

        assert payload.sort == "age,id:desc"

    def test_oversized_payload_rejected(self):
        """A small token must not inflate past the decompression cap."""
        document = {"sort": "id", "properties": {"id": "x" * (MAX_CURSOR_BYTES * 4)}}
        token = _raw_token(document)

        assert len(token) < MAX_CURSOR_BYTES
        with pytest.raises(CursorDecodeError, match="exceeds"):
            CursorCodec.decode(token)

    def test_truncated_stream_rejected(self):
        compressed = zlib.compress(json.dumps({"sort": "id", "properties": {"id": 1}}).encode())
        token = base64.urlsafe_b64encode(compressed[:-6]).decode()

        with pytest.raises(CursorDecodeError, match="truncated"):
            CursorCodec.decode(token)


class TestCreateCursor:
    """Tests for anchoring a cursor at a row."""

    def test_records_every_sort_term(self):
        person = Person(2, 25, address=Address("Oslo", "0150"))

        token = CursorCodec.create_cursor(person, parse_sort("address.city,age:desc,id"), Person)
        payload = CursorCodec.decode(token)

        assert payload.sort == "address.city,age:desc,id"
        assert payload.properties == {"address.city": "Oslo", "age": 25, "id": 2}

    def test_pydantic_entity(self):
        article = Article(id=9, score=1.5, published=date(2024, 1, 2))

        payload = CursorCodec.decode(CursorCodec.create_cursor(article, parse_sort("published,id"), Article))

        assert payload.properties == {"published": "2024-01-02", "id": 9}

    def test_null_sort_field_is_an_invariant_violation(self):
        with pytest.raises(InvariantViolationError) as exc_info:
            CursorCodec.create_cursor(Person(1, None), parse_sort("age,id"), Person)

        assert exc_info.value.details == {"path": "age"}

    def test_null_nested_intermediate_is_an_invariant_violation(self):
        with pytest.raises(InvariantViolationError):
            CursorCodec.create_cursor(Person(1, 3), parse_sort("address.city,id"), Person)
