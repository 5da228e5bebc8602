"""Cursor encoding and decoding for keyset pagination.

Cursors are opaque strings that record the ordering in effect and the sort
key values of one anchor row (the first or last row of a page), so the
next request can seek directly past it.

The cursor format is:
1. JSON object ``{"sort": <canonical sort>, "properties": {<path>: <value>}}``
2. zlib-compressed
3. Base64 URL-safe encoded for use in query strings

Example cursor payload:
    {"sort": "age,id", "properties": {"age": 25, "id": 2}}
"""

from __future__ import annotations

import base64
import binascii
import json
import zlib
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from dynamic_query.core.coercion import to_wire
from dynamic_query.core.exceptions import CursorDecodeError, InvalidSortError, InvariantViolationError
from dynamic_query.core.schema import registry
from dynamic_query.core.sorting.terms import canonicalize

if TYPE_CHECKING:
    from dynamic_query.core.sorting.terms import SortSpec

# Upper bound on the decompressed JSON document.
MAX_CURSOR_BYTES = 64 * 1024


class CursorPayload(BaseModel):
    """Decoded cursor contents.

    Attributes:
        sort: Canonical sort string the anchor values were taken under
        properties: Mapping of field path to the anchor row's raw value
    """

    sort: str = Field(min_length=1, description="Canonical sort string")
    properties: dict[str, Any] = Field(description="Anchor values keyed by field path")

    model_config = {"frozen": True}

    @field_validator("sort")
    @classmethod
    def validate_sort(cls, value: str) -> str:
        """The recorded sort must itself be a well-formed sort string."""
        try:
            return canonicalize(value)
        except InvalidSortError as e:
            raise ValueError(e.message) from e


class CursorCodec:
    """Encode and decode pagination cursors.

    Usage:
        # Encoding
        token = CursorCodec.encode(CursorPayload(sort="age,id", properties={"age": 25, "id": 2}))

        # Decoding
        payload = CursorCodec.decode(token)
        print(payload.properties)  # {"age": 25, "id": 2}
    """

    @staticmethod
    def encode(payload: CursorPayload) -> str:
        """Encode a payload to an opaque, URL-safe string."""
        document = {
            "sort": payload.sort,
            "properties": {key: to_wire(value) for key, value in payload.properties.items()},
        }
        json_str = json.dumps(document, separators=(",", ":"))
        compressed = zlib.compress(json_str.encode(), level=9)
        return base64.urlsafe_b64encode(compressed).decode()

    @staticmethod
    def decode(cursor: str) -> CursorPayload:
        """Decode a cursor string.

        Raises:
            CursorDecodeError: If the token is not valid base64, does not
                decompress, is not JSON or lacks the expected fields
        """
        try:
            compressed = base64.urlsafe_b64decode(cursor.encode("ascii"))
            decompressor = zlib.decompressobj()
            raw = decompressor.decompress(compressed, MAX_CURSOR_BYTES)
            if decompressor.unconsumed_tail:
                msg = f"Invalid cursor: payload exceeds {MAX_CURSOR_BYTES} bytes"
                raise CursorDecodeError(msg)
            if not decompressor.eof:
                msg = "Invalid cursor: truncated compressed payload"
                raise CursorDecodeError(msg)
            document = json.loads(raw.decode())
        except (UnicodeError, binascii.Error, zlib.error, json.JSONDecodeError) as e:
            raise CursorDecodeError(f"Invalid cursor: {e}") from e

        try:
            return CursorPayload.model_validate(document)
        except ValidationError as e:
            raise CursorDecodeError(
                "Invalid cursor: unexpected payload structure",
                details={"errors": e.error_count()},
            ) from e

    @staticmethod
    def create_cursor(row: Any, spec: SortSpec, model: type) -> str:
        """Create a cursor anchored at ``row`` under ``spec``.

        Args:
            row: Entity instance (ORM object, dataclass, ...)
            spec: Ordering the cursor is valid for
            model: Entity type the paths are resolved on

        Raises:
            InvariantViolationError: If a sort field of the row is None
        """
        properties: dict[str, Any] = {}
        for term in spec:
            value = registry.resolve(model, term.path).read(row)
            if value is None:
                msg = f"Sort field '{term.path}' is null on the anchor row"
                raise InvariantViolationError(msg, details={"path": term.path})
            properties[term.path] = value

        return CursorCodec.encode(CursorPayload(sort=str(spec), properties=properties))


__all__ = ["CursorCodec", "CursorPayload"]
