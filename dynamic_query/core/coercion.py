"""Coercion of raw cursor values to field runtime types.

Cursor payloads travel as JSON, so datetimes arrive as ISO strings, UUIDs
as strings and decimals as floats or strings. Each value is validated
against the field's python type with a cached pydantic ``TypeAdapter``.
"""

from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING, Any

from pydantic import PydanticSchemaGenerationError, TypeAdapter, ValidationError
from pydantic_core import to_jsonable_python

from dynamic_query.core.exceptions import ValueCoercionError

if TYPE_CHECKING:
    from dynamic_query.core.schema import FieldDescriptor


@lru_cache(maxsize=256)
def _adapter(python_type: Any) -> TypeAdapter[Any]:
    return TypeAdapter(python_type)


def _build_adapter(python_type: Any) -> TypeAdapter[Any]:
    try:
        return _adapter(python_type)
    except TypeError:
        # Unhashable annotation, cannot be cached.
        return TypeAdapter(python_type)


def coerce(value: Any, descriptor: FieldDescriptor) -> Any:
    """Convert a raw value to the descriptor's python type.

    None passes through unchanged. Fields typed ``object``/``Any`` keep
    the raw value.

    Raises:
        ValueCoercionError: If the value cannot be converted
    """
    target = descriptor.python_type
    if value is None or target in (object, Any):
        return value
    if isinstance(target, type) and type(value) is target:
        return value

    try:
        adapter = _build_adapter(target)
    except PydanticSchemaGenerationError as exc:
        # Arbitrary classes: accept instances as they are, reject anything else.
        if isinstance(target, type) and isinstance(value, target):
            return value
        raise ValueCoercionError(descriptor.path, value, target) from exc

    try:
        return adapter.validate_python(value)
    except ValidationError as exc:
        raise ValueCoercionError(descriptor.path, value, target) from exc


def to_wire(value: Any) -> Any:
    """Convert a field value to its JSON-compatible form for a cursor."""
    return to_jsonable_python(value)


__all__ = ["coerce", "to_wire"]
