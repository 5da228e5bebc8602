"""Query exceptions.

Every failure raised while ordering or paginating is a ``QueryError``.
They are all caller or data errors: nothing here is retried internally,
and no partial page is ever returned alongside one.
"""
from __future__ import annotations

from typing import Any


class QueryError(Exception):
    """Base exception for ordering and pagination failures.

    Attributes:
        message: Error description
        details: Additional context about the error
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Format error message with details."""
        if self.details:
            details_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class InvalidSortError(QueryError):
    """Malformed sort specification.

    Raised for empty specifications, empty terms and direction tokens
    other than ``asc``/``desc``.
    """


class InvalidFieldError(InvalidSortError):
    """Field path does not resolve on the entity type.

    Attributes:
        model_name: Name of the entity type the path was resolved against
        path: Full dotted path as supplied
        segment: The first segment that failed to resolve
    """

    def __init__(self, model_name: str, path: str, segment: str, reason: str | None = None):
        """Initialize invalid field error.

        Args:
            model_name: Name of the entity type (e.g., "User")
            path: Dotted field path (e.g., "author.name")
            segment: Offending segment of the path
            reason: Optional explanation when the segment exists but is unusable
        """
        self.model_name = model_name
        self.path = path
        self.segment = segment

        message = reason or f"Field '{segment}' was not found on type '{model_name}'"
        super().__init__(message, details={"model": model_name, "path": path, "segment": segment})


class CursorDecodeError(QueryError):
    """Cursor token is malformed, corrupted or was not produced by this engine."""


class ValueCoercionError(CursorDecodeError):
    """A cursor value cannot be converted to its field's runtime type."""

    def __init__(self, path: str, value: Any, target: Any):
        self.path = path
        self.value = value
        self.target = target
        target_name = getattr(target, "__name__", repr(target))
        super().__init__(
            f"Cursor value for '{path}' cannot be converted to {target_name}",
            details={"path": path, "value": value},
        )


class CursorMismatchError(QueryError):
    """Cursor was produced under a different ordering than the current request.

    Usually the caller changed ``sort`` between paged requests.
    """

    def __init__(self, expected: str, actual: str):
        self.expected = expected
        self.actual = actual
        super().__init__(
            "Cursor sort does not match the requested sort",
            details={"expected": expected, "actual": actual},
        )


class InvariantViolationError(QueryError):
    """A field participating in the ordering is null on some row.

    Sort fields must be non-null for every row; the engine does not repair this.
    """


__all__ = [
    "CursorDecodeError",
    "CursorMismatchError",
    "InvalidFieldError",
    "InvalidSortError",
    "InvariantViolationError",
    "QueryError",
    "ValueCoercionError",
]
