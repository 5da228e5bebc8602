"""Exception handlers mapping ordering and pagination errors to HTTP responses.

Every ``QueryError`` is a client error and becomes an HTTP 400 RFC 7807
Problem Details response. ``type`` is a kebab-case slug of the exception
class (``CursorMismatchError`` -> ``cursor-mismatch``).
"""

from __future__ import annotations

import logging
import re
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import to_jsonable_python

from dynamic_query.core.exceptions import QueryError

logger = logging.getLogger(__name__)

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


class ProblemDetails(BaseModel):
    """RFC 7807 Problem Details for HTTP APIs.

    See: https://datatracker.ietf.org/doc/html/rfc7807
    """

    type: str = Field(default="about:blank", min_length=1, description="Problem type identifier")
    title: str = Field(min_length=1, description="Short, human-readable summary of the problem")
    status: int = Field(ge=100, le=599, description="HTTP status code")
    detail: str | None = Field(default=None, description="Explanation specific to this occurrence")
    instance: str | None = Field(default=None, description="URI of the specific occurrence")

    model_config = ConfigDict(str_strip_whitespace=True)


def problem_type(exc: Exception) -> str:
    """Kebab-case slug of the exception class name, without the ``Error`` suffix."""
    name = type(exc).__name__.removesuffix("Error")
    return _CAMEL_BOUNDARY.sub("-", name).lower()


def _create_problem_detail(
    status_code: int,
    detail: str,
    type_: str,
    title: str,
    instance: str | None = None,
    extra: dict[str, Any] | None = None,
) -> dict[str, Any]:
    problem = ProblemDetails(type=type_, title=title, status=status_code, detail=detail, instance=instance)
    response_data = problem.model_dump(exclude_none=True)
    if extra:
        response_data.update(extra)
    return response_data


async def query_exception_handler(request: Request, exc: QueryError) -> JSONResponse:
    """Handle ordering and pagination errors.

    Args:
        request: The FastAPI request object.
        exc: The query error that was raised.

    Returns:
        JSONResponse with RFC 7807 Problem Details format.
    """
    type_ = problem_type(exc)
    logger.warning(
        "Query exception occurred",
        extra={
            "path": request.url.path,
            "method": request.method,
            "exception_type": type_,
            "detail": exc.message,
        },
    )

    problem_data = _create_problem_detail(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=exc.message,
        type_=type_,
        title=type_.replace("-", " ").title(),
        instance=str(request.url),
        extra={"details": to_jsonable_python(exc.details, fallback=str)} if exc.details else None,
    )
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=problem_data)


async def pydantic_validation_exception_handler(
    request: Request, exc: PydanticValidationError
) -> JSONResponse:
    """Handle pagination request validation errors raised outside FastAPI's own parsing.

    Args:
        request: The FastAPI request object.
        exc: The Pydantic validation error that was raised.

    Returns:
        JSONResponse with RFC 7807 Problem Details format.
    """
    errors = [
        {"field": ".".join(str(loc) for loc in error["loc"]), "message": error["msg"], "type": error["type"]}
        for error in exc.errors()
    ]
    logger.warning(
        "Pydantic validation failed",
        extra={
            "path": request.url.path,
            "method": request.method,
            "error_count": len(errors),
        },
    )

    problem_data = _create_problem_detail(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail=f"Data validation failed for {len(errors)} field(s)",
        type_="validation-error",
        title="Validation Error",
        instance=str(request.url),
        extra={"errors": errors},
    )
    return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content=problem_data)


def configure_exception_handlers(app: FastAPI) -> None:
    """Register the handlers on a FastAPI application.

    Example:
        app = FastAPI()
        configure_exception_handlers(app)
    """
    app.add_exception_handler(QueryError, query_exception_handler)
    app.add_exception_handler(PydanticValidationError, pydantic_validation_exception_handler)

    logger.info("Exception handlers configured")


__all__ = [
    "ProblemDetails",
    "configure_exception_handlers",
    "problem_type",
    "pydantic_validation_exception_handler",
    "query_exception_handler",
]
