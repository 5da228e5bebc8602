"""Schema registry: dotted field paths resolved against entity types.

A path such as ``"author.profile.name"`` is walked one segment at a time.
The type of each segment comes from the first source that knows it:

1. SQLAlchemy mapper (column attributes, scalar relationships)
2. Pydantic ``model_fields``
3. Type hints (dataclasses, annotated classes; ``Mapped[...]`` unwrapped)
4. ``@property`` return annotations

Resolved descriptors are cached per (type, path) for the process lifetime,
so validation and accessor construction happen once per field.
"""

from __future__ import annotations

import threading
import types
import typing
from dataclasses import dataclass, field
from typing import Any, Union

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import Mapped, Mapper

from dynamic_query.core.exceptions import InvalidFieldError

PATH_SEPARATOR = "."

_NONE_TYPE = type(None)


@dataclass(frozen=True, slots=True)
class FieldDescriptor:
    """A validated field path on an entity type.

    Attributes:
        model: Entity type the path was resolved against
        path: Dotted path (e.g., "author.name")
        segments: Path split into attribute names
        python_type: Runtime type of the final segment (Optional unwrapped)
        nullable: Whether any segment may be None
        annotation: Raw annotation of the final segment
    """

    model: type
    path: str
    segments: tuple[str, ...]
    python_type: Any
    nullable: bool
    annotation: Any = field(default=None, compare=False)

    def read(self, instance: Any) -> Any:
        """Read the field value from an instance.

        A None intermediate short-circuits to None instead of raising.
        """
        value = instance
        for segment in self.segments:
            if value is None:
                return None
            value = getattr(value, segment)
        return value


@dataclass(frozen=True, slots=True)
class _Member:
    annotation: Any
    python_type: Any
    nullable: bool
    # Entity type to continue resolution into, None for leaf values.
    target: type | None
    collection: bool = False


def _unwrap(annotation: Any) -> tuple[Any, bool]:
    """Strip ``Mapped[...]`` and ``Optional[...]`` from an annotation."""
    nullable = False
    while True:
        origin = typing.get_origin(annotation)
        if origin is Mapped:
            annotation = typing.get_args(annotation)[0]
            continue
        if origin is typing.Annotated:
            annotation = typing.get_args(annotation)[0]
            continue
        if origin in (Union, types.UnionType):
            args = [arg for arg in typing.get_args(annotation) if arg is not _NONE_TYPE]
            if len(args) < len(typing.get_args(annotation)):
                nullable = True
            if len(args) == 1:
                annotation = args[0]
                continue
        return annotation, nullable


def _is_collection(annotation: Any) -> bool:
    origin = typing.get_origin(annotation)
    return origin in (list, set, tuple, frozenset, dict) or annotation in (list, set, tuple, frozenset, dict)


def _is_entity(candidate: Any) -> bool:
    """Whether a type has named members that can be walked into."""
    if not isinstance(candidate, type) or candidate.__module__ == "builtins":
        return False
    if _mapper_for(candidate) is not None or hasattr(candidate, "model_fields"):
        return True
    try:
        return bool(typing.get_type_hints(candidate))
    except Exception:
        return False


def _mapper_for(model: type) -> Mapper[Any] | None:
    mapper = sa_inspect(model, raiseerr=False)
    return mapper if isinstance(mapper, Mapper) else None


def _member_from_annotation(annotation: Any) -> _Member:
    python_type, nullable = _unwrap(annotation)
    collection = _is_collection(python_type)
    target = python_type if not collection and _is_entity(python_type) else None
    return _Member(annotation, python_type, nullable, target, collection)


def _mapper_member(mapper: Mapper[Any], name: str) -> _Member | None:
    if name in mapper.relationships:
        relationship = mapper.relationships[name]
        target = relationship.mapper.class_
        return _Member(target, target, True, target, collection=bool(relationship.uselist))

    if name in mapper.column_attrs:
        column = mapper.column_attrs[name].columns[0]
        try:
            python_type = column.type.python_type
        except NotImplementedError:
            python_type = object
        return _Member(python_type, python_type, bool(getattr(column, "nullable", True)), None)

    return None


def _type_hints(model: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(model)
    except Exception:
        # Unresolvable forward references; fall back to raw annotations.
        hints: dict[str, Any] = {}
        for klass in reversed(model.__mro__):
            hints.update(getattr(klass, "__annotations__", {}))
        return hints


def _resolve_member(model: type, name: str) -> _Member | None:
    mapper = _mapper_for(model)
    if mapper is not None:
        member = _mapper_member(mapper, name)
        if member is not None:
            return member

    model_fields = getattr(model, "model_fields", None)
    if isinstance(model_fields, dict) and name in model_fields:
        return _member_from_annotation(model_fields[name].annotation)

    hints = _type_hints(model)
    if name in hints and typing.get_origin(hints[name]) is not typing.ClassVar:
        return _member_from_annotation(hints[name])

    attribute = getattr(model, name, None)
    if isinstance(attribute, property) and attribute.fget is not None:
        returns = _type_hints_of_function(attribute.fget)
        return _member_from_annotation(returns if returns is not None else Any)

    return None


def _type_hints_of_function(func: Any) -> Any:
    try:
        return typing.get_type_hints(func).get("return")
    except Exception:
        return getattr(func, "__annotations__", {}).get("return")


class SchemaRegistry:
    """Resolve and cache field descriptors per entity type.

    Example:
        registry = SchemaRegistry()
        descriptor = registry.resolve(Post, "author.name")
        descriptor.read(post)  # post.author.name, or None if post.author is None
    """

    def __init__(self) -> None:
        self._descriptors: dict[tuple[type, str], FieldDescriptor] = {}
        self._lock = threading.Lock()

    def resolve(self, model: type, path: str) -> FieldDescriptor:
        """Resolve a dotted path on a type.

        Raises:
            InvalidFieldError: If a segment does not resolve or crosses a collection
        """
        key = (model, path)
        cached = self._descriptors.get(key)
        if cached is not None:
            return cached

        descriptor = self._build(model, path)
        with self._lock:
            return self._descriptors.setdefault(key, descriptor)

    def is_valid(self, model: type, path: str) -> bool:
        """Whether a path resolves on a type."""
        try:
            self.resolve(model, path)
        except InvalidFieldError:
            return False
        return True

    def _build(self, model: type, path: str) -> FieldDescriptor:
        model_name = getattr(model, "__name__", repr(model))
        segments = tuple(segment.strip() for segment in path.split(PATH_SEPARATOR))

        current: type | None = model
        member: _Member | None = None
        nullable = False
        for index, segment in enumerate(segments):
            if not segment:
                raise InvalidFieldError(model_name, path, segment, reason=f"Empty segment in field path '{path}'")
            if current is None:
                raise InvalidFieldError(
                    model_name,
                    path,
                    segment,
                    reason=f"Field '{segments[index - 1]}' has no nested field '{segment}'",
                )
            member = _resolve_member(current, segment)
            if member is None:
                owner = getattr(current, "__name__", repr(current))
                raise InvalidFieldError(model_name, path, segment, reason=f"Field '{segment}' was not found on type '{owner}'")
            if member.collection:
                raise InvalidFieldError(
                    model_name,
                    path,
                    segment,
                    reason=f"Field '{segment}' is a collection and cannot be ordered",
                )
            nullable = nullable or member.nullable
            current = member.target

        if member is None:
            raise InvalidFieldError(model_name, path, path, reason=f"Field path '{path}' is empty")
        return FieldDescriptor(
            model=model,
            path=PATH_SEPARATOR.join(segments),
            segments=segments,
            python_type=member.python_type,
            nullable=nullable,
            annotation=member.annotation,
        )


registry = SchemaRegistry()


def resolve_field(model: type, path: str) -> FieldDescriptor:
    """Resolve a dotted path using the process-wide registry."""
    return registry.resolve(model, path)


__all__ = [
    "PATH_SEPARATOR",
    "FieldDescriptor",
    "SchemaRegistry",
    "registry",
    "resolve_field",
]
