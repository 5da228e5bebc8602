"""Backend-neutral boolean expressions over entity fields.

The keyset predicate is built as a small tagged tree that each query
backend compiles to its native form (an in-memory closure, a SQLAlchemy
clause). Values are already coerced to the field's runtime type.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class FieldEquals:
    """``field == value`` under the field's ordering."""

    path: str
    value: Any


@dataclass(frozen=True, slots=True)
class FieldGreater:
    """``field > value``."""

    path: str
    value: Any


@dataclass(frozen=True, slots=True)
class FieldLess:
    """``field < value``."""

    path: str
    value: Any


@dataclass(frozen=True, slots=True)
class And:
    operands: tuple[Expression, ...]


@dataclass(frozen=True, slots=True)
class Or:
    operands: tuple[Expression, ...]


type Comparison = FieldEquals | FieldGreater | FieldLess
type Expression = FieldEquals | FieldGreater | FieldLess | And | Or


def all_of(*operands: Expression) -> Expression:
    """Conjunction, collapsing the single-operand case."""
    if len(operands) == 1:
        return operands[0]
    return And(tuple(operands))


def any_of(*operands: Expression) -> Expression:
    """Disjunction, collapsing the single-operand case."""
    if len(operands) == 1:
        return operands[0]
    return Or(tuple(operands))


def referenced_paths(expression: Expression) -> list[str]:
    """Field paths used by an expression, in first-seen order."""
    if isinstance(expression, And | Or):
        seen: dict[str, None] = {}
        for operand in expression.operands:
            for path in referenced_paths(operand):
                seen.setdefault(path, None)
        return list(seen)
    return [expression.path]


__all__ = [
    "And",
    "Comparison",
    "Expression",
    "FieldEquals",
    "FieldGreater",
    "FieldLess",
    "Or",
    "all_of",
    "any_of",
    "referenced_paths",
]
