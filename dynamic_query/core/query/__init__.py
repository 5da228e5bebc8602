"""Queryable sequences and the expression trees they compile.

Two backends share one contract:
    - ListQuery: in-memory collections
    - SelectQuery: SQLAlchemy select statements on an AsyncSession
"""

from collections.abc import Iterable
from typing import Any

from dynamic_query.core.query.base import Queryable
from dynamic_query.core.query.expressions import (
    And,
    Expression,
    FieldEquals,
    FieldGreater,
    FieldLess,
    Or,
    all_of,
    any_of,
    referenced_paths,
)
from dynamic_query.core.query.memory import ListQuery, compile_predicate
from dynamic_query.core.query.sql import SelectQuery, compile_clause
from dynamic_query.core.settings import get_pagination_settings


def as_queryable(source: Queryable[Any] | Iterable[Any], model: type | None = None) -> Queryable[Any]:
    """Return ``source`` if it is already queryable, else wrap it in a ListQuery."""
    if isinstance(source, Queryable):
        return source
    return ListQuery.of(source, model, null_safe=get_pagination_settings().null_safe_sort)


__all__ = [
    "And",
    "Expression",
    "FieldEquals",
    "FieldGreater",
    "FieldLess",
    "ListQuery",
    "Or",
    "Queryable",
    "SelectQuery",
    "all_of",
    "any_of",
    "as_queryable",
    "compile_clause",
    "compile_predicate",
    "referenced_paths",
]
