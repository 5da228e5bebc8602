"""Keyset predicate construction.

For an ordering ``[(f0, d0), ..., (fk, dk)]`` and anchor values
``v0..vk`` the rows strictly after the anchor are:

    OR over i in 0..k of:
        (AND over j < i of: f_j == v_j) AND (d_i == asc ? f_i > v_i : f_i < v_i)

i.e. rows that agree with the anchor on every higher-precedence key and
move past it on the first key where they differ. Paging backward uses the
same construction over the reversed ordering.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from dynamic_query.core.coercion import coerce
from dynamic_query.core.exceptions import CursorDecodeError, InvariantViolationError
from dynamic_query.core.query.expressions import Expression, FieldEquals, FieldGreater, FieldLess, all_of, any_of
from dynamic_query.core.schema import registry

if TYPE_CHECKING:
    from dynamic_query.core.sorting.terms import SortSpec


def anchor_values(spec: SortSpec, properties: Mapping[str, Any], model: type) -> list[Any]:
    """Pick and coerce the anchor value of every term, in term order.

    Raises:
        CursorDecodeError: If a term has no value in ``properties``
        ValueCoercionError: If a value does not fit its field's type
        InvariantViolationError: If a value is None
    """
    values: list[Any] = []
    for term in spec:
        if term.path not in properties:
            msg = f"Cursor has no value for sort field '{term.path}'"
            raise CursorDecodeError(msg, details={"path": term.path})
        raw = properties[term.path]
        if raw is None:
            msg = f"Cursor value for sort field '{term.path}' is null"
            raise InvariantViolationError(msg, details={"path": term.path})
        values.append(coerce(raw, registry.resolve(model, term.path)))
    return values


def build_keyset_predicate(spec: SortSpec, properties: Mapping[str, Any], model: type) -> Expression:
    """Build the "strictly after the anchor under ``spec``" predicate.

    Example:
        For "age,id" with anchor {"age": 25, "id": 2}:
            (age > 25) OR (age == 25 AND id > 2)
    """
    values = anchor_values(spec, properties, model)

    disjuncts: list[Expression] = []
    for i, term in enumerate(spec):
        equalities = [FieldEquals(spec[j].path, values[j]) for j in range(i)]
        advance = FieldLess(term.path, values[i]) if term.descending else FieldGreater(term.path, values[i])
        disjuncts.append(all_of(*equalities, advance))

    return any_of(*disjuncts)


__all__ = ["anchor_values", "build_keyset_predicate"]
