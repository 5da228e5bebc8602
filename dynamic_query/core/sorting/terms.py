"""Sort specification parsing.

A sort string is a comma-separated list of terms, each ``field[:asc|:desc]``:

    "age,name:desc,author.id"

Whitespace around tokens is ignored and direction tokens are
case-insensitive; a term without a direction is ascending. Term order is
precedence order: the first term is the primary key, each later term
breaks ties left by the ones before it.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from enum import StrEnum

from dynamic_query.core.exceptions import InvalidSortError
from dynamic_query.core.schema import registry

TERM_SEPARATOR = ","
DIRECTION_DELIMITER = ":"


class SortDirection(StrEnum):
    """Sort direction of a single term."""

    ASC = "asc"
    DESC = "desc"

    def reversed(self) -> SortDirection:
        return SortDirection.DESC if self is SortDirection.ASC else SortDirection.ASC

    @classmethod
    def parse(cls, token: str | None) -> SortDirection:
        """Parse a direction token; blank means ascending.

        Raises:
            InvalidSortError: If the token is neither asc nor desc
        """
        if token is None or not token.strip():
            return cls.ASC
        try:
            return cls(token.strip().lower())
        except ValueError:
            msg = f"Invalid sort direction '{token.strip()}', expected 'asc' or 'desc'"
            raise InvalidSortError(msg, details={"direction": token.strip()}) from None


@dataclass(frozen=True, slots=True)
class SortTerm:
    """One (field path, direction) pair."""

    path: str
    direction: SortDirection = SortDirection.ASC

    @property
    def descending(self) -> bool:
        return self.direction is SortDirection.DESC

    def reversed(self) -> SortTerm:
        return SortTerm(self.path, self.direction.reversed())

    def __str__(self) -> str:
        # Ascending is implicit in canonical form.
        if self.direction is SortDirection.ASC:
            return self.path
        return f"{self.path}{DIRECTION_DELIMITER}{self.direction.value}"


@dataclass(frozen=True, slots=True)
class SortSpec:
    """Ordered, non-empty sequence of sort terms.

    ``str(spec)`` is the canonical form: ``:asc`` suffixes dropped,
    ``:desc`` kept, e.g. ``"age,id:desc"``.
    """

    terms: tuple[SortTerm, ...]

    def __post_init__(self) -> None:
        if not self.terms:
            msg = "Sort specification cannot be empty"
            raise InvalidSortError(msg)

    def __iter__(self) -> Iterator[SortTerm]:
        return iter(self.terms)

    def __len__(self) -> int:
        return len(self.terms)

    def __getitem__(self, index: int) -> SortTerm:
        return self.terms[index]

    def __str__(self) -> str:
        return TERM_SEPARATOR.join(str(term) for term in self.terms)

    @property
    def paths(self) -> list[str]:
        return [term.path for term in self.terms]

    @property
    def last(self) -> SortTerm:
        return self.terms[-1]

    def reversed(self) -> SortSpec:
        """Flip every term's direction; precedence is unchanged."""
        return SortSpec(tuple(term.reversed() for term in self.terms))

    def with_tiebreaker(self, tiebreaker: SortTerm) -> SortSpec:
        """Append a unique tiebreaker unless its field is already the last term."""
        if self.last.path == tiebreaker.path:
            return self
        return SortSpec((*self.terms, tiebreaker))

    def matches(self, other: SortSpec | str) -> bool:
        """Compare canonical forms.

        Direction tokens are case-insensitive (canonical form lower-cases
        them); field paths must match exactly.
        """
        other_text = str(other) if isinstance(other, SortSpec) else canonicalize(other)
        return str(self) == other_text


def _split_terms(text: str) -> list[SortTerm]:
    if text is None or not text.strip():
        msg = "Sort specification cannot be empty"
        raise InvalidSortError(msg)

    terms: list[SortTerm] = []
    for raw_term in text.split(TERM_SEPARATOR):
        raw_term = raw_term.strip()
        if not raw_term:
            msg = f"Empty term in sort specification '{text}'"
            raise InvalidSortError(msg, details={"sort": text})

        field, _, direction = raw_term.partition(DIRECTION_DELIMITER)
        field = field.strip()
        if not field:
            msg = f"Missing field name in sort term '{raw_term}'"
            raise InvalidSortError(msg, details={"sort": text})
        terms.append(SortTerm(field, SortDirection.parse(direction)))
    return terms


def canonicalize(text: str) -> str:
    """Normalize a sort string without validating fields.

    ``"age:ASC, id:Desc"`` becomes ``"age,id:desc"``.
    """
    return str(SortSpec(tuple(_split_terms(text))))


def parse_sort(text: str, model: type | None = None) -> SortSpec:
    """Parse a sort string, validating every field path against ``model``.

    Args:
        text: Sort string such as ``"age,name:desc"``
        model: Entity type to validate paths against; skipped when None

    Returns:
        SortSpec in positional precedence order

    Raises:
        InvalidSortError: For empty specs, empty terms or bad directions
        InvalidFieldError: If a path segment does not resolve on ``model``
    """
    terms = _split_terms(text)
    if model is not None:
        terms = [SortTerm(registry.resolve(model, term.path).path, term.direction) for term in terms]
    return SortSpec(tuple(terms))


__all__ = [
    "DIRECTION_DELIMITER",
    "TERM_SEPARATOR",
    "SortDirection",
    "SortSpec",
    "SortTerm",
    "canonicalize",
    "parse_sort",
]
