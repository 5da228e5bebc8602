"""SQLAlchemy query backend.

``SelectQuery`` wraps an ``AsyncSession`` and a ``Select`` over a mapped
class. Expression trees compile to SQLAlchemy clauses; dotted paths that
cross many-to-one relationships are joined through aliased outer joins so
rows with a missing parent are not dropped.

Usage:
    stmt = select(Post).where(Post.published.is_(True))
    query = SelectQuery.of(session, stmt)
    page = await paginate_cursor(query, request)
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Self

from sqlalchemy import Select, and_, func, or_, select
from sqlalchemy.orm import aliased

from dynamic_query.core.query.base import Queryable
from dynamic_query.core.query.expressions import And, Expression, FieldEquals, FieldGreater, FieldLess, Or
from dynamic_query.core.schema import registry
from dynamic_query.core.sorting.terms import SortDirection, SortTerm
from dynamic_query.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlalchemy.sql.elements import ColumnElement

_lazy = get_lazy_logger(__name__)


class _PathResolver:
    """Map dotted paths to columns, collecting the joins they need."""

    def __init__(self, model: type) -> None:
        self.model = model
        self._joins: dict[tuple[str, ...], tuple[Any, Any]] = {}

    def column(self, path: str) -> Any:
        descriptor = registry.resolve(self.model, path)
        entity: Any = self.model
        for index, segment in enumerate(descriptor.segments[:-1]):
            prefix = descriptor.segments[: index + 1]
            if prefix not in self._joins:
                relationship = getattr(entity, segment)
                target = aliased(relationship.property.mapper.class_)
                self._joins[prefix] = (target, relationship.of_type(target))
            entity = self._joins[prefix][0]
        return getattr(entity, descriptor.segments[-1])

    def apply_joins(self, statement: Select[Any]) -> Select[Any]:
        for _, onclause in self._joins.values():
            statement = statement.outerjoin(onclause)
        return statement


def compile_clause(expression: Expression, resolver: _PathResolver) -> ColumnElement[bool]:
    """Compile an expression tree to a SQLAlchemy boolean clause.

    For ORDER BY (a DESC, b ASC) and an anchor at (5, 10) the keyset tree
    compiles to:
        (a < 5) OR (a = 5 AND b > 10)
    """
    if isinstance(expression, And):
        return and_(*(compile_clause(operand, resolver) for operand in expression.operands))
    if isinstance(expression, Or):
        return or_(*(compile_clause(operand, resolver) for operand in expression.operands))

    column = resolver.column(expression.path)
    if isinstance(expression, FieldEquals):
        return column == expression.value
    if isinstance(expression, FieldGreater):
        return column > expression.value
    if isinstance(expression, FieldLess):
        return column < expression.value

    msg = f"Unsupported expression node: {type(expression).__name__}"
    raise TypeError(msg)


@dataclass(frozen=True, slots=True)
class SelectQuery[T](Queryable[T]):
    """Queryable over a SQLAlchemy select statement.

    The wrapped statement may carry its own WHERE clauses; ordering terms
    added here replace any ORDER BY it already has. Relationships named in
    nested sort paths are read again when cursors are built, so they must
    be eagerly loaded (e.g. ``lazy="joined"``) under an AsyncSession.
    """

    session: AsyncSession
    statement: Select[Any]
    entity: type[T]
    predicates: tuple[Expression, ...] = ()
    ordering: tuple[SortTerm, ...] = ()
    limit: int | None = None
    offset: int = 0

    @classmethod
    def of(
        cls,
        session: AsyncSession,
        statement: Select[Any] | None = None,
        model: type[T] | None = None,
    ) -> SelectQuery[T]:
        """Wrap a statement, taking the entity type from its first column description.

        Args:
            session: Database session
            statement: Select statement; defaults to ``select(model)``
            model: Mapped class; inferred from the statement when omitted
        """
        if statement is None:
            if model is None:
                msg = "Either statement or model is required"
                raise ValueError(msg)
            statement = select(model)
        if model is None:
            model = statement.column_descriptions[0].get("entity")
            if model is None:
                msg = "Cannot infer a mapped entity from the statement; pass model="
                raise ValueError(msg)
        return cls(session=session, statement=statement, entity=model)

    @property
    def model(self) -> type[T]:
        return self.entity

    def filter(self, expression: Expression) -> Self:
        return replace(self, predicates=(*self.predicates, expression))

    def order_by(self, path: str, direction: SortDirection) -> Self:
        return replace(self, ordering=(*self.ordering, SortTerm(path, direction)))

    def clear_ordering(self) -> Self:
        return replace(self, ordering=())

    def take(self, count: int) -> Self:
        limit = count if self.limit is None else min(self.limit, count)
        return replace(self, limit=limit)

    def skip(self, count: int) -> Self:
        return replace(self, offset=self.offset + count)

    def build(self, *, ordered: bool = True, paged: bool = True) -> Select[Any]:
        """Render the final statement."""
        resolver = _PathResolver(self.entity)
        clauses = [compile_clause(expression, resolver) for expression in self.predicates]

        order_clauses = []
        if ordered:
            for term in self.ordering:
                column = resolver.column(term.path)
                order_clauses.append(column.desc() if term.descending else column.asc())

        statement = resolver.apply_joins(self.statement)
        if clauses:
            statement = statement.where(*clauses)
        if order_clauses:
            statement = statement.order_by(None).order_by(*order_clauses)
        if paged:
            if self.offset:
                statement = statement.offset(self.offset)
            if self.limit is not None:
                statement = statement.limit(self.limit)
        return statement

    async def all(self) -> list[T]:
        statement = self.build()
        result = await self.session.execute(statement)
        rows = list(result.scalars().all())
        _lazy.debug(lambda: f"db.select: {self.entity.__name__}(limit={self.limit}, offset={self.offset}) -> {len(rows)} rows")
        return rows

    async def count(self) -> int:
        statement = select(func.count()).select_from(self.build(ordered=False, paged=False).subquery())
        return (await self.session.execute(statement)).scalar_one()


__all__ = ["SelectQuery", "compile_clause"]
