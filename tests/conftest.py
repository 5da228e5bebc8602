"""Pytest configuration and shared fixtures.

Organization:
    - Settings Fixtures: isolate cached settings between tests
    - Data Fixtures: in-memory entity collections
    - Database Fixtures: SQLAlchemy engine, session and seeded rows
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Generator
from datetime import date
from typing import TYPE_CHECKING

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from dynamic_query.core.settings import clear_settings_cache
from tests.fixtures.models import Author, Base, Book, Person, spec_people

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine


# ============================================================================
# Settings Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def reset_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None]:
    """Drop cached settings so each test sees its own environment."""
    for name in (
        "PAGINATION_DEFAULT_PAGE_SIZE",
        "PAGINATION_MAX_PAGE_SIZE",
        "PAGINATION_INCLUDE_TOTAL",
        "PAGINATION_NULL_SAFE_SORT",
    ):
        monkeypatch.delenv(name, raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()


# ============================================================================
# Data Fixtures
# ============================================================================


@pytest.fixture
def people() -> list[Person]:
    """(id, age): (1, 30), (2, 25), (3, 25), (4, 20)."""
    return spec_people()


@pytest.fixture
def crowd() -> list[Person]:
    """Twenty-three people with heavily duplicated ages, in scrambled id order."""
    ids = [(i * 7) % 23 + 1 for i in range(23)]
    return [Person(id=person_id, age=person_id % 4, name=f"p{person_id:02d}") for person_id in ids]


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine]:
    """Create async SQLAlchemy engine with in-memory SQLite."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
    )

    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
async def db_session(db_engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Create async database session with table creation and cleanup."""
    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session_maker = sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session_maker() as session:
        try:
            yield session
        finally:
            await session.rollback()

    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def books(db_session: AsyncSession) -> list[Book]:
    """Seed two authors and five books.

    (id, rating, author, published):
        1  5  Zed  2024-03-01
        2  3  Amy  2024-01-15
        3  5  Amy  2023-11-30
        4  4  Zed  2024-03-01
        5  3  Amy  2022-06-10
    """
    zed = Author(id=1, name="Zed")
    amy = Author(id=2, name="Amy")
    rows = [
        Book(id=1, title="One", rating=5, published=date(2024, 3, 1), author=zed),
        Book(id=2, title="Two", rating=3, published=date(2024, 1, 15), author=amy),
        Book(id=3, title="Three", rating=5, published=date(2023, 11, 30), author=amy),
        Book(id=4, title="Four", rating=4, published=date(2024, 3, 1), author=zed),
        Book(id=5, title="Five", rating=3, published=date(2022, 6, 10), author=amy),
    ]
    db_session.add_all([zed, amy, *rows])
    await db_session.commit()
    return rows
