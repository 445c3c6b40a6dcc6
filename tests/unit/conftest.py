"""
Shared fixtures for unit tests.
Uses an in-memory SQLite database for fast isolated testing.
"""
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, AsyncSession

from catalog.db.models import Base, Book, BorrowRecord, Genre
from catalog.db.session import build_engine, init_models


@pytest_asyncio.fixture
async def async_engine():
    """Create an in-memory SQLite engine for testing."""
    engine = build_engine("sqlite+aiosqlite:///:memory:")
    await init_models(engine)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(async_engine):
    return async_sessionmaker(bind=async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncSession:
    """Provide a database session for each test, rolled back afterwards."""
    async with session_factory() as session:
        yield session
        await session.rollback()


# ─── Helper factories ───────────────────────────────────────────


@pytest.fixture
def make_book():
    """Factory fixture to create Book instances."""
    def _make(
        title: str = "Test Book",
        author: str = "Test Author",
        genre: Genre = Genre.FICTION,
        isbn: str = None,
        description: str = "A test book",
        image: str = None,
        copies: int = 5,
        available: bool = None,
    ) -> Book:
        return Book(
            id=str(uuid4()),
            title=title,
            author=author,
            genre=genre,
            isbn=isbn or f"978{uuid4().int % 10**10:010d}",
            description=description,
            image=image,
            copies=copies,
            available=copies > 0 if available is None else available,
        )
    return _make


@pytest.fixture
def make_borrow():
    """Factory fixture to create BorrowRecord instances."""
    def _make(
        book_id: str = None,
        quantity: int = 1,
        due_date: datetime = None,
    ) -> BorrowRecord:
        return BorrowRecord(
            id=str(uuid4()),
            book_id=book_id or str(uuid4()),
            quantity=quantity,
            due_date=due_date or datetime.now(timezone.utc) + timedelta(days=14),
        )
    return _make
