"""
Shared fixtures for functional tests.
Uses httpx.AsyncClient against the real FastAPI app with an in-memory SQLite DB.
"""
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import async_sessionmaker, AsyncSession

from catalog.db.models import Base
from catalog.db import session as db_session_module
from catalog.db.session import build_engine, init_models
from catalog.main import app


# ─── DB override ────────────────────────────────────────────────

@pytest_asyncio.fixture
async def test_engine():
    """Create an in-memory SQLite engine for functional testing."""
    engine = build_engine("sqlite+aiosqlite:///:memory:")
    await init_models(engine)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def test_session_factory(test_engine):
    """Session factory bound to the test engine."""
    return async_sessionmaker(bind=test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def client(test_session_factory):
    """Provide an httpx.AsyncClient with DB overridden to use the test DB."""

    async def override_get_db():
        async with test_session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[db_session_module.get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ─── Data helpers ───────────────────────────────────────────────

@pytest_asyncio.fixture
async def create_book(client: AsyncClient):
    """Factory that creates a book through the API and returns its JSON."""

    async def _create(**overrides) -> dict:
        data = {
            "title": "The Hobbit",
            "author": "J.R.R. Tolkien",
            "genre": "FANTASY",
            "isbn": "9780547928227",
            "copies": 5,
        }
        data.update(overrides)
        resp = await client.post("/api/books", json=data)
        assert resp.status_code == 201, resp.text
        return resp.json()["data"]

    return _create
