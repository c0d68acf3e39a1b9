"""
Shared fixtures: a file-backed SQLite database per test, the HiLo
allocator wired to it, and an HTTP client over the FastAPI app.
"""

from __future__ import annotations

import httpx
import pytest
import pytest_asyncio

from app.allocation import HiLoAllocator, SqlHighValueStore
from app.api.deps import get_allocator, get_db
from app.db.session import build_engine, build_session_factory, init_models
from app.main import app


@pytest_asyncio.fixture
async def engine(tmp_path):
    """Fresh SQLite database with all tables created."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest_asyncio.fixture
async def db(session_factory):
    """A session for repository tests; the test decides when to commit."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def store(session_factory):
    return SqlHighValueStore(session_factory, initial_high=1)


@pytest.fixture
def allocator(store):
    return HiLoAllocator(store, max_lo=1000, max_attempts=3, backoff_base_seconds=0)


@pytest_asyncio.fixture
async def client(session_factory, allocator):
    """HTTP client whose requests use the test database and allocator."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_allocator] = lambda: allocator

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()
