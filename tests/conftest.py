"""Pytest configuration and fixtures for lead intake tests.

Database tests run against in-memory SQLite through aiosqlite. Every session
created by the factory shares one connection (StaticPool), so tests open
short-lived sessions and close them before handing control to the code under
test.
"""

from __future__ import annotations

from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event, func, select
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from leadintake.auth import get_current_user
from leadintake.db.base_class import Base
from leadintake.db.redis_client import get_redis
from leadintake.db.session import get_db, get_session_factory
from leadintake.main import app
from leadintake.models import User


@pytest_asyncio.fixture()
async def engine():
    """In-memory database with savepoint and foreign key support."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
    )

    @event.listens_for(engine.sync_engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        # let SQLAlchemy emit BEGIN itself so SAVEPOINT works
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def session_factory(engine) -> sessionmaker:
    return sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture()
async def user(session_factory) -> User:
    """Acting user that owns imported buyers."""
    async with session_factory() as db:
        user = User(id=uuid4(), name="Test Agent", email="agent@leads.io")
        db.add(user)
        await db.commit()
    return user


@pytest.fixture
def buyer_data() -> dict:
    """Valid form payload (camelCase, as sent by clients)."""
    return {
        "fullName": "Jane Doe",
        "email": "jane@gmail.com",
        "phone": "9876543210",
        "city": "Mohali",
        "propertyType": "Apartment",
        "bhk": "Two",
        "purpose": "Buy",
        "budgetMin": 5000000,
        "budgetMax": 7500000,
        "timeline": "ZeroToThree",
        "source": "Website",
        "status": "New",
        "notes": "Prefers a high floor",
        "tags": ["urgent", "premium"],
    }


@pytest.fixture
def redis_mock() -> AsyncMock:
    redis = AsyncMock()
    redis.incr.return_value = 1
    return redis


@pytest_asyncio.fixture()
async def client(session_factory, user, redis_mock):
    """HTTP client against the app with database, Redis and auth overridden."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    async def override_get_redis():
        yield redis_mock

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_redis] = override_get_redis
    app.dependency_overrides[get_current_user] = lambda: user

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http:
        yield http

    app.dependency_overrides.clear()


@pytest.fixture
def count_rows(session_factory):
    """Count rows of a model in a fresh session."""

    async def _count(model) -> int:
        async with session_factory() as db:
            return await db.scalar(select(func.count()).select_from(model))

    return _count


@pytest.fixture
def fetch_all(session_factory):
    """Load all rows of a model matching the given criteria in a fresh session."""

    async def _fetch(model, *criteria) -> list:
        async with session_factory() as db:
            result = await db.execute(select(model).where(*criteria))
            return list(result.scalars().all())

    return _fetch
