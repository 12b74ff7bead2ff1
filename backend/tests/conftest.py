"""
Pytest fixtures for the test database, HTTP client, seeded users/items and
the in-memory stores.

Uses an in-memory SQLite database (aiosqlite) by default; point
TEST_DATABASE_URL at a Postgres database to run the same suite against
asyncpg. Tables are created and dropped per test for isolation.
"""

import os

# Settings are read at import time; configure them before importing the app.
os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import fnmatch
from datetime import datetime, timedelta
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from lending.core.timeutils import utcnow
from lending.db.base import Base
from lending.db.session import build_engine, get_db
from lending.main import app
from lending.models import Booking, BookingStatus, Item, User
from lending.repositories.memory import (
    InMemoryBookingStore,
    InMemoryItemDirectory,
    InMemoryUserDirectory,
)
from lending.services import cache_service
from lending.services.booking_service import BookingService

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")

# Fixed instant for the service-level tests.
NOW = datetime(2030, 1, 15, 12, 0, 0)


@pytest.fixture
def as_user():
    """Identity header for a user, e.g. client.get(url, headers=as_user(owner))."""

    def _headers(user) -> dict:
        user_id = user if isinstance(user, int) else user.id
        return {"X-Sharer-User-Id": str(user_id)}

    return _headers


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create tables, yield session, then drop tables for isolation."""
    engine = build_engine(TEST_DATABASE_URL)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client that overrides the DB dependency with the test session."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def _add(db_session: AsyncSession, obj):
    db_session.add(obj)
    await db_session.commit()
    await db_session.refresh(obj)
    return obj


@pytest_asyncio.fixture
async def owner(db_session: AsyncSession) -> User:
    return await _add(db_session, User(name="Olga Owner", email="owner@example.com"))


@pytest_asyncio.fixture
async def booker(db_session: AsyncSession) -> User:
    return await _add(db_session, User(name="Boris Booker", email="booker@example.com"))


@pytest_asyncio.fixture
async def stranger(db_session: AsyncSession) -> User:
    return await _add(db_session, User(name="Sam Stranger", email="stranger@example.com"))


@pytest_asyncio.fixture
async def item(db_session: AsyncSession, owner: User) -> Item:
    return await _add(
        db_session,
        Item(name="Drill", description="Cordless drill", available=True, owner_id=owner.id),
    )


@pytest_asyncio.fixture
async def unavailable_item(db_session: AsyncSession, owner: User) -> Item:
    return await _add(
        db_session,
        Item(name="Ladder", description="Broken ladder", available=False, owner_id=owner.id),
    )


@pytest.fixture
def make_booking(db_session: AsyncSession):
    """Insert a booking directly, bypassing the "start in the past" request check."""

    async def _make(item: Item, booker: User, start: datetime, end: datetime,
                    status: BookingStatus = BookingStatus.WAITING) -> Booking:
        return await _add(
            db_session,
            Booking(start=start, end=end, item_id=item.id, booker_id=booker.id, status=status.value),
        )

    return _make


@pytest.fixture
def future_window() -> dict:
    start = utcnow() + timedelta(days=1)
    return {
        "start": start.isoformat(),
        "end": (start + timedelta(days=1)).isoformat(),
    }


# In-memory stores


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def memory_users() -> InMemoryUserDirectory:
    users = InMemoryUserDirectory()
    users.add(User(id=1, name="Olga Owner", email="owner@example.com"))
    users.add(User(id=2, name="Boris Booker", email="booker@example.com"))
    users.add(User(id=3, name="Sam Stranger", email="stranger@example.com"))
    return users


@pytest.fixture
def memory_items(memory_users: InMemoryUserDirectory) -> InMemoryItemDirectory:
    items = InMemoryItemDirectory()
    items.add(Item(id=10, name="Drill", description="Cordless drill", available=True, owner_id=1))
    items.add(Item(id=11, name="Ladder", description="Broken ladder", available=False, owner_id=1))
    items.add(Item(id=12, name="Tent", description="Two person tent", available=True, owner_id=2))
    return items


@pytest.fixture
def memory_bookings(memory_users, memory_items) -> InMemoryBookingStore:
    return InMemoryBookingStore(memory_users, memory_items)


@pytest.fixture
def service(memory_bookings, memory_users, memory_items) -> BookingService:
    return BookingService(memory_bookings, memory_users, memory_items, clock=lambda: NOW)


# Redis


class FakeRedis:
    """Just enough of redis.asyncio.Redis for the cache service."""

    def __init__(self):
        self.data = {}

    async def get(self, key):
        return self.data.get(key)

    async def setex(self, key, ttl, value):
        self.data[key] = value

    async def delete(self, key):
        self.data.pop(key, None)

    async def scan_iter(self, match=None, count=None):
        for key in list(self.data):
            if match is None or fnmatch.fnmatch(key, match):
                yield key


@pytest.fixture
def fake_redis(monkeypatch) -> FakeRedis:
    """Swap the cache's Redis connection for an in-process dict."""
    client = FakeRedis()

    async def _get_redis():
        return client

    monkeypatch.setattr(cache_service, "get_redis", _get_redis)
    return client
