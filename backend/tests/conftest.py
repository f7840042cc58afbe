"""
Pytest fixtures for test database, client, and authentication.

Each test gets a fresh in-memory SQLite database. Requests made through
`client` run in their own session and transaction, committed or rolled back
exactly like the production get_db dependency; `db_session` is a separate
session for arranging data and inspecting results.
"""

import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["REDIS_ENABLED"] = "false"
os.environ["ENVIRONMENT"] = "test"

from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from event_hub.main import app
from event_hub.core.security import create_access_token, hash_password
from event_hub.db.base import Base, utcnow
from event_hub.db.session import build_engine, get_db
from event_hub.models.auth_session import AuthSession
from event_hub.models.event import Event
from event_hub.models.user import User
from event_hub.store.principal import Principal

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_PASSWORD = "testpassword123"


async def create_user(session: AsyncSession, email: str, display_name: Optional[str] = None) -> User:
    """Insert an identity directly; the bootstrap trigger adds its profile."""
    user = User(
        email=email,
        hashed_password=hash_password(TEST_PASSWORD),
        user_metadata={"display_name": display_name} if display_name else {},
    )
    session.add(user)
    await session.commit()
    return user


async def auth_headers_for(session: AsyncSession, user: User) -> dict:
    """Open a session row for `user` and return bearer headers for it."""
    expires_at = utcnow() + timedelta(hours=1)
    auth_session = AuthSession(user_id=user.id, expires_at=expires_at)
    session.add(auth_session)
    await session.commit()
    token = create_access_token(
        data={"sub": str(user.id), "sid": str(auth_session.id)},
        expires_at=expires_at,
    )
    return {"Authorization": f"Bearer {token}"}


async def create_event(
    session: AsyncSession,
    creator: User,
    title: str = "Test Meetup",
    days_ahead: int = 30,
    max_attendees: Optional[int] = 100,
    is_public: bool = True,
    event_type: str = "general",
) -> Event:
    start = datetime.now(timezone.utc) + timedelta(days=days_ahead)
    event = Event(
        title=title,
        description="A test event",
        start_time=start,
        end_time=start + timedelta(hours=2),
        location="Test Venue",
        max_attendees=max_attendees,
        created_by=creator.id,
        is_public=is_public,
        event_type=event_type,
        metadata_={},
    )
    session.add(event)
    await session.commit()
    return event


def principal_for(user: User) -> Principal:
    return Principal(user_id=user.id, email=user.email)


@pytest_asyncio.fixture(scope="function")
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh schema per test."""
    engine = build_engine(TEST_DATABASE_URL)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory: async_sessionmaker) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def client(session_factory: async_sessionmaker) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client whose requests each run in their own test-database transaction."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def creator(db_session: AsyncSession) -> User:
    return await create_user(db_session, "creator@example.com", display_name="Event Creator")


@pytest_asyncio.fixture
async def attendee(db_session: AsyncSession) -> User:
    return await create_user(db_session, "attendee@example.com", display_name="Alice Attendee")


@pytest_asyncio.fixture
async def other_user(db_session: AsyncSession) -> User:
    return await create_user(db_session, "other@example.com")


@pytest_asyncio.fixture
async def creator_headers(db_session: AsyncSession, creator: User) -> dict:
    return await auth_headers_for(db_session, creator)


@pytest_asyncio.fixture
async def attendee_headers(db_session: AsyncSession, attendee: User) -> dict:
    return await auth_headers_for(db_session, attendee)


@pytest_asyncio.fixture
async def other_headers(db_session: AsyncSession, other_user: User) -> dict:
    return await auth_headers_for(db_session, other_user)


@pytest_asyncio.fixture
async def public_event(db_session: AsyncSession, creator: User) -> Event:
    """Public event with 100 places."""
    return await create_event(db_session, creator, title="Public Meetup")


@pytest_asyncio.fixture
async def private_event(db_session: AsyncSession, creator: User) -> Event:
    return await create_event(db_session, creator, title="Private Planning", is_public=False)


@pytest_asyncio.fixture
async def single_place_event(db_session: AsyncSession, creator: User) -> Event:
    """Public event with exactly one place."""
    return await create_event(db_session, creator, title="Tiny Workshop", max_attendees=1, event_type="workshop")
