"""
Pytest configuration and fixtures for testing.
"""
import os

# Settings are read at import time
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.pop("EMAIL_USER", None)
os.environ.pop("EMAIL_PASS", None)

import asyncio
import pytest
import pytest_asyncio
from typing import AsyncGenerator, List, Tuple
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.db.session import Base, get_session
from app.core.security import hash_password, create_access_token
from app.db.models.user import User, RoleEnum
from app.db.models.event import Event
from app.db.models.registration import Registration


# Test database URL - in-memory SQLite unless overridden (e.g. a Postgres test database)
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")

if TEST_DATABASE_URL.startswith("sqlite"):
    # One shared connection so every session sees the same in-memory database
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        echo=False,
    )
else:
    from sqlalchemy.pool import NullPool
    test_engine = create_async_engine(TEST_DATABASE_URL, poolclass=NullPool, echo=False)


TestSessionLocal = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Create a fresh database session for each test.
    Tables are dropped and recreated around every test for isolation.
    """
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await test_engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    Create an async HTTP client for testing API endpoints.
    Overrides the database session dependency.
    """
    async def override_get_session():
        yield db_session

    app.dependency_overrides[get_session] = override_get_session

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def _make_user(db_session: AsyncSession, email: str, name: str, role: RoleEnum) -> User:
    user = User(
        email=email,
        hashed_password=hash_password("password123"),
        name=name,
        role=role,
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest_asyncio.fixture
async def test_attendee(db_session: AsyncSession) -> User:
    """Create a user with the 'attendee' role."""
    return await _make_user(db_session, "attendee@example.com", "Test Attendee", RoleEnum.attendee)


@pytest_asyncio.fixture
async def second_attendee(db_session: AsyncSession) -> User:
    return await _make_user(db_session, "second@example.com", "Second Attendee", RoleEnum.attendee)


@pytest_asyncio.fixture
async def test_organizer(db_session: AsyncSession) -> User:
    """Create a user with the 'organizer' role."""
    return await _make_user(db_session, "organizer@example.com", "Test Organizer", RoleEnum.organizer)


@pytest_asyncio.fixture
async def other_organizer(db_session: AsyncSession) -> User:
    """An organizer who does not own ``test_event``."""
    return await _make_user(db_session, "other.organizer@example.com", "Other Organizer", RoleEnum.organizer)


def _token_for(user: User) -> str:
    return create_access_token({"sub": str(user.id), "email": user.email, "role": user.role.value})


@pytest.fixture
def attendee_token(test_attendee: User) -> str:
    return _token_for(test_attendee)


@pytest.fixture
def organizer_token(test_organizer: User) -> str:
    return _token_for(test_organizer)


@pytest.fixture
def other_organizer_token(other_organizer: User) -> str:
    return _token_for(other_organizer)


@pytest_asyncio.fixture
async def test_event(db_session: AsyncSession, test_organizer: User) -> Event:
    """Create an event owned by ``test_organizer``."""
    event = Event(
        title="Test Event",
        description="A test event description",
        date="2025-01-01",
        time="10:00",
        organizer_id=test_organizer.id,
    )
    db_session.add(event)
    await db_session.commit()
    await db_session.refresh(event)
    return event


@pytest_asyncio.fixture
async def test_registration(db_session: AsyncSession, test_attendee: User, test_event: Event) -> Registration:
    registration = Registration(event_id=test_event.id, user_id=test_attendee.id)
    db_session.add(registration)
    await db_session.commit()
    await db_session.refresh(registration)
    return registration


@pytest.fixture(autouse=True)
def mock_password_hashing(monkeypatch):
    """
    Replace bcrypt with a cheap deterministic scheme.
    This fixture is autouse, so it applies to all tests automatically.
    """
    class MockPasswordContext:
        def hash(self, password: str) -> str:
            return f"$2b$12$mockedhash{password}"

        def verify(self, plain: str, hashed: str) -> bool:
            return hashed == f"$2b$12$mockedhash{plain}"

    from app.core import security
    monkeypatch.setattr(security, "pwd_context", MockPasswordContext())


@pytest.fixture(autouse=True)
def disable_rate_limiting(monkeypatch):
    """Disable rate limiting for all tests."""
    import app.api.v1.routes.auth as auth_routes
    monkeypatch.setattr(auth_routes.limiter, "enabled", False)


@pytest.fixture(autouse=True)
def sent_emails(monkeypatch) -> List[Tuple[str, dict]]:
    """Capture registration emails instead of sending or logging them."""
    sent: List[Tuple[str, dict]] = []

    async def fake_send(recipient: str, event: dict) -> dict:
        sent.append((recipient, event))
        return {"success": True}

    from app.services import event_service
    monkeypatch.setattr(event_service, "send_registration_email", fake_send)
    return sent


@pytest.fixture
def drain_notifications():
    """Return a coroutine function that waits for fire-and-forget email tasks."""
    from app.services import event_service

    async def drain() -> None:
        await asyncio.gather(*list(event_service._background_tasks), return_exceptions=True)
    return drain
