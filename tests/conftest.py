"""Pytest configuration and fixtures for Boat Rental tests.

Database Handling:
- TEST_DATABASE_URL is used when set (e.g. a PostgreSQL instance in CI)
- Otherwise each test gets a fresh aiosqlite file database under tmp_path
"""

import os
import tempfile
from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

# Set test environment variables before importing app modules
TEST_JWT_SECRET = "test-secret-key-that-is-at-least-32-characters-long"
os.environ["JWT_SECRET_KEY"] = TEST_JWT_SECRET
os.environ["SESSION_TRANSPORT"] = "cookie"
os.environ["SESSION_REVOCATION_ENABLED"] = "false"
os.environ["AUTO_CREATE_TABLES"] = "false"
os.environ["CI"] = "1"
_app_db_dir = tempfile.mkdtemp(prefix="boatrental-test-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{Path(_app_db_dir) / 'app.db'}"

# Test user credentials
TEST_USERNAME = "harbourmaster"
TEST_PASSWORD = "correct-horse-battery"


# --- Module State Reset ---


def _reset_auth_state():
    """Clear failed-login counters and the revoked-session cache.

    Both are module-level state, so without a reset failures from one
    test would leak into the next and trip the login rate limit.
    """
    from boatrental.api.auth import _login_attempts
    from boatrental.middleware.session_guard import revoked_sessions

    _login_attempts.clear()
    revoked_sessions.clear()


@pytest.fixture(autouse=True)
def reset_auth_state():
    """Reset login rate limiting and revocation state around every test."""
    _reset_auth_state()
    yield
    _reset_auth_state()


# --- Database Fixtures ---


@pytest_asyncio.fixture(scope="function")
async def db_engine(tmp_path):
    """Create a database engine with all tables for one test."""
    from boatrental.core.database import Base, enable_sqlite_foreign_keys
    import boatrental.models  # noqa: F401

    url = os.environ.get("TEST_DATABASE_URL") or f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"
    engine = create_async_engine(url, poolclass=NullPool, echo=False)
    if url.startswith("sqlite"):
        enable_sqlite_foreign_keys(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for testing."""
    async_session = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session
        await session.rollback()


@pytest.fixture
def session_factory(db_engine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test engine (for code that opens its own sessions)."""
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(scope="function")
async def async_client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client with database override."""
    from boatrental.core.database import get_db
    from boatrental.main import app

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# --- Test Factories ---


@pytest.fixture
def user_factory(db_session):
    """Factory for creating credential records."""
    from boatrental.models.user import User
    from boatrental.services.auth import hash_password

    async def _create_user(
        username: str = TEST_USERNAME,
        password: str = TEST_PASSWORD,
    ) -> User:
        user = User(username=username, password_hash=hash_password(password))
        db_session.add(user)
        await db_session.flush()
        await db_session.refresh(user)
        return user

    return _create_user


@pytest_asyncio.fixture
async def test_user(user_factory):
    """Create the default test user."""
    return await user_factory()


@pytest_asyncio.fixture
async def session_token(test_user) -> str:
    """A valid session token for the test user."""
    from boatrental.services.auth import create_session_token

    return create_session_token(test_user.id)


@pytest_asyncio.fixture
async def authed_client(async_client: AsyncClient, session_token: str) -> AsyncClient:
    """Client that presents a valid session cookie on every request."""
    async_client.cookies.set("session", session_token)
    return async_client


@pytest.fixture
def client_factory(db_session):
    """Factory for creating rental clients."""
    from boatrental.models import Client

    async def _create_client(name: str = "Ada Marina", **kwargs) -> Client:
        client = Client(name=name, **kwargs)
        db_session.add(client)
        await db_session.flush()
        await db_session.refresh(client)
        return client

    return _create_client


@pytest.fixture
def boat_factory(db_session):
    """Factory for creating boats."""
    from boatrental.models import Boat

    async def _create_boat(
        name: str = "Sea Breeze",
        type: str = "boat",
        capacity: int = 6,
        available: bool = True,
    ) -> Boat:
        boat = Boat(name=name, type=type, capacity=capacity, available=available)
        db_session.add(boat)
        await db_session.flush()
        await db_session.refresh(boat)
        return boat

    return _create_boat


@pytest.fixture
def reservation_factory(db_session, client_factory, boat_factory):
    """Factory for creating reservations (creates client and boat when omitted)."""
    from datetime import date

    from boatrental.models import Reservation

    async def _create_reservation(
        client=None,
        boat=None,
        start_date: date = date(2026, 7, 1),
        end_date: date = date(2026, 7, 3),
    ) -> Reservation:
        if client is None:
            client = await client_factory()
        if boat is None:
            boat = await boat_factory()
        reservation = Reservation(
            client_id=client.id,
            boat_id=boat.id,
            start_date=start_date,
            end_date=end_date,
        )
        db_session.add(reservation)
        await db_session.flush()
        await db_session.refresh(reservation)
        return reservation

    return _create_reservation


@pytest.fixture
def invoice_factory(db_session, reservation_factory):
    """Factory for creating invoices."""
    from decimal import Decimal

    from boatrental.models import Invoice

    async def _create_invoice(
        reservation=None,
        amount: Decimal = Decimal("100.00"),
        paid: bool = False,
        **kwargs,
    ) -> Invoice:
        if reservation is None:
            reservation = await reservation_factory()
        invoice = Invoice(reservation_id=reservation.id, amount=amount, paid=paid, **kwargs)
        db_session.add(invoice)
        await db_session.flush()
        await db_session.refresh(invoice)
        return invoice

    return _create_invoice


# --- Pytest Hooks for Auto-Marking ---


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their fixtures.

    - Tests using db_session, db_engine, or async_client are marked as 'integration'
    - Everything else is marked as 'unit'
    - Tests can override with explicit markers
    """
    integration_fixtures = {"db_session", "db_engine", "async_client", "authed_client"}

    for item in items:
        if any(mark.name in ("unit", "integration") for mark in item.iter_markers()):
            continue

        if hasattr(item, "fixturenames") and integration_fixtures & set(item.fixturenames):
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)
