"""
Shared pytest fixtures for testing the crypto ledger.

Each test gets a fresh SQLite database file so that concurrent trades run on
separate connections, as they do in production.
"""

from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from cryptoledger.database import Base, get_session
from cryptoledger.main import app
from cryptoledger.services import accounts, catalog
from cryptoledger.services.trading import TradingEngine, get_trading_engine


@pytest.fixture(scope="session")
def anyio_backend():
    """Use asyncio backend for pytest-asyncio."""
    return "asyncio"


@pytest_asyncio.fixture
async def test_engine(tmp_path):
    """Create a test database engine.

    Creates tables at the start, drops them at the end.
    Each test gets a fresh database.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(test_engine):
    """Session factory bound to the test database."""
    return async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest_asyncio.fixture
async def test_session(session_factory):
    """Provide a database session for a test.

    Rolls back the session after each test for isolation.
    """
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def trading_engine(session_factory):
    """A trading engine opening its sessions on the test database."""
    return TradingEngine(session_factory)


@pytest_asyncio.fixture
async def test_client(session_factory, trading_engine):
    """Provide a FastAPI test client with test database.

    Overrides the session and trading engine dependencies.
    """

    async def override_get_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_trading_engine] = lambda: trading_engine

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        yield client

    app.dependency_overrides.clear()


# --- Helper fixtures for creating test data ---

@pytest_asyncio.fixture
async def bitcoin(test_session):
    """BTC listed at 100.00."""
    return await catalog.create_cryptocurrency(
        test_session, "btc", "Bitcoin", Decimal("100.00")
    )


@pytest_asyncio.fixture
async def ethereum(test_session):
    """ETH listed at 20.50."""
    return await catalog.create_cryptocurrency(
        test_session, "ETH", "Ethereum", Decimal("20.50")
    )


@pytest_asyncio.fixture
async def trader(test_session):
    """A user with 1000.00 cash. Returns (user, api_key)."""
    return await accounts.register_user(
        test_session,
        "Alice",
        "alice@example.com",
        "correct-horse",
        initial_balance=Decimal("1000.00"),
    )


@pytest_asyncio.fixture
async def admin(test_session):
    """An admin user. Returns (user, api_key)."""
    return await accounts.register_user(
        test_session,
        "Root",
        "root@example.com",
        "admin-password",
        initial_balance=Decimal("0.00"),
        is_admin=True,
    )
