"""
Database configuration for the crypto ledger.

Uses async SQLAlchemy with SQLite (local) or PostgreSQL (production).
The engine is a process-wide resource: opened by init_db() at startup and
released by close_db() at shutdown.
"""

from decimal import Decimal

from sqlalchemy import String, text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.types import TypeDecorator

from cryptoledger.config import DATABASE_URL, SQLALCHEMY_ECHO

# Create async engine
engine = create_async_engine(DATABASE_URL, echo=SQLALCHEMY_ECHO)

# Session factory - creates new database sessions
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class DecimalAsString(TypeDecorator):
    """Exact decimal column.

    Values are stored in their string form so every backend (SQLite included)
    hands back exactly the Decimal that was written.
    """

    impl = String
    cache_ok = True

    def process_bind_param(self, value: Decimal | None, dialect: object) -> str | None:
        if value is None:
            return None
        return str(Decimal(value))

    def process_result_value(self, value: str | None, dialect: object) -> Decimal | None:
        if value is None:
            return None
        return Decimal(value)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


async def init_db() -> None:
    """Create all database tables.

    Called on application startup to ensure tables exist.
    In production, you'd use Alembic migrations instead.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Release pooled connections. Called once on shutdown."""
    await engine.dispose()


async def begin_write(session: AsyncSession) -> None:
    """Open the session's transaction holding the database write lock.

    Must be the first statement of the session. SQLite has no row locks and
    drops FOR UPDATE, so BEGIN IMMEDIATE takes its reserved lock up front:
    a read-check-write sequence then cannot interleave with another
    connection's, in this process or any other. Backends with row locks rely
    on SELECT ... FOR UPDATE instead.
    """
    if session.get_bind().dialect.name == "sqlite":
        await session.execute(text("BEGIN IMMEDIATE"))


async def get_session() -> AsyncSession:
    """Dependency that provides a database session.

    Usage in FastAPI:
        @app.get("/example")
        async def example(session: AsyncSession = Depends(get_session)):
            ...
    """
    async with AsyncSessionLocal() as session:
        yield session
