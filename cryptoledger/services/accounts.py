"""Account service - users and their cash balances.

The balance is the only mutable money state in the system. adjust_balance is
the single write path and is only called by the trading engine, inside its
per-user lock and database transaction.
"""

import hashlib
import logging
import secrets
from decimal import Decimal

from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from cryptoledger.config import DEFAULT_STARTING_BALANCE, MIN_PASSWORD_LENGTH
from cryptoledger.errors import (
    AccountInactive,
    DuplicateEmail,
    InsufficientFunds,
    InvalidArgument,
    InvalidCredentials,
    NotFound,
)
from cryptoledger.models import User

logger = logging.getLogger(__name__)

# Password hashing context
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def generate_api_key() -> str:
    """Generate a secure API key for a user.

    Returns:
        A URL-safe random string (sk_ prefix + 43 characters)
    """
    return f"sk_{secrets.token_urlsafe(32)}"


def hash_api_key(api_key: str) -> str:
    """Hash an API key for secure storage.

    Returns:
        SHA-256 hash of the API key (64 hex characters)
    """
    return hashlib.sha256(api_key.encode()).hexdigest()


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


async def get_user(session: AsyncSession, user_id: int) -> User | None:
    """Get a user by id, or None if unknown."""
    result = await session.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_email(session: AsyncSession, email: str) -> User | None:
    result = await session.execute(
        select(User).where(User.email == email.strip().lower())
    )
    return result.scalar_one_or_none()


async def get_user_by_api_key(session: AsyncSession, api_key: str) -> User | None:
    """Look up the user owning an API key."""
    result = await session.execute(
        select(User).where(User.api_key_hash == hash_api_key(api_key))
    )
    return result.scalar_one_or_none()


async def list_users(session: AsyncSession) -> list[User]:
    """Get all users, oldest first."""
    result = await session.execute(select(User).order_by(User.id))
    return list(result.scalars().all())


async def get_balance(session: AsyncSession, user_id: int) -> Decimal:
    """Read a user's current cash balance.

    Raises:
        NotFound: If the user does not exist
    """
    result = await session.execute(select(User.balance).where(User.id == user_id))
    balance = result.scalar_one_or_none()
    if balance is None:
        raise NotFound("user", user_id)
    return balance


async def lock_user(session: AsyncSession, user_id: int) -> User:
    """Load a user with its row locked until the transaction ends.

    Every read that a trade's checks depend on must come after this call.
    On SQLite the row lock is a no-op; open the transaction with
    database.begin_write first.

    Raises:
        NotFound: If the user does not exist
    """
    result = await session.execute(
        select(User).where(User.id == user_id).with_for_update()
    )
    user = result.scalar_one_or_none()
    if user is None:
        raise NotFound("user", user_id)
    return user


async def adjust_balance(session: AsyncSession, user_id: int, delta: Decimal) -> Decimal:
    """Add ``delta`` (negative for a debit) to a user's balance.

    The row is read through lock_user so the check and the write form one
    step. Flushes but does not commit: the caller owns the transaction.

    Args:
        session: Database session (caller manages transaction)
        user_id: User whose balance changes
        delta: Signed amount

    Returns:
        The new balance

    Raises:
        NotFound: If the user does not exist
        InsufficientFunds: If the balance would become negative
    """
    user = await lock_user(session, user_id)

    new_balance = user.balance + delta
    if new_balance < 0:
        raise InsufficientFunds(user.balance, -delta)

    user.balance = new_balance
    await session.flush()
    return new_balance


async def register_user(
    session: AsyncSession,
    name: str,
    email: str,
    password: str,
    initial_balance: Decimal | None = None,
    is_admin: bool = False,
) -> tuple[User, str]:
    """Create a new user.

    Args:
        session: Database session
        name: Display name
        email: Unique email address (stored lower-case)
        password: Plain password, hashed before storage
        initial_balance: Starting cash (defaults to DEFAULT_STARTING_BALANCE)
        is_admin: Grant admin privileges

    Returns:
        Tuple of (created user, API key). The key is not stored and cannot
        be retrieved later.

    Raises:
        InvalidArgument: Missing fields, short password or negative balance
        DuplicateEmail: If the email is already registered
    """
    name = (name or "").strip()
    email = (email or "").strip().lower()
    if not name or not email or not password:
        raise InvalidArgument("name, email and password are required")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise InvalidArgument(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
        )

    balance = DEFAULT_STARTING_BALANCE if initial_balance is None else Decimal(initial_balance)
    if balance < 0:
        raise InvalidArgument("initial balance cannot be negative")

    api_key = generate_api_key()
    user = User(
        name=name,
        email=email,
        password_hash=hash_password(password),
        api_key_hash=hash_api_key(api_key),
        balance=balance,
        is_admin=is_admin,
        is_active=True,
    )
    session.add(user)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise DuplicateEmail(email)

    logger.info("User registered", extra={"user_id": user.id, "is_admin": is_admin})
    return user, api_key


async def authenticate(
    session: AsyncSession, email: str, password: str
) -> tuple[User, str]:
    """Verify credentials and issue a fresh API key.

    The previous key stops working.

    Raises:
        InvalidCredentials: Unknown email or wrong password
        AccountInactive: The account has been deactivated
    """
    if not email or not password:
        raise InvalidArgument("email and password are required")

    user = await get_user_by_email(session, email)
    if user is None:
        raise InvalidCredentials("Invalid credentials")
    if not user.is_active:
        raise AccountInactive("Account suspended")
    if not verify_password(password, user.password_hash):
        raise InvalidCredentials("Invalid credentials")

    api_key = generate_api_key()
    user.api_key_hash = hash_api_key(api_key)
    await session.commit()

    logger.info("User logged in", extra={"user_id": user.id})
    return user, api_key


async def set_admin(session: AsyncSession, user_id: int, is_admin: bool = True) -> User:
    """Grant or revoke admin privileges."""
    user = await get_user(session, user_id)
    if user is None:
        raise NotFound("user", user_id)
    user.is_admin = is_admin
    await session.commit()
    return user


async def deactivate_user(session: AsyncSession, user_id: int) -> User:
    """Deactivate a user. Users are never deleted.

    Raises:
        NotFound: If the user does not exist
    """
    user = await get_user(session, user_id)
    if user is None:
        raise NotFound("user", user_id)
    user.is_active = False
    await session.commit()

    logger.info("User deactivated", extra={"user_id": user_id})
    return user
