"""Authentication for user and admin endpoints.

Identity is established by the X-API-Key header; the trading engine only ever
receives the resulting trusted user id.
"""

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import APIKeyHeader
from sqlalchemy.ext.asyncio import AsyncSession

from cryptoledger.database import get_session
from cryptoledger.models import User
from cryptoledger.services import accounts

# API key header scheme
api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


async def get_current_user(
    api_key: str | None = Security(api_key_header),
    session: AsyncSession = Depends(get_session),
) -> User:
    """Validate API key and return the associated active user.

    Raises:
        HTTPException: 401 if the key is missing or invalid, 403 if the
            account has been deactivated
    """
    if not api_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing API key",
            headers={"WWW-Authenticate": "ApiKey"},
        )

    user = await accounts.get_user_by_api_key(session, api_key)

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key",
            headers={"WWW-Authenticate": "ApiKey"},
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account suspended",
        )

    return user


async def get_admin_user(user: User = Depends(get_current_user)) -> User:
    """Require an authenticated admin."""
    if not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required",
        )
    return user
