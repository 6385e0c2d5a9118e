"""Public API endpoints - no authentication required."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from cryptoledger.database import get_session
from cryptoledger.errors import LedgerError
from cryptoledger.routers.errors import to_http_exception
from cryptoledger.schemas.public import (
    CryptocurrencyListResponse,
    CryptocurrencyPublic,
    LoginRequest,
    RegisterRequest,
    UserCredentialsResponse,
)
from cryptoledger.services import accounts
from cryptoledger.services import catalog as catalog_service

router = APIRouter()


# ============================================================================
# Catalog endpoints
# ============================================================================


@router.get(
    "/cryptocurrencies",
    response_model=CryptocurrencyListResponse,
    summary="List all cryptocurrencies",
)
async def list_cryptocurrencies(
    session: AsyncSession = Depends(get_session),
) -> CryptocurrencyListResponse:
    """Get every cryptocurrency available for trading, ordered by name."""
    cryptos = await catalog_service.list_cryptocurrencies(session)
    return CryptocurrencyListResponse(
        cryptocurrencies=[CryptocurrencyPublic.model_validate(c) for c in cryptos]
    )


@router.get(
    "/cryptocurrencies/{crypto_id}",
    response_model=CryptocurrencyPublic,
    summary="Get a cryptocurrency",
)
async def get_cryptocurrency(
    crypto_id: int,
    session: AsyncSession = Depends(get_session),
) -> CryptocurrencyPublic:
    """Get a single cryptocurrency with its current price."""
    crypto = await catalog_service.get_cryptocurrency(session, crypto_id)
    if not crypto:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Cryptocurrency '{crypto_id}' not found",
        )
    return CryptocurrencyPublic.model_validate(crypto)


# ============================================================================
# Registration endpoints
# ============================================================================


@router.post(
    "/register",
    response_model=UserCredentialsResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
)
async def register(
    data: RegisterRequest,
    session: AsyncSession = Depends(get_session),
) -> UserCredentialsResponse:
    """Create a user with the default starting balance.

    Returns the user details including the API key.
    **Store the API key securely - it cannot be retrieved later.**
    """
    try:
        user, api_key = await accounts.register_user(
            session, data.name, data.email, data.password
        )
    except LedgerError as e:
        raise to_http_exception(e)

    return UserCredentialsResponse(
        user_id=user.id,
        name=user.name,
        email=user.email,
        balance=user.balance,
        is_admin=user.is_admin,
        api_key=api_key,
        created_at=user.created_at,
    )


@router.post(
    "/login",
    response_model=UserCredentialsResponse,
    summary="Exchange credentials for a new API key",
)
async def login(
    data: LoginRequest,
    session: AsyncSession = Depends(get_session),
) -> UserCredentialsResponse:
    """Verify email and password and issue a fresh API key.

    The previous API key stops working.
    """
    try:
        user, api_key = await accounts.authenticate(session, data.email, data.password)
    except LedgerError as e:
        raise to_http_exception(e)

    return UserCredentialsResponse(
        user_id=user.id,
        name=user.name,
        email=user.email,
        balance=user.balance,
        is_admin=user.is_admin,
        api_key=api_key,
        created_at=user.created_at,
    )
