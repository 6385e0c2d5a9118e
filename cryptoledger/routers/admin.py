"""Admin API endpoints - requires an admin API key."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from cryptoledger.auth import get_admin_user
from cryptoledger.database import get_session
from cryptoledger.errors import LedgerError
from cryptoledger.routers.errors import to_http_exception
from cryptoledger.schemas.admin import (
    CryptocurrencyCreate,
    PriceUpdate,
    UserCreate,
    UserListItem,
)
from cryptoledger.schemas.public import CryptocurrencyPublic, UserCredentialsResponse
from cryptoledger.services import accounts
from cryptoledger.services import catalog as catalog_service

router = APIRouter(dependencies=[Depends(get_admin_user)])


@router.post(
    "/cryptocurrencies",
    response_model=CryptocurrencyPublic,
    status_code=status.HTTP_201_CREATED,
    summary="List a new cryptocurrency",
)
async def create_cryptocurrency(
    data: CryptocurrencyCreate,
    session: AsyncSession = Depends(get_session),
) -> CryptocurrencyPublic:
    """Add a cryptocurrency to the catalog.

    - **symbol**: Unique symbol (will be uppercased)
    - **name**: Display name
    - **current_price**: Initial unit price
    """
    try:
        crypto = await catalog_service.create_cryptocurrency(
            session, data.symbol, data.name, data.current_price
        )
        return CryptocurrencyPublic.model_validate(crypto)
    except IntegrityError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Cryptocurrency with symbol '{data.symbol.upper()}' already exists",
        )
    except LedgerError as e:
        raise to_http_exception(e)


@router.put(
    "/cryptocurrencies/{crypto_id}/price",
    response_model=CryptocurrencyPublic,
    summary="Set the current price",
)
async def set_price(
    crypto_id: int,
    data: PriceUpdate,
    session: AsyncSession = Depends(get_session),
) -> CryptocurrencyPublic:
    """Update a cryptocurrency's price. Used by the external price feed."""
    try:
        crypto = await catalog_service.set_price(session, crypto_id, data.price)
    except LedgerError as e:
        raise to_http_exception(e)
    return CryptocurrencyPublic.model_validate(crypto)


@router.post(
    "/users",
    response_model=UserCredentialsResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a user",
)
async def create_user(
    data: UserCreate,
    session: AsyncSession = Depends(get_session),
) -> UserCredentialsResponse:
    """Create a user with an explicit starting balance.

    **Store the API key securely - it cannot be retrieved later.**
    """
    try:
        user, api_key = await accounts.register_user(
            session,
            data.name,
            data.email,
            data.password,
            initial_balance=data.initial_balance,
            is_admin=data.is_admin,
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


@router.get(
    "/users",
    response_model=list[UserListItem],
    summary="List all users",
)
async def list_users(
    session: AsyncSession = Depends(get_session),
) -> list[UserListItem]:
    """Get all registered users."""
    users = await accounts.list_users(session)
    return [UserListItem.model_validate(u) for u in users]


@router.post(
    "/users/{user_id}/deactivate",
    response_model=UserListItem,
    summary="Deactivate a user",
)
async def deactivate_user(
    user_id: int,
    session: AsyncSession = Depends(get_session),
) -> UserListItem:
    """Deactivate a user. Their ledger history is kept."""
    try:
        user = await accounts.deactivate_user(session, user_id)
    except LedgerError as e:
        raise to_http_exception(e)
    return UserListItem.model_validate(user)
