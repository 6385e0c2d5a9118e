"""Trader API endpoints - requires authentication."""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from cryptoledger.auth import get_current_user
from cryptoledger.errors import LedgerError
from cryptoledger.models import TransactionSide as ModelTransactionSide
from cryptoledger.models import User
from cryptoledger.routers.errors import to_http_exception
from cryptoledger.schemas.trader import (
    ProfileResponse,
    TradeRequest,
    TradeResponse,
    TransactionListResponse,
    TransactionResponse,
)
from cryptoledger.services.trading import TradeResult, TradingEngine, get_trading_engine

router = APIRouter()


def _trade_response(result: TradeResult) -> TradeResponse:
    return TradeResponse(
        transaction_id=result.transaction_id,
        side=result.side.value,
        crypto_id=result.crypto_id,
        symbol=result.symbol,
        quantity=result.quantity,
        unit_price=result.unit_price,
        total=result.total,
        new_balance=result.new_balance,
    )


# ============================================================================
# Profile endpoints
# ============================================================================


@router.get(
    "/profile",
    response_model=ProfileResponse,
    summary="Get my profile",
)
async def get_profile(
    user: User = Depends(get_current_user),
) -> ProfileResponse:
    """Get the authenticated user's profile and cash balance."""
    return ProfileResponse.model_validate(user)


# ============================================================================
# Trade endpoints
# ============================================================================


@router.post(
    "/transactions/buy",
    response_model=TradeResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Buy a cryptocurrency",
)
async def buy(
    data: TradeRequest,
    user: User = Depends(get_current_user),
    engine: TradingEngine = Depends(get_trading_engine),
) -> TradeResponse:
    """Buy at the current catalog price.

    - **crypto_id**: Cryptocurrency to buy
    - **quantity**: Units to buy; quantity * price is debited from your cash
    """
    try:
        result = await engine.buy(user.id, data.crypto_id, data.quantity)
    except LedgerError as e:
        raise to_http_exception(e)
    return _trade_response(result)


@router.post(
    "/transactions/sell",
    response_model=TradeResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Sell a cryptocurrency",
)
async def sell(
    data: TradeRequest,
    user: User = Depends(get_current_user),
    engine: TradingEngine = Depends(get_trading_engine),
) -> TradeResponse:
    """Sell at the current catalog price.

    - **crypto_id**: Cryptocurrency to sell
    - **quantity**: Units to sell; cannot exceed what you hold
    """
    try:
        result = await engine.sell(user.id, data.crypto_id, data.quantity)
    except LedgerError as e:
        raise to_http_exception(e)
    return _trade_response(result)


@router.get(
    "/transactions",
    response_model=TransactionListResponse,
    summary="List my transactions",
)
async def list_transactions(
    crypto_id: int | None = Query(default=None, gt=0, description="Filter by cryptocurrency"),
    limit: int | None = Query(default=None, gt=0, le=1000, description="Maximum records"),
    user: User = Depends(get_current_user),
    engine: TradingEngine = Depends(get_trading_engine),
) -> TransactionListResponse:
    """Get the authenticated user's transactions, newest first."""
    try:
        records = await engine.transaction_history(user.id, crypto_id=crypto_id, limit=limit)
    except LedgerError as e:
        raise to_http_exception(e)

    return TransactionListResponse(
        transactions=[
            TransactionResponse(
                id=t.id,
                crypto_id=t.crypto_id,
                symbol=t.cryptocurrency.symbol,
                name=t.cryptocurrency.name,
                side=t.side.value,
                quantity=t.quantity,
                unit_price=t.unit_price,
                total=t.total,
                created_at=t.created_at,
            )
            for t in records
        ]
    )
