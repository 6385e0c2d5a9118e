"""Portfolio API endpoints - requires authentication."""

from fastapi import APIRouter, Depends

from cryptoledger import telemetry
from cryptoledger.auth import get_current_user
from cryptoledger.errors import LedgerError
from cryptoledger.models import User
from cryptoledger.routers.errors import to_http_exception
from cryptoledger.schemas.portfolio import (
    PortfolioHoldingResponse,
    PortfolioResponse,
    PortfolioSummaryResponse,
)
from cryptoledger.services.trading import TradingEngine, get_trading_engine

router = APIRouter()


@router.get(
    "/portfolio",
    response_model=PortfolioResponse,
    summary="Get my holdings",
)
async def get_portfolio(
    user: User = Depends(get_current_user),
    engine: TradingEngine = Depends(get_trading_engine),
) -> PortfolioResponse:
    """Get every cryptocurrency you hold.

    Holdings are computed from your transaction history: everything you
    bought minus everything you sold.
    """
    try:
        holdings = await engine.portfolio(user.id)
    except LedgerError as e:
        raise to_http_exception(e)

    return PortfolioResponse(
        holdings=[
            PortfolioHoldingResponse(
                crypto_id=h.crypto_id,
                symbol=h.symbol,
                name=h.name,
                current_price=h.current_price,
                quantity=h.quantity,
                current_value=h.current_value,
            )
            for h in holdings
        ]
    )


@router.get(
    "/portfolio/summary",
    response_model=PortfolioSummaryResponse,
    summary="Get portfolio summary",
)
async def get_portfolio_summary(
    user: User = Depends(get_current_user),
    engine: TradingEngine = Depends(get_trading_engine),
) -> PortfolioSummaryResponse:
    """Get your cash, the current value of your holdings, and the total."""
    try:
        summary = await engine.portfolio_summary(user.id)
    except LedgerError as e:
        raise to_http_exception(e)

    telemetry.record_portfolio_value(user.id, summary.total_value)

    return PortfolioSummaryResponse(
        user_id=summary.user_id,
        cash_balance=summary.cash_balance,
        holdings_value=summary.holdings_value,
        total_value=summary.total_value,
        positions=summary.positions,
    )
