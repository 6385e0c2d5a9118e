"""Pydantic schemas for portfolio endpoints."""

from decimal import Decimal

from pydantic import BaseModel, Field


class PortfolioHoldingResponse(BaseModel):
    """A cryptocurrency the user currently holds."""

    crypto_id: int = Field(..., description="Cryptocurrency id")
    symbol: str = Field(..., description="Ticker symbol")
    name: str = Field(..., description="Cryptocurrency name")
    current_price: Decimal = Field(..., description="Current catalog price")
    quantity: Decimal = Field(..., description="Units held")
    current_value: Decimal = Field(..., description="quantity * current_price")


class PortfolioResponse(BaseModel):
    """Response for listing holdings."""

    holdings: list[PortfolioHoldingResponse] = Field(default_factory=list)


class PortfolioSummaryResponse(BaseModel):
    """Response schema for portfolio summary."""

    user_id: int = Field(..., description="User identifier")
    cash_balance: Decimal = Field(..., description="Available cash")
    holdings_value: Decimal = Field(
        ..., description="Market value of all holdings at current prices"
    )
    total_value: Decimal = Field(
        ..., description="Total portfolio value (cash + holdings)"
    )
    positions: int = Field(..., description="Number of cryptocurrencies held")
