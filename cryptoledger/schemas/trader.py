"""Pydantic schemas for trader endpoints."""

from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field


class TransactionSide(str, Enum):
    """Buy or sell (matching the model enum)."""

    BUY = "buy"
    SELL = "sell"


# ============================================================================
# Trade schemas
# ============================================================================


class TradeRequest(BaseModel):
    """Request schema for a buy or sell."""

    crypto_id: int = Field(..., gt=0, description="Cryptocurrency id")
    quantity: Decimal = Field(
        ...,
        gt=0,
        max_digits=28,
        decimal_places=8,
        description="Units to trade",
    )


class TradeResponse(BaseModel):
    """Response schema for a committed trade."""

    transaction_id: int
    side: TransactionSide
    crypto_id: int
    symbol: str
    quantity: Decimal
    unit_price: Decimal
    total: Decimal
    new_balance: Decimal


# ============================================================================
# History schemas
# ============================================================================


class TransactionResponse(BaseModel):
    """One ledger record."""

    id: int
    crypto_id: int
    symbol: str
    name: str
    side: TransactionSide
    quantity: Decimal
    unit_price: Decimal
    total: Decimal
    created_at: datetime


class TransactionListResponse(BaseModel):
    """Response for listing transactions, newest first."""

    transactions: list[TransactionResponse] = Field(default_factory=list)


# ============================================================================
# Profile schemas
# ============================================================================


class ProfileResponse(BaseModel):
    """Response schema for the authenticated user's profile."""

    id: int
    name: str
    email: str
    balance: Decimal
    is_admin: bool
    created_at: datetime

    model_config = {"from_attributes": True}
