"""Pydantic schemas for admin endpoints."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class CryptocurrencyCreate(BaseModel):
    """Request schema for listing a cryptocurrency."""

    symbol: str = Field(..., min_length=1, max_length=16, description="Ticker symbol")
    name: str = Field(..., min_length=1, max_length=255, description="Display name")
    current_price: Decimal = Field(
        ..., gt=0, decimal_places=8, description="Initial unit price"
    )


class PriceUpdate(BaseModel):
    """Request schema for an external price update."""

    price: Decimal = Field(..., gt=0, decimal_places=8, description="New unit price")


class UserCreate(BaseModel):
    """Request schema for creating a user as an admin."""

    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1, max_length=255)
    initial_balance: Decimal = Field(
        default=Decimal("0.00"),
        ge=0,
        description="Initial cash balance",
    )
    is_admin: bool = False


class UserListItem(BaseModel):
    """Response schema for a user in list view."""

    id: int
    name: str
    email: str
    balance: Decimal
    is_admin: bool
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}
