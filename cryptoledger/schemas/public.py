"""Pydantic schemas for public endpoints."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


# ============================================================================
# Catalog schemas
# ============================================================================


class CryptocurrencyPublic(BaseModel):
    """Public cryptocurrency info."""

    id: int
    symbol: str
    name: str
    current_price: Decimal
    updated_at: datetime

    model_config = {"from_attributes": True}


class CryptocurrencyListResponse(BaseModel):
    """Response for listing the catalog."""

    cryptocurrencies: list[CryptocurrencyPublic]


# ============================================================================
# Registration schemas
# ============================================================================


class RegisterRequest(BaseModel):
    """Request schema for registering a user."""

    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1, max_length=255)


class LoginRequest(BaseModel):
    """Request schema for exchanging credentials for a fresh API key."""

    email: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1, max_length=255)


class UserCredentialsResponse(BaseModel):
    """Response schema for registration and login (includes API key)."""

    user_id: int
    name: str
    email: str
    balance: Decimal
    is_admin: bool
    api_key: str
    created_at: datetime
