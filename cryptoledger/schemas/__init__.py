"""Pydantic schemas for request/response validation."""

from cryptoledger.schemas.admin import (
    CryptocurrencyCreate,
    PriceUpdate,
    UserCreate,
    UserListItem,
)
from cryptoledger.schemas.portfolio import (
    PortfolioHoldingResponse,
    PortfolioResponse,
    PortfolioSummaryResponse,
)
from cryptoledger.schemas.public import (
    CryptocurrencyListResponse,
    CryptocurrencyPublic,
    LoginRequest,
    RegisterRequest,
    UserCredentialsResponse,
)
from cryptoledger.schemas.trader import (
    ProfileResponse,
    TradeRequest,
    TradeResponse,
    TransactionListResponse,
    TransactionResponse,
    TransactionSide,
)

__all__ = [
    # Admin schemas
    "CryptocurrencyCreate",
    "PriceUpdate",
    "UserCreate",
    "UserListItem",
    # Public schemas
    "CryptocurrencyPublic",
    "CryptocurrencyListResponse",
    "RegisterRequest",
    "LoginRequest",
    "UserCredentialsResponse",
    # Trader schemas
    "ProfileResponse",
    "TradeRequest",
    "TradeResponse",
    "TransactionResponse",
    "TransactionListResponse",
    "TransactionSide",
    # Portfolio schemas
    "PortfolioHoldingResponse",
    "PortfolioResponse",
    "PortfolioSummaryResponse",
]
