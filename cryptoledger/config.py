"""
Runtime configuration for the crypto ledger.

All settings come from environment variables so the same image can run
locally (SQLite) or in production (PostgreSQL).
"""

import os
from decimal import Decimal

# Database URL from environment, defaults to SQLite for local development
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./crypto_ledger.db")

# echo=False by default, set SQLALCHEMY_ECHO=1 to enable SQL logging
SQLALCHEMY_ECHO = os.getenv("SQLALCHEMY_ECHO") == "1"

# "production" tightens CORS to the allow-list below
APP_ENV = os.getenv("APP_ENV", "development")

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "CORS_ORIGINS",
        "http://localhost:3000,http://localhost:8080,http://localhost:5500",
    ).split(",")
    if origin.strip()
]

# Cash credited to a newly registered user
DEFAULT_STARTING_BALANCE = Decimal(os.getenv("DEFAULT_STARTING_BALANCE", "10000.00"))

MIN_PASSWORD_LENGTH = int(os.getenv("MIN_PASSWORD_LENGTH", "6"))

# Upper bound for a single storage round-trip inside a trade
STORAGE_TIMEOUT_SECONDS = float(os.getenv("STORAGE_TIMEOUT_SECONDS", "30"))

# Quantities and prices are limited to this many fractional digits
MAX_DECIMAL_PLACES = 8

# Digits of precision for money arithmetic; large enough that no product or
# sum of stored amounts is ever rounded
ARITHMETIC_PRECISION = 60


def is_production() -> bool:
    """Whether the service runs with production settings."""
    return APP_ENV.lower() == "production"
