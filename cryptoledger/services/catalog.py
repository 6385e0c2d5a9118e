"""Catalog service - the cryptocurrencies available for trading.

Prices belong to an external collaborator (see set_price). The trading engine
only ever reads a snapshot through get_price.
"""

import logging
from datetime import datetime, UTC
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cryptoledger.errors import InvalidArgument, NotFound
from cryptoledger.models import Cryptocurrency
from cryptoledger.services.validation import require_id, to_positive_decimal

logger = logging.getLogger(__name__)


async def list_cryptocurrencies(session: AsyncSession) -> list[Cryptocurrency]:
    """Get the whole catalog, ordered by name."""
    result = await session.execute(select(Cryptocurrency).order_by(Cryptocurrency.name))
    return list(result.scalars().all())


async def get_cryptocurrency(
    session: AsyncSession, crypto_id: int
) -> Cryptocurrency | None:
    """Get a cryptocurrency by id, or None if unknown."""
    result = await session.execute(
        select(Cryptocurrency).where(Cryptocurrency.id == crypto_id)
    )
    return result.scalar_one_or_none()


async def get_by_symbol(session: AsyncSession, symbol: str) -> Cryptocurrency | None:
    """Get a cryptocurrency by symbol (case-insensitive)."""
    result = await session.execute(
        select(Cryptocurrency).where(Cryptocurrency.symbol == symbol.upper())
    )
    return result.scalar_one_or_none()


async def get_price(session: AsyncSession, crypto_id: int) -> Cryptocurrency:
    """Resolve a cryptocurrency for pricing.

    The returned object is the price snapshot for one trade: callers read
    ``current_price`` once and use that value for both validation and the
    ledger record.

    Args:
        session: Database session
        crypto_id: Cryptocurrency id

    Returns:
        The cryptocurrency with its current price

    Raises:
        NotFound: If the id is not in the catalog
    """
    crypto = await get_cryptocurrency(session, crypto_id)
    if crypto is None:
        raise NotFound("cryptocurrency", crypto_id)
    return crypto


async def create_cryptocurrency(
    session: AsyncSession, symbol: str, name: str, current_price: Decimal
) -> Cryptocurrency:
    """Add a cryptocurrency to the catalog.

    Args:
        session: Database session
        symbol: Ticker symbol, stored upper-case
        name: Display name
        current_price: Initial unit price

    Returns:
        The created cryptocurrency

    Raises:
        InvalidArgument: If symbol/name are blank or the price is not positive
        IntegrityError: If the symbol already exists
    """
    symbol = (symbol or "").strip().upper()
    name = (name or "").strip()
    if not symbol or not name:
        raise InvalidArgument("symbol and name are required")
    price = to_positive_decimal(current_price, "current_price")

    crypto = Cryptocurrency(symbol=symbol, name=name, current_price=price)
    session.add(crypto)
    await session.commit()

    logger.info(
        "Cryptocurrency listed",
        extra={"crypto_id": crypto.id, "symbol": symbol, "price": str(price)},
    )
    return crypto


async def set_price(
    session: AsyncSession, crypto_id: int, price: Decimal
) -> Cryptocurrency:
    """Update the current price of a cryptocurrency.

    This is the entry point for the external price collaborator. Trades
    already in flight keep the snapshot they read.

    Raises:
        InvalidArgument: If the price is not a positive decimal
        NotFound: If the id is not in the catalog
    """
    crypto_id = require_id(crypto_id, "crypto_id")
    new_price = to_positive_decimal(price, "price")

    crypto = await get_price(session, crypto_id)
    old_price = crypto.current_price
    crypto.current_price = new_price
    crypto.updated_at = datetime.now(UTC).replace(tzinfo=None)
    await session.commit()

    logger.info(
        "Price updated",
        extra={
            "crypto_id": crypto_id,
            "symbol": crypto.symbol,
            "old_price": str(old_price),
            "new_price": str(new_price),
        },
    )
    return crypto
