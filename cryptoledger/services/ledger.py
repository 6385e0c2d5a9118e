"""Ledger service - the append-only transaction log.

Holdings are never stored. They are folded from the log on demand: every buy
adds its quantity, every sell subtracts it. A failed trade simply never
appends, so no compensating updates exist anywhere.
"""

from decimal import Decimal

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from cryptoledger.models import Transaction, TransactionSide


def signed_quantity(side: TransactionSide, quantity: Decimal) -> Decimal:
    """Contribution of one record to a holding."""
    return quantity if side == TransactionSide.BUY else -quantity


async def append(
    session: AsyncSession,
    user_id: int,
    crypto_id: int,
    side: TransactionSide,
    quantity: Decimal,
    unit_price: Decimal,
    total: Decimal,
) -> Transaction:
    """Append a record to the ledger.

    Flushes to obtain the record id but does not commit; the caller commits
    it together with the matching balance adjustment.

    Args:
        session: Database session (caller manages transaction)
        user_id: Trading user
        crypto_id: Cryptocurrency traded
        side: BUY or SELL
        quantity: Units traded
        unit_price: Price snapshot used for the trade
        total: quantity * unit_price

    Returns:
        The new record, with its id assigned
    """
    record = Transaction(
        user_id=user_id,
        crypto_id=crypto_id,
        side=side,
        quantity=quantity,
        unit_price=unit_price,
        total=total,
    )
    session.add(record)
    await session.flush()
    return record


async def holding_of(session: AsyncSession, user_id: int, crypto_id: int) -> Decimal:
    """Net quantity of one cryptocurrency held by a user.

    Folds every matching record in insertion order. Returns 0 when the user
    has never traded it.
    """
    result = await session.execute(
        select(Transaction.side, Transaction.quantity)
        .where(
            and_(
                Transaction.user_id == user_id,
                Transaction.crypto_id == crypto_id,
            )
        )
        .order_by(Transaction.id)
    )
    holding = Decimal(0)
    for side, quantity in result:
        holding += signed_quantity(side, quantity)
    return holding


async def holdings_for_user(session: AsyncSession, user_id: int) -> dict[int, Decimal]:
    """Net quantity per cryptocurrency for a user.

    Includes cryptocurrencies whose holding folded back to zero; callers
    filter as needed.

    Returns:
        Mapping of crypto_id -> holding, in order of first trade
    """
    result = await session.execute(
        select(Transaction.crypto_id, Transaction.side, Transaction.quantity)
        .where(Transaction.user_id == user_id)
        .order_by(Transaction.id)
    )
    holdings: dict[int, Decimal] = {}
    for crypto_id, side, quantity in result:
        holdings[crypto_id] = holdings.get(crypto_id, Decimal(0)) + signed_quantity(
            side, quantity
        )
    return holdings


async def list_for_user(
    session: AsyncSession,
    user_id: int,
    crypto_id: int | None = None,
    limit: int | None = None,
) -> list[Transaction]:
    """A user's transaction history, newest first.

    The cryptocurrency is loaded with each record for symbol/name display.

    Args:
        session: Database session
        user_id: User id
        crypto_id: Only records for this cryptocurrency (optional)
        limit: Maximum number of records (optional)

    Returns:
        List of records ordered by id descending
    """
    query = (
        select(Transaction)
        .options(joinedload(Transaction.cryptocurrency))
        .where(Transaction.user_id == user_id)
    )
    if crypto_id is not None:
        query = query.where(Transaction.crypto_id == crypto_id)

    query = query.order_by(Transaction.id.desc())
    if limit is not None:
        query = query.limit(limit)

    result = await session.execute(query)
    return list(result.scalars().all())
