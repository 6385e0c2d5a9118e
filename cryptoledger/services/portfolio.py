"""Portfolio service - holdings folded from the ledger, priced from the catalog."""

from dataclasses import dataclass
from decimal import Decimal, localcontext

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cryptoledger.config import ARITHMETIC_PRECISION
from cryptoledger.models import Cryptocurrency
from cryptoledger.services import accounts, ledger


@dataclass
class PortfolioHolding:
    """A cryptocurrency the user currently holds."""

    crypto_id: int
    symbol: str
    name: str
    current_price: Decimal
    quantity: Decimal

    @property
    def current_value(self) -> Decimal:
        """Market value at the current catalog price."""
        with localcontext() as ctx:
            ctx.prec = ARITHMETIC_PRECISION
            return self.quantity * self.current_price


@dataclass
class PortfolioSummary:
    """Cash plus holdings for one user."""

    user_id: int
    cash_balance: Decimal
    holdings_value: Decimal
    total_value: Decimal
    positions: int


async def get_portfolio(session: AsyncSession, user_id: int) -> list[PortfolioHolding]:
    """Get the cryptocurrencies a user holds.

    Pure read: folds the committed ledger and joins it against the catalog.
    Positions that folded back to zero are left out.

    Args:
        session: Database session
        user_id: User id

    Returns:
        Holdings with quantity > 0, ordered by cryptocurrency name
    """
    holdings = await ledger.holdings_for_user(session, user_id)
    held_ids = [crypto_id for crypto_id, quantity in holdings.items() if quantity > 0]
    if not held_ids:
        return []

    result = await session.execute(
        select(Cryptocurrency)
        .where(Cryptocurrency.id.in_(held_ids))
        .order_by(Cryptocurrency.name)
    )
    return [
        PortfolioHolding(
            crypto_id=crypto.id,
            symbol=crypto.symbol,
            name=crypto.name,
            current_price=crypto.current_price,
            quantity=holdings[crypto.id],
        )
        for crypto in result.scalars()
    ]


async def get_portfolio_summary(session: AsyncSession, user_id: int) -> PortfolioSummary:
    """Get the total value of a user's cash and holdings.

    Raises:
        NotFound: If the user does not exist
    """
    cash_balance = await accounts.get_balance(session, user_id)
    holdings = await get_portfolio(session, user_id)

    with localcontext() as ctx:
        ctx.prec = ARITHMETIC_PRECISION
        holdings_value = sum((h.current_value for h in holdings), Decimal("0.00"))
        total_value = cash_balance + holdings_value
    return PortfolioSummary(
        user_id=user_id,
        cash_balance=cash_balance,
        holdings_value=holdings_value,
        total_value=total_value,
        positions=len(holdings),
    )
