"""
Cryptocurrency model - the tradeable catalog.

Symbol and name are fixed after creation. The current price is owned by an
external price collaborator and may change between any two trades.
"""

from datetime import datetime, UTC
from decimal import Decimal

from sqlalchemy import CheckConstraint, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cryptoledger.database import Base, DecimalAsString


def _utcnow() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


class Cryptocurrency(Base):
    """A cryptocurrency listed for trading."""

    __tablename__ = "cryptocurrencies"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Ticker symbol (e.g., "BTC", "ETH"), always upper-case
    symbol: Mapped[str] = mapped_column(String(16), nullable=False, unique=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    # Latest unit price in cash terms
    current_price: Mapped[Decimal] = mapped_column(DecimalAsString, nullable=False)

    # When the price was last set
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=_utcnow
    )

    # Relationships
    transactions: Mapped[list["Transaction"]] = relationship(
        back_populates="cryptocurrency"
    )

    # Database constraints
    __table_args__ = (
        CheckConstraint("CAST(current_price AS NUMERIC) > 0", name="check_price_positive"),
    )

    def __repr__(self) -> str:
        return (
            f"Cryptocurrency(id={self.id!r}, symbol={self.symbol!r}, "
            f"current_price={self.current_price})"
        )


# Import at end to avoid circular imports
from cryptoledger.models.transaction import Transaction
