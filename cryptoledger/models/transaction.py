"""
Transaction model - the append-only ledger.

Single source of truth for holdings. Records are never modified or deleted;
a user's holding of a cryptocurrency is the sum of its buy quantities minus
the sum of its sell quantities.
"""

import enum
from datetime import datetime, UTC
from decimal import Decimal

from sqlalchemy import CheckConstraint, DateTime, Enum, ForeignKey, Index, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cryptoledger.database import Base, DecimalAsString


def _utcnow() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


class TransactionSide(enum.Enum):
    """Buy or sell."""

    BUY = "buy"
    SELL = "sell"


class Transaction(Base):
    """An executed buy or sell."""

    __tablename__ = "transactions"

    # Monotonically assigned by the database
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )

    crypto_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("cryptocurrencies.id"), nullable=False
    )

    side: Mapped[TransactionSide] = mapped_column(Enum(TransactionSide), nullable=False)

    # Units bought or sold
    quantity: Mapped[Decimal] = mapped_column(DecimalAsString, nullable=False)

    # Catalog price at execution time
    unit_price: Mapped[Decimal] = mapped_column(DecimalAsString, nullable=False)

    # quantity * unit_price: cash paid (buy) or received (sell)
    total: Mapped[Decimal] = mapped_column(DecimalAsString, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=_utcnow
    )

    # Relationships
    user: Mapped["User"] = relationship(back_populates="transactions")
    cryptocurrency: Mapped["Cryptocurrency"] = relationship(
        back_populates="transactions"
    )

    # Database constraints
    __table_args__ = (
        CheckConstraint("CAST(quantity AS NUMERIC) > 0", name="check_quantity_positive"),
        CheckConstraint("CAST(unit_price AS NUMERIC) > 0", name="check_unit_price_positive"),
        Index("ix_transactions_user_crypto", "user_id", "crypto_id"),
    )

    def __repr__(self) -> str:
        return (
            f"Transaction(id={self.id!r}, {self.side.value} {self.quantity} "
            f"crypto={self.crypto_id} @ {self.unit_price}, user={self.user_id})"
        )


# Import at end to avoid circular imports
from cryptoledger.models.cryptocurrency import Cryptocurrency
from cryptoledger.models.user import User
