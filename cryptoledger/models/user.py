"""
User model - a registered participant holding a cash balance.

- Cash balance cannot go negative (no margin/credit)
- Balance changes only through the trading engine's atomic commit
- Users are never deleted, only deactivated
"""

from datetime import datetime, UTC
from decimal import Decimal

from sqlalchemy import Boolean, CheckConstraint, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cryptoledger.database import Base, DecimalAsString


def _utcnow() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


class User(Base):
    """A trader on the ledger."""

    __tablename__ = "users"

    # Primary key: assigned by the database, never changes
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)

    # passlib hash of the password
    password_hash: Mapped[str] = mapped_column(String, nullable=False)

    # SHA-256 hash of the current API key
    api_key_hash: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)

    # Available cash for trading
    balance: Mapped[Decimal] = mapped_column(
        DecimalAsString, nullable=False, default=Decimal("0.00")
    )

    is_admin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=_utcnow
    )

    # Relationships
    transactions: Mapped[list["Transaction"]] = relationship(back_populates="user")

    # Database constraints
    __table_args__ = (
        CheckConstraint("CAST(balance AS NUMERIC) >= 0", name="check_balance_non_negative"),
    )

    def __repr__(self) -> str:
        return f"User(id={self.id!r}, email={self.email!r}, balance={self.balance})"


# Import at end to avoid circular imports
from cryptoledger.models.transaction import Transaction
