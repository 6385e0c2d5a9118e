"""Trading engine - atomic buy and sell against the ledger.

Each trade runs validate -> commit -> report:
1. Coerce and check the request (InvalidArgument)
2. Under the user's lock, open a write transaction and lock the user row
   (NotFound), then read the catalog price once (NotFound)
3. Check funds (buy) or the ledger-derived holding (sell)
4. Adjust the balance and append the ledger record in one database
   transaction, then commit
5. Return the balance written by that commit

Business rejections happen before any write. Storage faults roll the whole
transaction back and surface as StorageFailure.
"""

import asyncio
import functools
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from decimal import Decimal, localcontext

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from cryptoledger import telemetry
from cryptoledger.config import ARITHMETIC_PRECISION, STORAGE_TIMEOUT_SECONDS
from cryptoledger.database import AsyncSessionLocal, begin_write
from cryptoledger.errors import (
    InsufficientFunds,
    InsufficientHolding,
    LedgerError,
    StorageFailure,
)
from cryptoledger.models import Transaction, TransactionSide
from cryptoledger.services import accounts, catalog, ledger
from cryptoledger.services import portfolio as portfolio_service
from cryptoledger.services.portfolio import PortfolioHolding, PortfolioSummary
from cryptoledger.services.validation import require_id, to_positive_decimal

logger = logging.getLogger(__name__)


@dataclass
class TradeResult:
    """Outcome of a committed trade."""

    transaction_id: int
    new_balance: Decimal
    side: TransactionSide
    crypto_id: int
    symbol: str
    quantity: Decimal
    unit_price: Decimal
    total: Decimal


class UserLocks:
    """One asyncio.Lock per user, created on demand.

    A lock is dropped as soon as nobody holds or waits for it, so the
    registry only ever contains users with a trade in flight.
    """

    def __init__(self):
        self._locks: dict[int, asyncio.Lock] = {}
        self._holders: dict[int, int] = {}

    @asynccontextmanager
    async def hold(self, user_id: int):
        lock = self._locks.get(user_id)
        if lock is None:
            lock = self._locks[user_id] = asyncio.Lock()
        self._holders[user_id] = self._holders.get(user_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._holders[user_id] -= 1
            if self._holders[user_id] == 0:
                del self._holders[user_id]
                del self._locks[user_id]

    def __len__(self) -> int:
        return len(self._locks)


class TradingEngine:
    """Serializes trades per user and commits them atomically.

    Trades for different users run fully in parallel; catalog reads take no
    lock. Every operation opens its own session from ``session_factory``.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] = AsyncSessionLocal,
        storage_timeout: float = STORAGE_TIMEOUT_SECONDS,
    ):
        self._session_factory = session_factory
        self._storage_timeout = storage_timeout
        self.locks = UserLocks()

    async def buy(self, user_id: int, crypto_id: int, quantity: Decimal) -> TradeResult:
        """Buy ``quantity`` units at the current catalog price.

        Raises:
            InvalidArgument: Bad ids or non-positive quantity
            NotFound: Unknown cryptocurrency or user
            InsufficientFunds: Cost exceeds the cash balance
            StorageFailure: Persistence fault, outcome must be reconciled
        """
        return await self._trade(TransactionSide.BUY, user_id, crypto_id, quantity)

    async def sell(self, user_id: int, crypto_id: int, quantity: Decimal) -> TradeResult:
        """Sell ``quantity`` units at the current catalog price.

        Raises:
            InvalidArgument: Bad ids or non-positive quantity
            NotFound: Unknown cryptocurrency or user
            InsufficientHolding: Quantity exceeds the ledger-derived holding
            StorageFailure: Persistence fault, outcome must be reconciled
        """
        return await self._trade(TransactionSide.SELL, user_id, crypto_id, quantity)

    async def holding_of(self, user_id: int, crypto_id: int) -> Decimal:
        """Net quantity held, folded from the committed ledger."""
        return await self._read(ledger.holding_of, user_id, crypto_id)

    async def portfolio(self, user_id: int) -> list[PortfolioHolding]:
        """Holdings with quantity > 0, joined against the catalog."""
        return await self._read(portfolio_service.get_portfolio, user_id)

    async def portfolio_summary(self, user_id: int) -> PortfolioSummary:
        """Cash, holdings value and total value."""
        return await self._read(portfolio_service.get_portfolio_summary, user_id)

    async def transaction_history(
        self,
        user_id: int,
        crypto_id: int | None = None,
        limit: int | None = None,
    ) -> list[Transaction]:
        """Ledger records for a user, newest first."""
        return await self._read(
            ledger.list_for_user, user_id, crypto_id=crypto_id, limit=limit
        )

    async def _trade(
        self,
        side: TransactionSide,
        user_id: int,
        crypto_id: int,
        quantity: Decimal,
    ) -> TradeResult:
        try:
            user_id = require_id(user_id, "user_id")
            crypto_id = require_id(crypto_id, "crypto_id")
            quantity = to_positive_decimal(quantity, "quantity")
        except LedgerError as exc:
            self._log_rejection(side, user_id, crypto_id, quantity, exc)
            raise

        # A caller that goes away must not interrupt a commit in flight. The
        # outcome is reported from the task itself so it is never lost.
        task = asyncio.ensure_future(
            self._locked_trade(side, user_id, crypto_id, quantity)
        )
        task.add_done_callback(
            functools.partial(self._report, side, user_id, crypto_id, quantity)
        )
        return await asyncio.shield(task)

    def _report(
        self,
        side: TransactionSide,
        user_id: int,
        crypto_id: int,
        quantity: Decimal,
        task: asyncio.Task,
    ) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if isinstance(exc, LedgerError):
            self._log_rejection(side, user_id, crypto_id, quantity, exc)
            return
        if exc is not None:
            logger.error(
                "Trade failed",
                exc_info=exc,
                extra={"side": side.value, "user_id": user_id, "crypto_id": crypto_id},
            )
            return

        result = task.result()
        telemetry.record_trade(result.symbol, side.value, result.quantity, result.total)
        logger.info(
            "Trade executed",
            extra={
                "transaction_id": result.transaction_id,
                "side": side.value,
                "user_id": user_id,
                "crypto_id": crypto_id,
                "symbol": result.symbol,
                "quantity": str(result.quantity),
                "unit_price": str(result.unit_price),
                "total": str(result.total),
                "new_balance": str(result.new_balance),
            },
        )

    def _log_rejection(self, side, user_id, crypto_id, quantity, exc: LedgerError) -> None:
        telemetry.record_rejection(side.value, type(exc).__name__)
        logger.info(
            "Trade rejected",
            extra={
                "side": side.value,
                "user_id": user_id,
                "crypto_id": crypto_id,
                "quantity": str(quantity),
                "reason": type(exc).__name__,
                "detail": str(exc),
            },
        )

    async def _locked_trade(
        self,
        side: TransactionSide,
        user_id: int,
        crypto_id: int,
        quantity: Decimal,
    ) -> TradeResult:
        async with self.locks.hold(user_id):
            async with self._session_factory() as session:
                try:
                    result = await asyncio.wait_for(
                        self._apply(session, side, user_id, crypto_id, quantity),
                        timeout=self._storage_timeout,
                    )
                    await session.commit()
                except LedgerError:
                    await session.rollback()
                    raise
                except (SQLAlchemyError, TimeoutError) as exc:
                    await session.rollback()
                    logger.error(
                        "Trade storage failure",
                        extra={
                            "side": side.value,
                            "user_id": user_id,
                            "crypto_id": crypto_id,
                            "error": repr(exc),
                        },
                    )
                    raise StorageFailure(
                        f"{side.value} could not be confirmed: {exc!r}"
                    ) from exc
        return result

    async def _apply(
        self,
        session: AsyncSession,
        side: TransactionSide,
        user_id: int,
        crypto_id: int,
        quantity: Decimal,
    ) -> TradeResult:
        # Lock first: the balance and holding checks below must read state no
        # other connection can change before commit
        await begin_write(session)
        user = await accounts.lock_user(session, user_id)

        crypto = await catalog.get_price(session, crypto_id)
        # Single price read: the same value validates and is recorded
        unit_price = crypto.current_price

        with localcontext() as ctx:
            ctx.prec = ARITHMETIC_PRECISION
            total = quantity * unit_price

            balance = user.balance
            if side == TransactionSide.BUY:
                if balance < total:
                    raise InsufficientFunds(balance, total)
                new_balance = await accounts.adjust_balance(session, user_id, -total)
            else:
                held = await ledger.holding_of(session, user_id, crypto_id)
                if held < quantity:
                    raise InsufficientHolding(held, quantity)
                new_balance = await accounts.adjust_balance(session, user_id, total)

        record = await ledger.append(
            session,
            user_id=user_id,
            crypto_id=crypto_id,
            side=side,
            quantity=quantity,
            unit_price=unit_price,
            total=total,
        )

        return TradeResult(
            transaction_id=record.id,
            new_balance=new_balance,
            side=side,
            crypto_id=crypto_id,
            symbol=crypto.symbol,
            quantity=quantity,
            unit_price=unit_price,
            total=total,
        )

    async def _read(self, query, *args, **kwargs):
        async with self._session_factory() as session:
            try:
                return await asyncio.wait_for(
                    query(session, *args, **kwargs), timeout=self._storage_timeout
                )
            except (SQLAlchemyError, TimeoutError) as exc:
                raise StorageFailure(f"read failed: {exc!r}") from exc


_default_engine: TradingEngine | None = None


def get_trading_engine() -> TradingEngine:
    """Dependency that provides the process-wide trading engine."""
    global _default_engine
    if _default_engine is None:
        _default_engine = TradingEngine()
    return _default_engine
