"""Tests for the ledger service and derived holdings."""

from decimal import Decimal

import pytest

from cryptoledger.models import TransactionSide
from cryptoledger.services import ledger


async def _record(session, user_id, crypto_id, side, quantity, price="100.00"):
    quantity = Decimal(quantity)
    price = Decimal(price)
    record = await ledger.append(
        session,
        user_id=user_id,
        crypto_id=crypto_id,
        side=side,
        quantity=quantity,
        unit_price=price,
        total=quantity * price,
    )
    await session.commit()
    return record


def test_signed_quantity():
    assert ledger.signed_quantity(TransactionSide.BUY, Decimal("1.5")) == Decimal("1.5")
    assert ledger.signed_quantity(TransactionSide.SELL, Decimal("1.5")) == Decimal("-1.5")


@pytest.mark.asyncio
async def test_append_assigns_increasing_ids(test_session, trader, bitcoin):
    user, _ = trader

    first = await _record(test_session, user.id, bitcoin.id, TransactionSide.BUY, "1")
    second = await _record(test_session, user.id, bitcoin.id, TransactionSide.BUY, "1")

    assert first.id is not None
    assert second.id > first.id
    assert first.created_at is not None


@pytest.mark.asyncio
async def test_append_is_not_committed(test_session, session_factory, trader, bitcoin):
    """append only flushes; a rollback discards the record."""
    user, _ = trader
    user_id = user.id

    await ledger.append(
        test_session,
        user_id=user_id,
        crypto_id=bitcoin.id,
        side=TransactionSide.BUY,
        quantity=Decimal("1"),
        unit_price=Decimal("100.00"),
        total=Decimal("100.00"),
    )
    await test_session.rollback()

    async with session_factory() as other:
        assert await ledger.list_for_user(other, user_id) == []


@pytest.mark.asyncio
async def test_holding_of_never_traded(test_session, trader, bitcoin):
    user, _ = trader
    holding = await ledger.holding_of(test_session, user.id, bitcoin.id)
    assert holding == 0
    assert isinstance(holding, Decimal)


@pytest.mark.asyncio
async def test_holding_is_buys_minus_sells(test_session, trader, bitcoin, ethereum):
    user, _ = trader
    await _record(test_session, user.id, bitcoin.id, TransactionSide.BUY, "2.5")
    await _record(test_session, user.id, bitcoin.id, TransactionSide.SELL, "0.75")
    await _record(test_session, user.id, bitcoin.id, TransactionSide.BUY, "0.00000001")
    await _record(test_session, user.id, ethereum.id, TransactionSide.BUY, "9")

    assert await ledger.holding_of(test_session, user.id, bitcoin.id) == Decimal("1.75000001")
    assert await ledger.holding_of(test_session, user.id, ethereum.id) == Decimal("9")


@pytest.mark.asyncio
async def test_holdings_for_user_keeps_zero_positions(test_session, trader, bitcoin, ethereum):
    user, _ = trader
    await _record(test_session, user.id, ethereum.id, TransactionSide.BUY, "3")
    await _record(test_session, user.id, bitcoin.id, TransactionSide.BUY, "1")
    await _record(test_session, user.id, bitcoin.id, TransactionSide.SELL, "1")

    holdings = await ledger.holdings_for_user(test_session, user.id)

    assert holdings == {ethereum.id: Decimal("3"), bitcoin.id: Decimal("0")}
    assert list(holdings) == [ethereum.id, bitcoin.id]


@pytest.mark.asyncio
async def test_holdings_are_per_user(test_session, trader, admin, bitcoin):
    user, _ = trader
    other, _ = admin
    await _record(test_session, user.id, bitcoin.id, TransactionSide.BUY, "4")

    assert await ledger.holding_of(test_session, other.id, bitcoin.id) == 0
    assert await ledger.holdings_for_user(test_session, other.id) == {}


@pytest.mark.asyncio
async def test_list_for_user_newest_first(test_session, trader, bitcoin, ethereum):
    user, _ = trader
    a = await _record(test_session, user.id, bitcoin.id, TransactionSide.BUY, "1")
    b = await _record(test_session, user.id, ethereum.id, TransactionSide.BUY, "2", "20.50")
    c = await _record(test_session, user.id, bitcoin.id, TransactionSide.SELL, "1")

    records = await ledger.list_for_user(test_session, user.id)
    assert [r.id for r in records] == [c.id, b.id, a.id]
    assert records[1].cryptocurrency.symbol == "ETH"
    assert records[1].total == Decimal("41.00")

    only_btc = await ledger.list_for_user(test_session, user.id, crypto_id=bitcoin.id)
    assert [r.id for r in only_btc] == [c.id, a.id]

    latest = await ledger.list_for_user(test_session, user.id, limit=1)
    assert [r.id for r in latest] == [c.id]
