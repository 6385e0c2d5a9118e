"""Tests for portfolio API endpoints."""

from decimal import Decimal

import pytest


def _auth(api_key):
    return {"X-API-Key": api_key}


async def _buy(client, api_key, crypto_id, quantity):
    response = await client.post(
        "/api/v1/transactions/buy",
        json={"crypto_id": crypto_id, "quantity": quantity},
        headers=_auth(api_key),
    )
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
async def test_portfolio_empty(test_client, trader):
    _, api_key = trader

    response = await test_client.get("/api/v1/portfolio", headers=_auth(api_key))

    assert response.status_code == 200
    assert response.json() == {"holdings": []}


@pytest.mark.asyncio
async def test_portfolio_holdings(test_client, trader, bitcoin, ethereum):
    _, api_key = trader
    await _buy(test_client, api_key, bitcoin.id, "1.5")
    await _buy(test_client, api_key, ethereum.id, "2")

    response = await test_client.get("/api/v1/portfolio", headers=_auth(api_key))

    assert response.status_code == 200
    holdings = response.json()["holdings"]
    assert [h["symbol"] for h in holdings] == ["BTC", "ETH"]
    assert Decimal(holdings[0]["quantity"]) == Decimal("1.5")
    assert Decimal(holdings[0]["current_value"]) == Decimal("150.00")
    assert Decimal(holdings[1]["current_value"]) == Decimal("41.00")


@pytest.mark.asyncio
async def test_portfolio_summary_tracks_price(test_client, trader, admin, bitcoin):
    """Summary values holdings at the latest price."""
    _, api_key = trader
    _, admin_key = admin
    await _buy(test_client, api_key, bitcoin.id, "2")

    response = await test_client.put(
        f"/admin/cryptocurrencies/{bitcoin.id}/price",
        json={"price": "150.00"},
        headers=_auth(admin_key),
    )
    assert response.status_code == 200

    response = await test_client.get("/api/v1/portfolio/summary", headers=_auth(api_key))

    assert response.status_code == 200
    data = response.json()
    assert Decimal(data["cash_balance"]) == Decimal("800.00")
    assert Decimal(data["holdings_value"]) == Decimal("300.00")
    assert Decimal(data["total_value"]) == Decimal("1100.00")
    assert data["positions"] == 1


@pytest.mark.asyncio
async def test_portfolio_requires_auth(test_client):
    response = await test_client.get("/api/v1/portfolio")
    assert response.status_code == 401

    response = await test_client.get("/api/v1/portfolio/summary")
    assert response.status_code == 401
