"""Tests for admin API endpoints."""

from decimal import Decimal

import pytest


def _auth(api_key):
    return {"X-API-Key": api_key}


# ============================================================================
# Access Tests
# ============================================================================


@pytest.mark.asyncio
async def test_admin_requires_api_key(test_client):
    response = await test_client.get("/admin/users")

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_admin_rejects_trader(test_client, trader):
    """Test that a non-admin key returns 403."""
    _, api_key = trader

    response = await test_client.get("/admin/users", headers=_auth(api_key))

    assert response.status_code == 403
    assert response.json()["detail"] == "Admin privileges required"


# ============================================================================
# Cryptocurrency Endpoint Tests
# ============================================================================


@pytest.mark.asyncio
async def test_create_cryptocurrency(test_client, admin):
    """Test listing a cryptocurrency with valid data."""
    _, admin_key = admin

    response = await test_client.post(
        "/admin/cryptocurrencies",
        json={
            "symbol": "sol",  # Should be uppercased
            "name": "Solana",
            "current_price": "142.17",
        },
        headers=_auth(admin_key),
    )

    assert response.status_code == 201
    data = response.json()
    assert data["symbol"] == "SOL"
    assert data["name"] == "Solana"
    assert Decimal(data["current_price"]) == Decimal("142.17")

    listed = await test_client.get("/api/v1/cryptocurrencies")
    assert [c["symbol"] for c in listed.json()["cryptocurrencies"]] == ["SOL"]


@pytest.mark.asyncio
async def test_create_cryptocurrency_duplicate(test_client, admin, bitcoin):
    """Test that a duplicate symbol returns 409."""
    _, admin_key = admin

    response = await test_client.post(
        "/admin/cryptocurrencies",
        json={"symbol": "btc", "name": "Bitcoin Again", "current_price": "1"},
        headers=_auth(admin_key),
    )

    assert response.status_code == 409
    assert "already exists" in response.json()["detail"]


@pytest.mark.asyncio
async def test_create_cryptocurrency_non_positive_price(test_client, admin):
    """Test that a zero price returns 422."""
    _, admin_key = admin

    response = await test_client.post(
        "/admin/cryptocurrencies",
        json={"symbol": "BAD", "name": "Bad Coin", "current_price": "0"},
        headers=_auth(admin_key),
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_set_price(test_client, admin, bitcoin):
    _, admin_key = admin

    response = await test_client.put(
        f"/admin/cryptocurrencies/{bitcoin.id}/price",
        json={"price": "68000.12345678"},
        headers=_auth(admin_key),
    )

    assert response.status_code == 200
    assert Decimal(response.json()["current_price"]) == Decimal("68000.12345678")

    public = await test_client.get(f"/api/v1/cryptocurrencies/{bitcoin.id}")
    assert Decimal(public.json()["current_price"]) == Decimal("68000.12345678")


@pytest.mark.asyncio
async def test_set_price_unknown(test_client, admin):
    _, admin_key = admin

    response = await test_client.put(
        "/admin/cryptocurrencies/999/price",
        json={"price": "1.00"},
        headers=_auth(admin_key),
    )

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_set_price_by_trader_forbidden(test_client, trader, bitcoin):
    _, api_key = trader

    response = await test_client.put(
        f"/admin/cryptocurrencies/{bitcoin.id}/price",
        json={"price": "1.00"},
        headers=_auth(api_key),
    )

    assert response.status_code == 403


# ============================================================================
# User Endpoint Tests
# ============================================================================


@pytest.mark.asyncio
async def test_create_user(test_client, admin):
    """Test creating a user with an explicit balance."""
    _, admin_key = admin

    response = await test_client.post(
        "/admin/users",
        json={
            "name": "Frank",
            "email": "frank@example.com",
            "password": "frank-pw",
            "initial_balance": "250.50",
        },
        headers=_auth(admin_key),
    )

    assert response.status_code == 201
    data = response.json()
    assert data["email"] == "frank@example.com"
    assert Decimal(data["balance"]) == Decimal("250.50")
    assert data["is_admin"] is False
    assert data["api_key"].startswith("sk_")


@pytest.mark.asyncio
async def test_create_user_default_balance_is_zero(test_client, admin):
    _, admin_key = admin

    response = await test_client.post(
        "/admin/users",
        json={"name": "Gina", "email": "gina@example.com", "password": "gina-pw"},
        headers=_auth(admin_key),
    )

    assert response.status_code == 201
    assert Decimal(response.json()["balance"]) == Decimal("0")


@pytest.mark.asyncio
async def test_create_user_duplicate(test_client, admin, trader):
    _, admin_key = admin

    response = await test_client.post(
        "/admin/users",
        json={"name": "Alice", "email": "alice@example.com", "password": "password"},
        headers=_auth(admin_key),
    )

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_list_users(test_client, admin, trader):
    """Test listing users, oldest first."""
    _, admin_key = admin

    response = await test_client.get("/admin/users", headers=_auth(admin_key))

    assert response.status_code == 200
    data = response.json()
    assert [u["email"] for u in data] == ["root@example.com", "alice@example.com"]
    assert data[0]["is_admin"] is True
    assert all(u["is_active"] for u in data)


@pytest.mark.asyncio
async def test_deactivate_user(test_client, admin, trader, bitcoin):
    """A deactivated user keeps their history but can no longer trade."""
    _, admin_key = admin
    user, api_key = trader

    response = await test_client.post(
        f"/admin/users/{user.id}/deactivate", headers=_auth(admin_key)
    )

    assert response.status_code == 200
    assert response.json()["is_active"] is False

    trade = await test_client.post(
        "/api/v1/transactions/buy",
        json={"crypto_id": bitcoin.id, "quantity": "1"},
        headers=_auth(api_key),
    )
    assert trade.status_code == 403

    login = await test_client.post(
        "/api/v1/login",
        json={"email": "alice@example.com", "password": "correct-horse"},
    )
    assert login.status_code == 403


@pytest.mark.asyncio
async def test_deactivate_unknown_user(test_client, admin):
    _, admin_key = admin

    response = await test_client.post("/admin/users/999/deactivate", headers=_auth(admin_key))

    assert response.status_code == 404
