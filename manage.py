#!/usr/bin/env python3
"""
Management script for the crypto ledger.

Usage (via API):
    python manage.py cryptos show [--base-url http://localhost:8000]

Usage (direct DB access):
    python manage.py db cryptos load [-f data/cryptocurrencies.json]
    python manage.py db cryptos show
    python manage.py db cryptos set-price BTC 68000.00
    python manage.py db users create-admin --name Admin --email admin@example.com
    python manage.py db users promote admin@example.com
    python manage.py db clear
    python manage.py db status
"""

import asyncio
import json
from decimal import Decimal
from pathlib import Path

import click
import httpx
from sqlalchemy import func, select

from cryptoledger.database import AsyncSessionLocal, Base, engine
from cryptoledger.errors import LedgerError
from cryptoledger.models import Cryptocurrency, Transaction, User
from cryptoledger.services import accounts, catalog


DEFAULT_BASE_URL = "http://localhost:8000"


# ============================================================================
# Direct database operations (internal)
# ============================================================================


async def _init_db():
    """Initialize the database tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def _clear_db():
    """Drop and recreate all tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


async def _db_load_cryptos(filepath: Path):
    """Load cryptocurrencies from a JSON file directly to DB."""
    with open(filepath) as f:
        cryptos_data = json.load(f)

    async with AsyncSessionLocal() as session:
        loaded = 0
        skipped = 0

        for data in cryptos_data:
            if await catalog.get_by_symbol(session, data["symbol"]):
                skipped += 1
                click.echo(f"  Skipped {data['symbol']} (already exists)")
                continue

            await catalog.create_cryptocurrency(
                session, data["symbol"], data["name"], Decimal(data["current_price"])
            )
            loaded += 1
            click.echo(f"  Loaded {data['symbol']}: {data['name']}")

    return loaded, skipped


async def _db_show_cryptos():
    """Show the catalog from DB."""
    async with AsyncSessionLocal() as session:
        return await catalog.list_cryptocurrencies(session)


async def _db_set_price(symbol: str, price: Decimal):
    async with AsyncSessionLocal() as session:
        crypto = await catalog.get_by_symbol(session, symbol)
        if crypto is None:
            raise click.ClickException(f"Unknown symbol: {symbol.upper()}")
        return await catalog.set_price(session, crypto.id, price)


async def _db_create_admin(name: str, email: str, password: str, balance: Decimal):
    async with AsyncSessionLocal() as session:
        return await accounts.register_user(
            session, name, email, password, initial_balance=balance, is_admin=True
        )


async def _db_promote(email: str):
    async with AsyncSessionLocal() as session:
        user = await accounts.get_user_by_email(session, email)
        if user is None:
            raise click.ClickException(f"No user with email {email}")
        return await accounts.set_admin(session, user.id)


async def _count_records():
    """Count records in each table."""
    async with AsyncSessionLocal() as session:
        counts = {}
        for model, name in [
            (Cryptocurrency, "cryptocurrencies"),
            (User, "users"),
            (Transaction, "transactions"),
        ]:
            result = await session.execute(select(func.count()).select_from(model))
            counts[name] = result.scalar_one()
        return counts


def _print_catalog(rows):
    click.echo(f"\n{'ID':>4} {'Symbol':<8} {'Name':<24} {'Price':>18}")
    click.echo("-" * 58)
    for row in rows:
        click.echo(f"{row['id']:>4} {row['symbol']:<8} {row['name']:<24} {row['current_price']:>18}")
    click.echo(f"\nTotal: {len(rows)} cryptocurrencies")


# ============================================================================
# API operations
# ============================================================================


def _api_show_cryptos(base_url: str):
    """Get the catalog via API."""
    with httpx.Client(base_url=base_url, timeout=30) as client:
        response = client.get("/api/v1/cryptocurrencies")
        if response.status_code == 404:
            raise click.ClickException(
                f"Endpoint not found. Is the Crypto Ledger API running at {base_url}?"
            )
        response.raise_for_status()
        return response.json()["cryptocurrencies"]


# ============================================================================
# CLI: Main group
# ============================================================================


@click.group()
def cli():
    """Crypto ledger management commands."""
    pass


# ============================================================================
# CLI: cryptos (via API)
# ============================================================================


@cli.group()
def cryptos():
    """Inspect the catalog (via API)."""
    pass


@cryptos.command("show")
@click.option(
    "--base-url", "-u",
    default=DEFAULT_BASE_URL,
    help=f"API base URL (default: {DEFAULT_BASE_URL})",
)
def cryptos_show(base_url):
    """Show the catalog via API."""
    try:
        rows = _api_show_cryptos(base_url)
    except httpx.ConnectError:
        click.echo(f"\nError: Could not connect to {base_url}", err=True)
        click.echo("Is the server running? Start it with: uvicorn cryptoledger.main:app", err=True)
        raise SystemExit(1)

    if not rows:
        click.echo("No cryptocurrencies found.")
        return
    _print_catalog(rows)


# ============================================================================
# CLI: db (direct database access)
# ============================================================================


@cli.group()
def db():
    """Direct database management (bypasses API)."""
    pass


@db.command("clear")
@click.confirmation_option(prompt="Are you sure you want to clear all data?")
def db_clear():
    """Clear all data from the database (destructive!)."""
    click.echo("Clearing database...")
    asyncio.run(_clear_db())
    click.echo("Database cleared and tables recreated.")


@db.command("status")
def db_status():
    """Show database status and record counts."""

    async def run():
        await _init_db()
        return await _count_records()

    counts = asyncio.run(run())

    click.echo("\nDatabase Status:")
    click.echo("-" * 30)
    for table, count in counts.items():
        click.echo(f"  {table:<17} {count:>10,}")
    click.echo("-" * 30)
    click.echo(f"  {'Total':<17} {sum(counts.values()):>10,}")


# ============================================================================
# CLI: db cryptos (direct database access for the catalog)
# ============================================================================


@db.group("cryptos")
def db_cryptos():
    """Manage the catalog directly in database."""
    pass


@db_cryptos.command("load")
@click.option(
    "--file", "-f",
    default="data/cryptocurrencies.json",
    type=click.Path(exists=True),
    help="JSON file with cryptocurrency data",
)
def db_cryptos_load(file):
    """Load cryptocurrencies from a JSON file directly to database."""
    click.echo(f"Loading cryptocurrencies from {file} (direct DB)...")

    async def run():
        await _init_db()
        return await _db_load_cryptos(Path(file))

    loaded, skipped = asyncio.run(run())
    click.echo(f"\nDone: {loaded} loaded, {skipped} skipped")


@db_cryptos.command("show")
def db_cryptos_show():
    """Show the catalog from database."""

    async def run():
        await _init_db()
        return await _db_show_cryptos()

    rows = asyncio.run(run())

    if not rows:
        click.echo("No cryptocurrencies found.")
        return
    _print_catalog(
        [
            {"id": c.id, "symbol": c.symbol, "name": c.name, "current_price": str(c.current_price)}
            for c in rows
        ]
    )


@db_cryptos.command("set-price")
@click.argument("symbol")
@click.argument("price")
def db_cryptos_set_price(symbol, price):
    """Set the current price of SYMBOL."""

    async def run():
        await _init_db()
        return await _db_set_price(symbol, Decimal(price))

    try:
        crypto = asyncio.run(run())
    except LedgerError as e:
        raise click.ClickException(str(e))
    click.echo(f"{crypto.symbol} now priced at {crypto.current_price}")


# ============================================================================
# CLI: db users
# ============================================================================


@db.group("users")
def db_users():
    """Manage users directly in database."""
    pass


@db_users.command("create-admin")
@click.option("--name", required=True, help="Display name")
@click.option("--email", required=True, help="Login email")
@click.password_option()
@click.option("--balance", default="0.00", help="Starting cash balance")
def db_users_create_admin(name, email, password, balance):
    """Create an admin user and print its API key."""

    async def run():
        await _init_db()
        return await _db_create_admin(name, email, password, Decimal(balance))

    try:
        user, api_key = asyncio.run(run())
    except LedgerError as e:
        raise click.ClickException(str(e))
    click.echo(f"Created admin {user.email} (id={user.id})")
    click.echo(f"API key (store it now, it cannot be retrieved later): {api_key}")


@db_users.command("promote")
@click.argument("email")
def db_users_promote(email):
    """Grant admin privileges to the user with EMAIL."""

    async def run():
        await _init_db()
        return await _db_promote(email)

    user = asyncio.run(run())
    click.echo(f"{user.email} is now an admin")


if __name__ == "__main__":
    cli()
