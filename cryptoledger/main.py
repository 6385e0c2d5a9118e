"""
FastAPI application entry point.

Run with: uvicorn cryptoledger.main:app --reload
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, UTC

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cryptoledger import telemetry
from cryptoledger._version import VERSION
from cryptoledger.config import CORS_ORIGINS, is_production
from cryptoledger.database import close_db, init_db

# Import models to ensure they're registered with SQLAlchemy
from cryptoledger.models import Cryptocurrency, Transaction, User  # noqa: F401
from cryptoledger.routers import admin_router, portfolio_router, public_router, trader_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler.

    Startup: Create database tables if they don't exist, initialize telemetry.
    Shutdown: Release the database connection pool.
    """
    # Startup
    await init_db()
    print("Database initialized")

    if telemetry.setup_telemetry():
        # Attach OTLP handler to root logger for log export
        handler = telemetry.get_log_handler()
        if handler:
            logging.getLogger().addHandler(handler)
            logging.getLogger().setLevel(logging.INFO)
        print("Telemetry initialized (OTLP metrics + logs enabled)")
    else:
        print("Telemetry disabled")

    yield

    # Shutdown
    await close_db()
    print("Application shutting down")


# Create FastAPI application
app = FastAPI(
    title="Crypto Ledger API",
    description="Simulated cryptocurrency trading against an append-only ledger",
    version=VERSION,
    lifespan=lifespan,
)

# Any origin outside production, the configured allow-list in production
if is_production():
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With", "X-API-Key"],
    )
else:
    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex=".*",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


# Register routers
# Admin routes stay at /admin (no API versioning for admin)
app.include_router(admin_router, prefix="/admin", tags=["admin"])
# Public, trader and portfolio routes under /api/v1
app.include_router(public_router, prefix="/api/v1", tags=["public"])
app.include_router(trader_router, prefix="/api/v1", tags=["trader"])
app.include_router(portfolio_router, prefix="/api/v1", tags=["portfolio"])


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok", "timestamp": datetime.now(UTC).isoformat()}


@app.get("/api/version")
async def get_version():
    """Get API version information."""
    return {
        "version": VERSION,
        "api_version": "v1",
    }
