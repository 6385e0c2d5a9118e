"""API routers."""

from cryptoledger.routers.admin import router as admin_router
from cryptoledger.routers.portfolio import router as portfolio_router
from cryptoledger.routers.public import router as public_router
from cryptoledger.routers.trader import router as trader_router

__all__ = ["admin_router", "portfolio_router", "public_router", "trader_router"]
