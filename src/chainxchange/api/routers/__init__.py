"""API routers package."""

from chainxchange.api.routers.accounts import router as accounts_router
from chainxchange.api.routers.portfolio import router as portfolio_router
from chainxchange.api.routers.market import router as market_router

__all__ = [
    "accounts_router",
    "portfolio_router",
    "market_router",
]
