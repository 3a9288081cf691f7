"""View models for service outputs."""

from chainxchange.domain.views.portfolio import (
    Quote,
    TradeResult,
    HoldingValuation,
    PortfolioValuation,
    MarketListing,
    ChartView,
)

__all__ = [
    "Quote",
    "TradeResult",
    "HoldingValuation",
    "PortfolioValuation",
    "MarketListing",
    "ChartView",
]
