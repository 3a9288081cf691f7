"""View models for service outputs."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from chainxchange.domain.models import LedgerEntry, Position


@dataclass
class Quote:
    """Current market quote for an asset."""

    asset_id: str
    price: Decimal
    change_24h: Decimal = field(default_factory=lambda: Decimal("0"))
    as_of: Optional[datetime] = None


@dataclass
class TradeResult:
    """Outcome of a committed buy or sell."""

    entry: LedgerEntry
    cash_balance: Decimal
    position: Optional[Position] = None  # None after full liquidation


@dataclass
class HoldingValuation:
    """A single position joined against its current price."""

    asset_id: str
    quantity: Decimal
    average_cost: Decimal
    current_price: Decimal
    current_value: Decimal
    invested: Decimal
    profit_loss: Decimal
    profit_loss_pct: Decimal
    change_24h: Decimal = field(default_factory=lambda: Decimal("0"))
    live_price: bool = True


@dataclass
class PortfolioValuation:
    """Per-holding and aggregate unrealized profit/loss for one user."""

    user_id: str
    holdings: list[HoldingValuation] = field(default_factory=list)
    total_value: Decimal = field(default_factory=lambda: Decimal("0"))
    total_invested: Decimal = field(default_factory=lambda: Decimal("0"))
    total_profit_loss: Decimal = field(default_factory=lambda: Decimal("0"))
    total_profit_loss_pct: Decimal = field(default_factory=lambda: Decimal("0"))
    cash_balance: Decimal = field(default_factory=lambda: Decimal("0"))
    degraded: bool = False
    as_of: Optional[datetime] = None


@dataclass
class MarketListing:
    """Coin market listing, possibly served from the fixed fallback list."""

    coins: list[dict[str, Any]] = field(default_factory=list)
    degraded: bool = False
    message: Optional[str] = None


@dataclass
class ChartView:
    """Price series for an asset as [timestamp_ms, price] pairs."""

    asset_id: str
    days: int
    prices: list[list[float]] = field(default_factory=list)
    degraded: bool = False
