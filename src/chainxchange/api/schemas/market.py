"""Pydantic schemas for market endpoints."""

from typing import Any, Optional

from pydantic import BaseModel


class MarketListingResponse(BaseModel):
    """Coin listing; degraded when served from the fallback list."""

    coins: list[dict[str, Any]]
    degraded: bool
    message: Optional[str] = None


class CoinResponse(BaseModel):
    """Display metadata for a coin."""

    id: str
    name: str
    symbol: str
    image: str


class ChartResponse(BaseModel):
    """Price series as [timestamp_ms, price] pairs; degraded when generated."""

    asset_id: str
    days: int
    prices: list[list[float]]
    degraded: bool
