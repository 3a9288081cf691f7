"""API request/response schemas."""

from chainxchange.api.schemas.account import (
    AccountCreateRequest,
    AccountResponse,
    TradeRequest,
    PositionResponse,
    LedgerEntryResponse,
    TradeResponse,
    HistoryResponse,
)
from chainxchange.api.schemas.portfolio import HoldingResponse, ValuationResponse
from chainxchange.api.schemas.market import MarketListingResponse, CoinResponse, ChartResponse

__all__ = [
    "AccountCreateRequest",
    "AccountResponse",
    "TradeRequest",
    "PositionResponse",
    "LedgerEntryResponse",
    "TradeResponse",
    "HistoryResponse",
    "HoldingResponse",
    "ValuationResponse",
    "MarketListingResponse",
    "CoinResponse",
    "ChartResponse",
]
