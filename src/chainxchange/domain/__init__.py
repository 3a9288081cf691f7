"""Domain layer - pure business models with no external dependencies."""

from chainxchange.domain.models import (
    Account,
    Position,
    LedgerEntry,
    CacheEntry,
    FetchTask,
    TradeSide,
    HistorySortField,
    SortOrder,
)

__all__ = [
    "Account",
    "Position",
    "LedgerEntry",
    "CacheEntry",
    "FetchTask",
    "TradeSide",
    "HistorySortField",
    "SortOrder",
]
