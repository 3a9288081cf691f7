"""Domain models package."""

from chainxchange.domain.models.enums import TradeSide, HistorySortField, SortOrder
from chainxchange.domain.models.account import Account
from chainxchange.domain.models.position import Position
from chainxchange.domain.models.ledger_entry import LedgerEntry
from chainxchange.domain.models.market import CacheEntry, FetchTask

__all__ = [
    "TradeSide",
    "HistorySortField",
    "SortOrder",
    "Account",
    "Position",
    "LedgerEntry",
    "CacheEntry",
    "FetchTask",
]
