"""Enumerations for domain models."""

from enum import Enum


class TradeSide(str, Enum):
    """Direction of a ledger mutation."""

    BUY = "buy"
    SELL = "sell"


class HistorySortField(str, Enum):
    """Ledger entry fields that transaction history may be sorted by."""

    TIMESTAMP = "timestamp"
    SIDE = "side"
    PRICE = "price"
    QUANTITY = "quantity"
    TOTAL = "total"


class SortOrder(str, Enum):
    """Sort direction."""

    ASC = "asc"
    DESC = "desc"
