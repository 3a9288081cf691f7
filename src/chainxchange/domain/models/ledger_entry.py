"""Ledger entry domain model."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from chainxchange.domain.models.enums import TradeSide


@dataclass(frozen=True)
class LedgerEntry:
    """
    Append-only audit record of one committed buy or sell.

    total is fixed at write time as quantity x price and is never recomputed.
    """

    entry_id: str
    user_id: str
    asset_id: str
    side: TradeSide
    quantity: Decimal
    price: Decimal
    total: Decimal
    timestamp: datetime

    def __post_init__(self) -> None:
        if isinstance(self.side, str) and not isinstance(self.side, TradeSide):
            object.__setattr__(self, "side", TradeSide(self.side))

    @property
    def is_buy(self) -> bool:
        """Return True for buy entries."""
        return self.side == TradeSide.BUY
