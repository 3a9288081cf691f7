"""Pydantic schemas for portfolio valuation."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel


class HoldingResponse(BaseModel):
    """A single holding valued at the current price."""

    asset_id: str
    quantity: Decimal
    average_cost: Decimal
    current_price: Decimal
    current_value: Decimal
    invested: Decimal
    profit_loss: Decimal
    profit_loss_pct: Decimal
    change_24h: Decimal
    live_price: bool


class ValuationResponse(BaseModel):
    """Portfolio valuation; degraded means prices fell back to cost basis."""

    user_id: str
    holdings: list[HoldingResponse]
    total_value: Decimal
    total_invested: Decimal
    total_profit_loss: Decimal
    total_profit_loss_pct: Decimal
    cash_balance: Decimal
    degraded: bool
    as_of: Optional[datetime] = None
