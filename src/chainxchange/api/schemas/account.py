"""Pydantic schemas for account and trade endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel


class AccountCreateRequest(BaseModel):
    """Request schema for opening an account."""

    user_id: str
    initial_cash: Optional[Decimal] = None


class AccountResponse(BaseModel):
    """Response schema for an account."""

    user_id: str
    cash_balance: Decimal
    created_at: Optional[datetime] = None


class TradeRequest(BaseModel):
    """Request schema for a buy or sell at the caller's quoted price."""

    asset_id: str
    quantity: Decimal
    price: Decimal


class PositionResponse(BaseModel):
    """Response schema for a held position."""

    asset_id: str
    quantity: Decimal
    average_cost: Decimal


class LedgerEntryResponse(BaseModel):
    """Response schema for a ledger entry."""

    entry_id: str
    asset_id: str
    side: str
    quantity: Decimal
    price: Decimal
    total: Decimal
    timestamp: datetime


class TradeResponse(BaseModel):
    """Response schema for a committed trade. position is null after full liquidation."""

    entry: LedgerEntryResponse
    cash_balance: Decimal
    position: Optional[PositionResponse] = None


class HistoryResponse(BaseModel):
    """Response schema for transaction history."""

    entries: list[LedgerEntryResponse]
    side: str
    sort_by: str
    order: str
