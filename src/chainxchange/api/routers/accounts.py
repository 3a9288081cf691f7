"""Account, trade and history endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from chainxchange.api.deps import get_ledger
from chainxchange.api.schemas import (
    AccountCreateRequest,
    AccountResponse,
    HistoryResponse,
    LedgerEntryResponse,
    PositionResponse,
    TradeRequest,
    TradeResponse,
)
from chainxchange.domain.models import Account, LedgerEntry
from chainxchange.domain.views import TradeResult
from chainxchange.services import PortfolioLedger

router = APIRouter(prefix="/accounts", tags=["accounts"])


def _account_out(account: Account) -> AccountResponse:
    return AccountResponse(
        user_id=account.user_id,
        cash_balance=account.cash_balance,
        created_at=account.created_at,
    )


def _entry_out(entry: LedgerEntry) -> LedgerEntryResponse:
    return LedgerEntryResponse(
        entry_id=entry.entry_id,
        asset_id=entry.asset_id,
        side=entry.side.value,
        quantity=entry.quantity,
        price=entry.price,
        total=entry.total,
        timestamp=entry.timestamp,
    )


def _trade_out(result: TradeResult) -> TradeResponse:
    position = None
    if result.position is not None:
        position = PositionResponse(
            asset_id=result.position.asset_id,
            quantity=result.position.quantity,
            average_cost=result.position.average_cost,
        )
    return TradeResponse(
        entry=_entry_out(result.entry),
        cash_balance=result.cash_balance,
        position=position,
    )


@router.post("/", response_model=AccountResponse, status_code=status.HTTP_201_CREATED)
def open_account(
    data: AccountCreateRequest,
    ledger: PortfolioLedger = Depends(get_ledger),
) -> AccountResponse:
    """Open a funded simulation account."""
    return _account_out(ledger.open_account(data.user_id, initial_cash=data.initial_cash))


@router.get("/{user_id}", response_model=AccountResponse)
def get_account(
    user_id: str,
    ledger: PortfolioLedger = Depends(get_ledger),
) -> AccountResponse:
    """Get an account's cash balance."""
    return _account_out(ledger.get_account(user_id))


@router.get("/{user_id}/positions", response_model=list[PositionResponse])
def list_positions(
    user_id: str,
    ledger: PortfolioLedger = Depends(get_ledger),
) -> list[PositionResponse]:
    """List held positions without pricing them."""
    ledger.get_account(user_id)
    return [
        PositionResponse(asset_id=p.asset_id, quantity=p.quantity, average_cost=p.average_cost)
        for p in ledger.list_positions(user_id)
    ]


@router.post("/{user_id}/buy", response_model=TradeResponse)
def buy(
    user_id: str,
    data: TradeRequest,
    ledger: PortfolioLedger = Depends(get_ledger),
) -> TradeResponse:
    """Buy at the caller's quoted price."""
    return _trade_out(ledger.buy(user_id, data.asset_id, data.quantity, data.price))


@router.post("/{user_id}/sell", response_model=TradeResponse)
def sell(
    user_id: str,
    data: TradeRequest,
    ledger: PortfolioLedger = Depends(get_ledger),
) -> TradeResponse:
    """Sell at the caller's quoted price."""
    return _trade_out(ledger.sell(user_id, data.asset_id, data.quantity, data.price))


@router.get("/{user_id}/history", response_model=HistoryResponse)
def get_history(
    user_id: str,
    side: Optional[str] = Query(None, alias="type", description="buy, sell or all"),
    sort_by: Optional[str] = Query(None, description="timestamp, side, price, quantity or total"),
    order: Optional[str] = Query(None, description="asc or desc (default)"),
    ledger: PortfolioLedger = Depends(get_ledger),
) -> HistoryResponse:
    """Transaction history with filtering and sorting."""
    ledger.get_account(user_id)
    entries = ledger.history(user_id, side=side, sort_by=sort_by, order=order)
    return HistoryResponse(
        entries=[_entry_out(e) for e in entries],
        side=side or "all",
        sort_by=sort_by or "timestamp",
        order=order or "desc",
    )
