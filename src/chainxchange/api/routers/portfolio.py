"""Portfolio valuation endpoint."""

from fastapi import APIRouter, Depends

from chainxchange.api.deps import get_valuation_engine
from chainxchange.api.schemas import HoldingResponse, ValuationResponse
from chainxchange.services import ValuationEngine

router = APIRouter(prefix="/accounts", tags=["portfolio"])


@router.get("/{user_id}/portfolio", response_model=ValuationResponse)
def get_portfolio(
    user_id: str,
    valuation: ValuationEngine = Depends(get_valuation_engine),
) -> ValuationResponse:
    """Holdings with unrealized profit/loss at current prices."""
    result = valuation.valuate(user_id)
    return ValuationResponse(
        user_id=result.user_id,
        holdings=[
            HoldingResponse(
                asset_id=h.asset_id,
                quantity=h.quantity,
                average_cost=h.average_cost,
                current_price=h.current_price,
                current_value=h.current_value,
                invested=h.invested,
                profit_loss=h.profit_loss,
                profit_loss_pct=h.profit_loss_pct,
                change_24h=h.change_24h,
                live_price=h.live_price,
            )
            for h in result.holdings
        ],
        total_value=result.total_value,
        total_invested=result.total_invested,
        total_profit_loss=result.total_profit_loss,
        total_profit_loss_pct=result.total_profit_loss_pct,
        cash_balance=result.cash_balance,
        degraded=result.degraded,
        as_of=result.as_of,
    )
