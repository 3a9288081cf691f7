"""Market data endpoints."""

from fastapi import APIRouter, Depends, Query

from chainxchange.api.deps import get_market_service
from chainxchange.api.schemas import ChartResponse, CoinResponse, MarketListingResponse
from chainxchange.services import MarketService

router = APIRouter(prefix="/market", tags=["market"])


@router.get("/coins", response_model=MarketListingResponse)
def list_coins(
    page: int = Query(1, ge=1),
    per_page: int = Query(100, ge=1, le=250),
    market: MarketService = Depends(get_market_service),
) -> MarketListingResponse:
    """Coins by market cap, or fallback coins when live data is unavailable."""
    listing = market.list_markets(page=page, per_page=per_page)
    return MarketListingResponse(
        coins=listing.coins,
        degraded=listing.degraded,
        message=listing.message,
    )


@router.get("/coins/{asset_id}", response_model=CoinResponse)
def get_coin(
    asset_id: str,
    market: MarketService = Depends(get_market_service),
) -> CoinResponse:
    """Display metadata for a coin."""
    return CoinResponse(**market.get_coin(asset_id))


@router.get("/coins/{asset_id}/chart", response_model=ChartResponse)
def get_chart(
    asset_id: str,
    days: int = Query(7, ge=1, le=3650),
    market: MarketService = Depends(get_market_service),
) -> ChartResponse:
    """Price history; generated data when live data is unavailable."""
    chart = market.get_chart(asset_id, days)
    return ChartResponse(
        asset_id=chart.asset_id,
        days=chart.days,
        prices=chart.prices,
        degraded=chart.degraded,
    )
