"""Market listing and chart lookups with named fallbacks."""

import logging
import random
from typing import Any, Optional

from chainxchange.core.exceptions import UpstreamError, ValidationError
from chainxchange.domain.views import ChartView, MarketListing
from chainxchange.providers.market_data_provider import MarketDataProvider
from chainxchange.providers.stub_provider import base_price_for, generate_mock_chart

logger = logging.getLogger(__name__)

FALLBACK_COINS: list[dict[str, Any]] = [
    {"id": "bitcoin", "symbol": "btc", "name": "Bitcoin", "current_price": 45000},
    {"id": "ethereum", "symbol": "eth", "name": "Ethereum", "current_price": 3000},
]

FALLBACK_MESSAGE = "Using fallback data - live prices temporarily unavailable"
DEFAULT_COIN_IMAGE = "/images/default-coin.svg"


class MarketService:
    """
    Read-only market views for display.

    When the provider is unavailable these return placeholder data marked
    ``degraded`` instead of raising: a fixed coin list for the market
    listing, a generated series for charts, and ID-derived metadata for coins.
    """

    def __init__(self, provider: MarketDataProvider, rng: Optional[random.Random] = None):
        self._provider = provider
        self._rng = rng or random.Random()

    def list_markets(self, page: int = 1, per_page: int = 100) -> MarketListing:
        """Coins by market cap, or the fallback list."""
        if page < 1 or not 1 <= per_page <= 250:
            raise ValidationError("page must be >= 1 and per_page between 1 and 250")

        try:
            coins = self._provider.get_markets(page=page, per_page=per_page)
        except UpstreamError as exc:
            logger.warning("Market listing unavailable, using fallback coins: %s", exc.message)
            return self._fallback_listing()

        if not coins:
            logger.error("No coins received from provider, using fallback coins")
            return self._fallback_listing()
        return MarketListing(coins=coins)

    def get_coin(self, asset_id: str) -> dict[str, Any]:
        """Display metadata for a coin, derived from its ID when unavailable."""
        asset_id = self._require_asset_id(asset_id)
        try:
            return self._provider.get_coin(asset_id)
        except UpstreamError as exc:
            logger.warning("Coin info for %s unavailable: %s", asset_id, exc.message)
            return {
                "id": asset_id,
                "name": asset_id[:1].upper() + asset_id[1:],
                "symbol": asset_id.upper()[:4],
                "image": DEFAULT_COIN_IMAGE,
            }

    def get_chart(self, asset_id: str, days: int = 7) -> ChartView:
        """Price history, or a generated series around the coin's reference price."""
        asset_id = self._require_asset_id(asset_id)
        if days < 1:
            raise ValidationError("days must be at least 1")

        try:
            prices = self._provider.get_market_chart(asset_id, days)
            return ChartView(asset_id=asset_id, days=days, prices=prices)
        except UpstreamError as exc:
            logger.warning("Chart for %s unavailable, generating mock data: %s", asset_id, exc.message)

        prices = generate_mock_chart(float(base_price_for(asset_id)), days, rng=self._rng)
        return ChartView(asset_id=asset_id, days=days, prices=prices, degraded=True)

    @staticmethod
    def _fallback_listing() -> MarketListing:
        return MarketListing(
            coins=[dict(coin) for coin in FALLBACK_COINS],
            degraded=True,
            message=FALLBACK_MESSAGE,
        )

    @staticmethod
    def _require_asset_id(asset_id: str) -> str:
        if not asset_id or not asset_id.strip():
            raise ValidationError("asset_id is required")
        return asset_id.strip().lower()
