"""Market data provider protocol."""

from typing import Any, Protocol

from chainxchange.domain.views import Quote


class MarketDataProvider(Protocol):
    """
    Protocol for market data providers.

    Implementations raise UpstreamError (or a subclass) when data cannot be
    obtained; fallbacks are the caller's decision.
    """

    def get_prices(self, asset_ids: list[str]) -> dict[str, Quote]:
        """
        Fetch current USD prices for several assets in one call.

        Returns dict mapping asset_id -> Quote. Unknown assets are omitted.
        """
        ...

    def get_markets(self, page: int = 1, per_page: int = 100) -> list[dict[str, Any]]:
        """List coins ordered by market cap."""
        ...

    def get_coin(self, asset_id: str) -> dict[str, Any]:
        """Return display metadata (id, name, symbol, image) for an asset."""
        ...

    def get_market_chart(self, asset_id: str, days: int) -> list[list[float]]:
        """Return [timestamp_ms, price] pairs covering the last ``days`` days."""
        ...
