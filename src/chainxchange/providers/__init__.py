"""Market data providers module."""

from chainxchange.providers.market_data_provider import MarketDataProvider
from chainxchange.providers.coingecko_provider import CoinGeckoProvider
from chainxchange.providers.stub_provider import StubMarketDataProvider

__all__ = [
    "MarketDataProvider",
    "CoinGeckoProvider",
    "StubMarketDataProvider",
]
