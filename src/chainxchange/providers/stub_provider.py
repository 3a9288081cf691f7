"""Stub market data provider for offline/testing use, plus mock chart generation."""

import random
from decimal import Decimal
from typing import Any, Optional

from chainxchange.core.timezone import now_utc
from chainxchange.domain.views import Quote

# Reference USD prices for common coins
BASE_PRICES: dict[str, Decimal] = {
    "bitcoin": Decimal("65000"),
    "ethereum": Decimal("3500"),
    "binancecoin": Decimal("600"),
    "ripple": Decimal("0.6"),
    "cardano": Decimal("0.5"),
    "solana": Decimal("150"),
    "dogecoin": Decimal("0.1"),
    "matic-network": Decimal("1.2"),
    "avalanche-2": Decimal("35"),
    "chainlink": Decimal("12"),
    "litecoin": Decimal("85"),
    "bitcoin-cash": Decimal("140"),
    "stellar": Decimal("0.12"),
    "vechain": Decimal("0.03"),
    "filecoin": Decimal("6"),
    "tron": Decimal("0.08"),
    "ethereum-classic": Decimal("22"),
    "monero": Decimal("160"),
    "algorand": Decimal("0.2"),
    "cosmos": Decimal("8"),
}

DEFAULT_BASE_PRICE = Decimal("100")

_HOUR_MS = 60 * 60 * 1000
_DAY_MS = 24 * _HOUR_MS


def base_price_for(asset_id: str) -> Decimal:
    """Reference price for a coin, $100 for unknown ones."""
    return BASE_PRICES.get(asset_id.lower(), DEFAULT_BASE_PRICE)


def generate_mock_chart(
    base_price: float,
    days: int,
    rng: Optional[random.Random] = None,
    now_ms: Optional[int] = None,
) -> list[list[float]]:
    """
    Generate a plausible random-walk price series ending now.

    Point density depends on the range: hourly for one day, 6-hourly up to
    a week, daily beyond that (capped at 365 points). Each step moves at
    most 5% and the price never drops below 10% of base.
    """
    rng = rng or random.Random()
    if now_ms is None:
        now_ms = int(now_utc().timestamp() * 1000)

    if days <= 1:
        points, interval = 24, _HOUR_MS
    elif days <= 7:
        points, interval = days * 4, 6 * _HOUR_MS
    elif days <= 30:
        points, interval = days, _DAY_MS
    else:
        points, interval = min(days, 365), _DAY_MS

    prices: list[list[float]] = []
    price = float(base_price)
    floor = float(base_price) * 0.1
    for i in range(points):
        timestamp = now_ms - (points - 1 - i) * interval
        price *= 1 + (rng.random() - 0.5) * 0.1
        price = max(price, floor)
        prices.append([timestamp, round(price, 8)])
    return prices


class StubMarketDataProvider:
    """
    Stub provider with deterministic data for offline operation.

    Known coins use BASE_PRICES; unknown coins are priced at $100.
    """

    def __init__(self, seed: int = 42):
        """Initialize with a random seed for reproducible charts."""
        self._seed = seed

    def get_prices(self, asset_ids: list[str]) -> dict[str, Quote]:
        """Return stub quotes for requested assets."""
        as_of = now_utc()
        return {
            asset_id.lower(): Quote(
                asset_id=asset_id.lower(),
                price=base_price_for(asset_id),
                change_24h=Decimal("0"),
                as_of=as_of,
            )
            for asset_id in asset_ids
        }

    def get_markets(self, page: int = 1, per_page: int = 100) -> list[dict[str, Any]]:
        """List the known coins, most expensive first."""
        ranked = sorted(BASE_PRICES.items(), key=lambda item: item[1], reverse=True)
        start = (page - 1) * per_page
        return [
            {
                "id": asset_id,
                "symbol": asset_id[:4],
                "name": asset_id.replace("-", " ").title(),
                "current_price": float(price),
            }
            for asset_id, price in ranked[start:start + per_page]
        ]

    def get_coin(self, asset_id: str) -> dict[str, Any]:
        """Derive display metadata from the asset ID."""
        return {
            "id": asset_id,
            "name": asset_id[:1].upper() + asset_id[1:],
            "symbol": asset_id.upper()[:4],
            "image": "/images/default-coin.svg",
        }

    def get_market_chart(self, asset_id: str, days: int) -> list[list[float]]:
        """Seeded mock series around the coin's base price."""
        return generate_mock_chart(
            float(base_price_for(asset_id)),
            days,
            rng=random.Random(f"{self._seed}:{asset_id}:{days}"),
        )
