"""CoinGecko market data provider backed by the market data gateway."""

from decimal import Decimal, InvalidOperation
from typing import Any

from chainxchange.core.exceptions import UpstreamError
from chainxchange.core.timezone import now_utc
from chainxchange.domain.views import Quote
from chainxchange.services.market_data_gateway import MarketDataGateway

DEFAULT_COIN_IMAGE = "/images/default-coin.svg"


def _to_decimal(value: Any) -> Decimal:
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise UpstreamError(f"Unreadable number in upstream payload: {value!r}") from exc


class CoinGeckoProvider:
    """
    Builds CoinGecko v3 queries and parses their payloads.

    Every request goes through the gateway, so it is cached and serialized
    behind the rate-limited request queue. Cache keys embed every query
    parameter that changes the answer.
    """

    def __init__(
        self,
        gateway: MarketDataGateway,
        base_url: str = "https://api.coingecko.com/api/v3",
        price_ttl_seconds: int = 120,
        markets_ttl_seconds: int = 300,
        coin_info_ttl_seconds: int = 3600,
        chart_ttl_seconds: int = 300,
    ):
        self._gateway = gateway
        self._base_url = base_url.rstrip("/")
        self._price_ttl = price_ttl_seconds
        self._markets_ttl = markets_ttl_seconds
        self._coin_info_ttl = coin_info_ttl_seconds
        self._chart_ttl = chart_ttl_seconds

    def get_prices(self, asset_ids: list[str]) -> dict[str, Quote]:
        """One batched /simple/price call for all requested assets."""
        ids = sorted({a.strip().lower() for a in asset_ids if a and a.strip()})
        if not ids:
            return {}

        joined = ",".join(ids)
        payload = self._gateway.fetch_with_cache(
            f"{self._base_url}/simple/price",
            {"ids": joined, "vs_currencies": "usd", "include_24hr_change": "true"},
            f"portfolio-prices-{joined}",
            self._price_ttl,
        )
        if not isinstance(payload, dict):
            raise UpstreamError("Unexpected price payload shape")

        as_of = now_utc()
        quotes: dict[str, Quote] = {}
        for asset_id in ids:
            data = payload.get(asset_id)
            if not isinstance(data, dict) or data.get("usd") is None:
                continue
            quotes[asset_id] = Quote(
                asset_id=asset_id,
                price=_to_decimal(data["usd"]),
                change_24h=_to_decimal(data.get("usd_24h_change") or 0),
                as_of=as_of,
            )
        return quotes

    def get_markets(self, page: int = 1, per_page: int = 100) -> list[dict[str, Any]]:
        """Coins ordered by market cap, one page at a time."""
        payload = self._gateway.fetch_with_cache(
            f"{self._base_url}/coins/markets",
            {
                "vs_currency": "usd",
                "order": "market_cap_desc",
                "per_page": per_page,
                "page": page,
                "sparkline": "false",
                "locale": "en",
            },
            f"crypto-markets-{page}-{per_page}",
            self._markets_ttl,
        )
        if not isinstance(payload, list):
            raise UpstreamError("Unexpected markets payload shape")
        return payload

    def get_coin(self, asset_id: str) -> dict[str, Any]:
        """Name, upper-case symbol and best available image for an asset."""
        payload = self._gateway.fetch_with_cache(
            f"{self._base_url}/coins/{asset_id}",
            None,
            f"coin-info-{asset_id}",
            self._coin_info_ttl,
        )
        if not isinstance(payload, dict):
            raise UpstreamError("Unexpected coin payload shape")

        image = payload.get("image") or {}
        return {
            "id": payload.get("id", asset_id),
            "name": payload.get("name") or asset_id,
            "symbol": (payload.get("symbol") or asset_id).upper(),
            "image": image.get("large") or image.get("small") or DEFAULT_COIN_IMAGE,
        }

    def get_market_chart(self, asset_id: str, days: int) -> list[list[float]]:
        """Historical USD prices as [timestamp_ms, price] pairs."""
        payload = self._gateway.fetch_with_cache(
            f"{self._base_url}/coins/{asset_id}/market_chart",
            {"vs_currency": "usd", "days": days},
            f"chart-{asset_id}-{days}",
            self._chart_ttl,
        )
        prices = payload.get("prices") if isinstance(payload, dict) else None
        if not isinstance(prices, list):
            raise UpstreamError("Invalid chart data structure")
        return prices
