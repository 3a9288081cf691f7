"""Valuation engine: unrealized profit/loss of held positions at live prices."""

import logging
import threading
from decimal import Decimal
from typing import Optional

from chainxchange.core.exceptions import UpstreamError
from chainxchange.core.timezone import now_utc
from chainxchange.domain.models import Position
from chainxchange.domain.views import HoldingValuation, PortfolioValuation, Quote
from chainxchange.providers.market_data_provider import MarketDataProvider
from chainxchange.services.cache_store import CacheStore
from chainxchange.services.ledger_service import PortfolioLedger, require_id

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
ZERO = Decimal("0")


def _pct(profit_loss: Decimal, invested: Decimal) -> Decimal:
    """profit_loss / invested x 100, or 0 when nothing is invested."""
    if invested > 0:
        return (profit_loss / invested * 100).quantize(CENT)
    return ZERO.quantize(CENT)


class ValuationEngine:
    """
    Joins a user's positions against current prices.

    Formulas per holding:
        current_value = quantity x current_price
        invested      = quantity x average_cost
        profit_loss   = current_value - invested
        profit_loss_pct = profit_loss / invested x 100 (0 if invested is 0)

    Totals sum current_value and invested across holdings and derive the
    percentage the same way. Prices for all holdings are requested in one
    provider call. If that call fails, every holding is valued at its own
    average cost and the result is flagged ``degraded``; an asset merely
    missing from an otherwise good price payload is valued at cost with
    ``live_price=False``.
    """

    def __init__(
        self,
        ledger: PortfolioLedger,
        provider: MarketDataProvider,
        result_cache: Optional[CacheStore] = None,
        result_ttl_seconds: int = 120,
    ):
        self._ledger = ledger
        self._provider = provider
        self._results = result_cache
        self._result_ttl = result_ttl_seconds
        # Bumped by invalidate(); a result is cached only if its generation is current
        self._generation_lock = threading.Lock()
        self._generations: dict[str, int] = {}

    def valuate(self, user_id: str) -> PortfolioValuation:
        """
        Value a user's portfolio.

        Non-degraded results are cached per user until the TTL elapses or a
        ledger commit invalidates them. A result computed while a commit
        landed is returned but not cached.

        Raises:
            ValidationError: blank user_id
            NotFoundError: no account for user_id
        """
        user_id = require_id(user_id, "user_id")
        if self._results is None:
            return self._compute(user_id)

        cached = self._results.get(self._cache_key(user_id))
        if cached is not None:
            return cached

        with self._generation_lock:
            generation = self._generations.get(user_id, 0)

        valuation = self._compute(user_id)

        if not valuation.degraded:
            with self._generation_lock:
                if self._generations.get(user_id, 0) == generation:
                    self._results.put(self._cache_key(user_id), valuation, self._result_ttl)
                else:
                    logger.debug("Valuation for %s went stale while computing; not cached", user_id)
        return valuation

    def invalidate(self, user_id: str) -> None:
        """Forget any cached valuation for user_id."""
        if self._results is None:
            return
        user_id = require_id(user_id, "user_id")
        with self._generation_lock:
            self._generations[user_id] = self._generations.get(user_id, 0) + 1
            self._results.invalidate(self._cache_key(user_id))

    # --- Internal ---

    @staticmethod
    def _cache_key(user_id: str) -> str:
        return f"portfolio:{user_id}"

    def _compute(self, user_id: str) -> PortfolioValuation:
        account = self._ledger.get_account(user_id)
        positions = self._ledger.list_positions(account.user_id)

        if not positions:
            return PortfolioValuation(
                user_id=account.user_id,
                cash_balance=account.cash_balance,
                as_of=now_utc(),
            )

        degraded = False
        try:
            quotes = self._provider.get_prices([p.asset_id for p in positions])
        except UpstreamError as exc:
            logger.warning(
                "Price lookup failed for %s; valuing %d holdings at cost: %s",
                account.user_id,
                len(positions),
                exc.message,
            )
            quotes = {}
            degraded = True

        holdings = [self._value_holding(p, quotes.get(p.asset_id)) for p in positions]

        total_value = sum((h.quantity * h.current_price for h in holdings), ZERO)
        total_invested = sum((p.invested for p in positions), ZERO)
        total_profit_loss = total_value - total_invested

        return PortfolioValuation(
            user_id=account.user_id,
            holdings=holdings,
            total_value=total_value.quantize(CENT),
            total_invested=total_invested.quantize(CENT),
            total_profit_loss=total_profit_loss.quantize(CENT),
            total_profit_loss_pct=_pct(total_profit_loss, total_invested),
            cash_balance=account.cash_balance,
            degraded=degraded,
            as_of=now_utc(),
        )

    @staticmethod
    def _value_holding(position: Position, quote: Optional[Quote]) -> HoldingValuation:
        if quote is not None:
            current_price = quote.price
            change_24h = quote.change_24h
        else:
            current_price = position.average_cost
            change_24h = ZERO

        current_value = position.quantity * current_price
        invested = position.invested
        profit_loss = current_value - invested

        return HoldingValuation(
            asset_id=position.asset_id,
            quantity=position.quantity,
            average_cost=position.average_cost,
            current_price=current_price,
            current_value=current_value.quantize(CENT),
            invested=invested.quantize(CENT),
            profit_loss=profit_loss.quantize(CENT),
            profit_loss_pct=_pct(profit_loss, invested),
            change_24h=change_24h,
            live_price=quote is not None,
        )
