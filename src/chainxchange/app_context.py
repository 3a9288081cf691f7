"""Application context: the one place where long-lived services are built.

The request queue and the cache store are process-wide shared state. They
are constructed exactly once here and injected into the gateway, instead of
living as module globals.
"""

import threading
from pathlib import Path
from typing import Callable, Optional

import requests
from sqlalchemy.orm import Session

from chainxchange.config.settings import Settings, get_settings, set_settings
from chainxchange.domain.models import LedgerEntry
from chainxchange.providers.coingecko_provider import CoinGeckoProvider
from chainxchange.providers.market_data_provider import MarketDataProvider
from chainxchange.providers.stub_provider import StubMarketDataProvider
from chainxchange.repositories.sqlalchemy.database import (
    get_session_factory,
    init_db,
    init_db_with_path,
    reset_database,
)
from chainxchange.repositories.sqlalchemy.unit_of_work import make_uow_factory
from chainxchange.services import (
    CacheStore,
    MarketDataGateway,
    MarketService,
    PortfolioLedger,
    RequestQueue,
    ValuationEngine,
)


class AppContext:
    """
    Application context providing in-process access to all services.

    Services are created lazily on first access and live until close().
    Creation is guarded by one re-entrant lock, so concurrent first requests
    share a single queue, cache and ledger. Tests inject a session factory,
    HTTP session or provider to avoid the real database and network.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        session_factory: Optional[Callable[[], Session]] = None,
        http_session: Optional[requests.Session] = None,
        provider: Optional[MarketDataProvider] = None,
    ):
        self._settings = settings
        self._session_factory = session_factory
        self._http_session = http_session
        self._provider = provider
        self._initialized = session_factory is not None
        self._build_lock = threading.RLock()

        self._cache_store: Optional[CacheStore] = None
        self._request_queue: Optional[RequestQueue] = None
        self._gateway: Optional[MarketDataGateway] = None
        self._ledger: Optional[PortfolioLedger] = None
        self._valuation: Optional[ValuationEngine] = None
        self._market: Optional[MarketService] = None

    def initialize(self, data_dir: Optional[Path] = None) -> None:
        """
        Create the database schema and bind the session factory.

        Args:
            data_dir: Optional data directory. Uses settings if not provided.
        """
        with self._build_lock:
            if data_dir is not None:
                self._settings = Settings(data_dir=data_dir)
                set_settings(self._settings)
                reset_database()
                init_db_with_path(self.settings.get_data_dir() / "chainxchange.db")
            else:
                init_db()
            self._session_factory = get_session_factory()
            self._ledger = None
            self._valuation = None
            self._initialized = True

    @property
    def is_initialized(self) -> bool:
        """Check if context is initialized."""
        return self._initialized

    @property
    def settings(self) -> Settings:
        """Settings in effect for this context."""
        with self._build_lock:
            if self._settings is None:
                self._settings = get_settings()
            return self._settings

    # Market data accessors
    @property
    def cache_store(self) -> CacheStore:
        """Shared TTL cache for upstream payloads and valuations."""
        with self._build_lock:
            if self._cache_store is None:
                self._cache_store = CacheStore(coalesce=self.settings.coalesce_cache_fetches)
            return self._cache_store

    @property
    def request_queue(self) -> RequestQueue:
        """Shared single-flight queue to the upstream provider."""
        with self._build_lock:
            if self._request_queue is None:
                settings = self.settings
                self._request_queue = RequestQueue(
                    session=self._http_session,
                    timeout=settings.request_timeout_seconds,
                    max_attempts=settings.rate_limit_max_attempts,
                    default_retry_after=settings.rate_limit_default_retry_after_seconds,
                    user_agent=settings.user_agent,
                )
            return self._request_queue

    @property
    def gateway(self) -> MarketDataGateway:
        """Get the MarketDataGateway instance."""
        with self._build_lock:
            if self._gateway is None:
                self._gateway = MarketDataGateway(self.request_queue, self.cache_store)
            return self._gateway

    @property
    def provider(self) -> MarketDataProvider:
        """Get the market data provider (stub when configured for offline use)."""
        with self._build_lock:
            if self._provider is None:
                settings = self.settings
                if settings.use_stub_provider:
                    self._provider = StubMarketDataProvider()
                else:
                    self._provider = CoinGeckoProvider(
                        self.gateway,
                        base_url=settings.coingecko_base_url,
                        price_ttl_seconds=settings.price_cache_ttl_seconds,
                        markets_ttl_seconds=settings.markets_cache_ttl_seconds,
                        coin_info_ttl_seconds=settings.coin_info_cache_ttl_seconds,
                        chart_ttl_seconds=settings.chart_cache_ttl_seconds,
                    )
            return self._provider

    # Service accessors
    @property
    def ledger(self) -> PortfolioLedger:
        """Get the PortfolioLedger instance."""
        with self._build_lock:
            if self._ledger is None:
                if self._session_factory is None:
                    raise RuntimeError("AppContext is not initialized")
                self._ledger = PortfolioLedger(
                    uow_factory=make_uow_factory(self._session_factory),
                    starting_cash=self.settings.starting_cash,
                )
                self._ledger.add_listener(self._on_ledger_commit)
            return self._ledger

    @property
    def valuation(self) -> ValuationEngine:
        """Get the ValuationEngine instance."""
        with self._build_lock:
            if self._valuation is None:
                self._valuation = ValuationEngine(
                    ledger=self.ledger,
                    provider=self.provider,
                    result_cache=self.cache_store,
                    result_ttl_seconds=self.settings.valuation_cache_ttl_seconds,
                )
            return self._valuation

    @property
    def market(self) -> MarketService:
        """Get the MarketService instance."""
        with self._build_lock:
            if self._market is None:
                self._market = MarketService(provider=self.provider)
            return self._market

    def _on_ledger_commit(self, entry: LedgerEntry) -> None:
        valuation = self._valuation
        if valuation is not None:
            valuation.invalidate(entry.user_id)

    def close(self) -> None:
        """Stop the request queue worker. The context is not usable afterwards."""
        with self._build_lock:
            queue = self._request_queue
        if queue is not None:
            queue.close()


# Global application context (one per process)
_app_context: Optional[AppContext] = None


def get_app_context() -> AppContext:
    """Get or create the global application context."""
    global _app_context
    if _app_context is None:
        _app_context = AppContext()
    return _app_context


def set_app_context(context: Optional[AppContext]) -> None:
    """Set the global application context."""
    global _app_context
    _app_context = context
