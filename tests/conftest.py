"""
Pytest configuration and fixtures for the trading simulator tests.

This module provides:
- In-memory SQLite database fixtures
- Ledger, valuation and market service fixtures
- A manual clock for TTL tests
- A scripted fake HTTP session standing in for the upstream provider
- Deterministic and failing price providers
"""

import threading
import time
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Callable, Optional, Union

import pytest
from sqlalchemy import create_engine, StaticPool
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from chainxchange.main import app
from chainxchange.app_context import AppContext, set_app_context
from chainxchange.config.settings import Settings, reset_settings
from chainxchange.core.exceptions import UpstreamError
from chainxchange.core.timezone import UTC
from chainxchange.domain.views import Quote
from chainxchange.repositories.sqlalchemy.database import Base
# Import ORM models to register them with Base before creating tables
from chainxchange.repositories.sqlalchemy import orm_models  # noqa: F401
from chainxchange.repositories.sqlalchemy import make_uow_factory
from chainxchange.services import (
    CacheStore,
    MarketDataGateway,
    MarketService,
    PortfolioLedger,
    RequestQueue,
    ValuationEngine,
)


# =============================================================================
# TIME HELPERS
# =============================================================================


def utc_datetime(
    year: int,
    month: int,
    day: int,
    hour: int = 10,
    minute: int = 0,
    second: int = 0,
) -> datetime:
    """Create a localized datetime in UTC."""
    return UTC.localize(datetime(year, month, day, hour, minute, second))


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start: Optional[datetime] = None):
        self.now = start or utc_datetime(2024, 6, 15, 14, 30, 0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


class TickingClock(ManualClock):
    """Clock that advances one second on every read, so timestamps are ordered."""

    def __call__(self) -> datetime:
        current = self.now
        self.advance(1)
        return current


@pytest.fixture
def clock() -> ManualClock:
    """Manual clock for deterministic TTL tests."""
    return ManualClock()


# =============================================================================
# FAKE UPSTREAM
# =============================================================================


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(
        self,
        status_code: int = 200,
        payload: Any = None,
        headers: Optional[dict[str, str]] = None,
        invalid_json: bool = False,
    ):
        self.status_code = status_code
        self._payload = payload
        self.headers = headers or {}
        self._invalid_json = invalid_json

    def json(self) -> Any:
        if self._invalid_json:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._payload


Outcome = Union[FakeResponse, Exception, Callable[[str, dict], FakeResponse]]


class FakeHttpSession:
    """
    Scripted replacement for requests.Session.

    Each get() consumes the next scripted outcome (a FakeResponse, an
    exception to raise, or a callable building a response from url/params).
    Once the script is exhausted, ``default`` is used. Tracks how many
    calls are in flight at once.
    """

    def __init__(
        self,
        script: Optional[list[Outcome]] = None,
        default: Optional[Outcome] = None,
        delay: float = 0.0,
    ):
        self._script = list(script or [])
        self._default = default
        self._delay = delay
        self._lock = threading.Lock()
        self.calls: list[dict[str, Any]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    def get(self, url, params=None, headers=None, timeout=None):
        with self._lock:
            self.calls.append(
                {"url": url, "params": params, "headers": headers, "timeout": timeout}
            )
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
            outcome = self._script.pop(0) if self._script else self._default
        try:
            if self._delay:
                time.sleep(self._delay)
            if isinstance(outcome, Exception):
                raise outcome
            if callable(outcome) and not isinstance(outcome, FakeResponse):
                return outcome(url, params or {})
            if outcome is None:
                raise AssertionError(f"Unexpected upstream call: {url}")
            return outcome
        finally:
            with self._lock:
                self.in_flight -= 1

    @property
    def call_count(self) -> int:
        return len(self.calls)


class SleepRecorder:
    """Records requested sleeps instead of sleeping."""

    def __init__(self):
        self.calls: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def sleeper() -> SleepRecorder:
    """Sleep replacement that records durations."""
    return SleepRecorder()


@pytest.fixture
def make_queue(sleeper):
    """Factory for RequestQueues over a fake session; all are closed after the test."""
    queues: list[RequestQueue] = []

    def _make(session: FakeHttpSession, **kwargs) -> RequestQueue:
        kwargs.setdefault("timeout", 15.0)
        kwargs.setdefault("max_attempts", 3)
        kwargs.setdefault("default_retry_after", 10.0)
        kwargs.setdefault("sleep", sleeper)
        request_queue = RequestQueue(session=session, **kwargs)
        queues.append(request_queue)
        return request_queue

    yield _make
    for request_queue in queues:
        request_queue.close(timeout=5)


# =============================================================================
# PRICE PROVIDERS
# =============================================================================


class DeterministicPriceProvider:
    """Price provider with fixed quotes and call counting."""

    FIXED_PRICES = {
        "bitcoin": (Decimal("65000"), Decimal("2.5")),
        "ethereum": (Decimal("3500"), Decimal("-1.25")),
        "solana": (Decimal("150"), Decimal("0")),
    }

    def __init__(self, prices: Optional[dict[str, Decimal]] = None):
        self._prices = {k: (v, Decimal("0")) for k, v in (prices or {}).items()} or dict(
            self.FIXED_PRICES
        )
        self.price_calls: list[list[str]] = []

    def get_prices(self, asset_ids: list[str]) -> dict[str, Quote]:
        self.price_calls.append(list(asset_ids))
        return {
            asset_id: Quote(asset_id=asset_id, price=price, change_24h=change)
            for asset_id, (price, change) in self._prices.items()
            if asset_id in asset_ids
        }

    def get_markets(self, page: int = 1, per_page: int = 100) -> list[dict[str, Any]]:
        return [
            {"id": asset_id, "current_price": float(price)}
            for asset_id, (price, _) in self._prices.items()
        ][:per_page]

    def get_coin(self, asset_id: str) -> dict[str, Any]:
        return {
            "id": asset_id,
            "name": asset_id.title(),
            "symbol": asset_id[:3].upper(),
            "image": f"https://img.example/{asset_id}.png",
        }

    def get_market_chart(self, asset_id: str, days: int) -> list[list[float]]:
        price = float(self._prices.get(asset_id, (Decimal("1"), None))[0])
        return [[1718461800000.0, price]]


class FailingPriceProvider:
    """Price provider whose every call fails like an unreachable upstream."""

    def __init__(self):
        self.calls = 0

    def _fail(self):
        self.calls += 1
        raise UpstreamError("Upstream returned HTTP 503", status_code=503)

    def get_prices(self, asset_ids: list[str]) -> dict[str, Quote]:
        self._fail()

    def get_markets(self, page: int = 1, per_page: int = 100) -> list[dict[str, Any]]:
        self._fail()

    def get_coin(self, asset_id: str) -> dict[str, Any]:
        self._fail()

    def get_market_chart(self, asset_id: str, days: int) -> list[list[float]]:
        self._fail()


@pytest.fixture
def price_provider() -> DeterministicPriceProvider:
    """Provide deterministic price provider."""
    return DeterministicPriceProvider()


@pytest.fixture
def failing_provider() -> FailingPriceProvider:
    """Provide a price provider that always fails."""
    return FailingPriceProvider()


# =============================================================================
# DATABASE FIXTURES
# =============================================================================


@pytest.fixture(scope="function")
def test_engine():
    """Create test database engine with shared in-memory SQLite."""
    reset_settings()

    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> sessionmaker:
    """Session factory bound to the test engine."""
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=test_engine,
    )


@pytest.fixture
def uow_factory(session_factory):
    """Unit-of-work factory bound to the test engine."""
    return make_uow_factory(session_factory)


# =============================================================================
# SERVICE FIXTURES
# =============================================================================


@pytest.fixture
def ledger(uow_factory) -> PortfolioLedger:
    """Provide test PortfolioLedger with ordered timestamps."""
    return PortfolioLedger(
        uow_factory=uow_factory,
        starting_cash=Decimal("10000"),
        clock=TickingClock(),
    )


@pytest.fixture
def valuation_engine(ledger, price_provider) -> ValuationEngine:
    """Provide test ValuationEngine without result caching."""
    return ValuationEngine(ledger=ledger, provider=price_provider)


@pytest.fixture
def market_service(price_provider) -> MarketService:
    """Provide test MarketService."""
    return MarketService(provider=price_provider)


@pytest.fixture
def cache_store(clock) -> CacheStore:
    """Provide CacheStore driven by the manual clock."""
    return CacheStore(clock=clock)


@pytest.fixture
def funded_user(ledger) -> str:
    """Open an account with $10,000 and return its user ID."""
    ledger.open_account("alice")
    return "alice"


@pytest.fixture
def gateway_factory(make_queue, cache_store):
    """Build a MarketDataGateway over a fake session and the manual-clock cache."""

    def _make(session: FakeHttpSession, **queue_kwargs) -> MarketDataGateway:
        return MarketDataGateway(make_queue(session, **queue_kwargs), cache_store)

    return _make


# =============================================================================
# API TEST CLIENT FIXTURE
# =============================================================================


@pytest.fixture
def make_client(session_factory):
    """Factory for TestClients over an AppContext using the test database."""
    contexts: list[AppContext] = []

    def _make(provider) -> TestClient:
        context = AppContext(
            settings=Settings(starting_cash=Decimal("10000")),
            session_factory=session_factory,
            provider=provider,
        )
        contexts.append(context)
        set_app_context(context)
        return TestClient(app)

    yield _make
    for context in contexts:
        context.close()
    set_app_context(None)


@pytest.fixture
def client(make_client, price_provider) -> TestClient:
    """Provide FastAPI test client with the deterministic provider."""
    with make_client(price_provider) as c:
        yield c
