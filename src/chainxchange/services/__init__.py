"""Service layer - business logic orchestration."""

from chainxchange.services.request_queue import RequestQueue
from chainxchange.services.cache_store import CacheStore
from chainxchange.services.market_data_gateway import MarketDataGateway
from chainxchange.services.ledger_service import PortfolioLedger
from chainxchange.services.valuation_service import ValuationEngine
from chainxchange.services.market_service import MarketService

__all__ = [
    "RequestQueue",
    "CacheStore",
    "MarketDataGateway",
    "PortfolioLedger",
    "ValuationEngine",
    "MarketService",
]
