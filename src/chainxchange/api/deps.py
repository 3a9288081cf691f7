"""Dependency injection for FastAPI."""

from fastapi import Depends

from chainxchange.app_context import AppContext, get_app_context
from chainxchange.services import MarketService, PortfolioLedger, ValuationEngine


def get_context() -> AppContext:
    """Provide the process-wide AppContext."""
    return get_app_context()


def get_ledger(context: AppContext = Depends(get_context)) -> PortfolioLedger:
    """Provide PortfolioLedger instance."""
    return context.ledger


def get_valuation_engine(context: AppContext = Depends(get_context)) -> ValuationEngine:
    """Provide ValuationEngine instance."""
    return context.valuation


def get_market_service(context: AppContext = Depends(get_context)) -> MarketService:
    """Provide MarketService instance."""
    return context.market
