"""
Integration tests for concurrent ledger mutations against a file-backed SQLite database.

Tests cover:
- Racing sells of the same asset cannot oversell
- Racing buys of different assets cannot overdraw shared cash
- Many small concurrent buys keep cash and positions consistent
"""

import threading
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from chainxchange.core.exceptions import AppError, InsufficientFundsError, InsufficientHoldingsError
from chainxchange.repositories.sqlalchemy import Base, make_uow_factory
# Import ORM models to register them with Base before creating tables
from chainxchange.repositories.sqlalchemy import orm_models  # noqa: F401
from chainxchange.services import PortfolioLedger


@pytest.fixture
def file_ledger(tmp_path) -> PortfolioLedger:
    """Ledger over a SQLite file so each thread gets its own connection."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'concurrency.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    session_factory = sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=engine,
    )
    yield PortfolioLedger(uow_factory=make_uow_factory(session_factory))
    engine.dispose()


def _run_concurrently(*calls) -> list:
    """Start every call at the same moment; return each result or raised AppError."""
    barrier = threading.Barrier(len(calls), timeout=10)
    outcomes: list = [None] * len(calls)

    def runner(index, call):
        barrier.wait()
        try:
            outcomes[index] = call()
        except AppError as exc:
            outcomes[index] = exc

    threads = [threading.Thread(target=runner, args=(i, call)) for i, call in enumerate(calls)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=60)
    return outcomes


# =============================================================================
# SAME ASSET
# =============================================================================


class TestConcurrentSells:
    """Concurrent sells of one (user, asset) pair."""

    def test_two_sells_cannot_oversell(self, file_ledger: PortfolioLedger):
        """
        GIVEN alice holds 10 bitcoin
        WHEN two sells of 6 run at the same time
        THEN exactly one succeeds, the other gets InsufficientHoldingsError, and 4 remain
        """
        file_ledger.open_account("alice")
        file_ledger.buy("alice", "bitcoin", 10, 100)

        outcomes = _run_concurrently(
            lambda: file_ledger.sell("alice", "bitcoin", 6, 100),
            lambda: file_ledger.sell("alice", "bitcoin", 6, 100),
        )

        failures = [o for o in outcomes if isinstance(o, AppError)]
        assert len(failures) == 1
        assert isinstance(failures[0], InsufficientHoldingsError)
        assert file_ledger.get_position("alice", "bitcoin").quantity == Decimal("4")
        assert file_ledger.get_account("alice").cash_balance == Decimal("9600")
        assert len(file_ledger.history("alice", side="sell")) == 1


# =============================================================================
# SHARED CASH
# =============================================================================


class TestConcurrentBuys:
    """Concurrent buys that share one cash balance."""

    def test_different_assets_cannot_overdraw_cash(self, file_ledger: PortfolioLedger):
        """
        GIVEN bob has $1,000
        WHEN buys of $600 bitcoin and $600 ethereum run at the same time
        THEN exactly one succeeds with InsufficientFundsError for the other, and cash never goes negative
        """
        file_ledger.open_account("bob", initial_cash=1000)

        outcomes = _run_concurrently(
            lambda: file_ledger.buy("bob", "bitcoin", 6, 100),
            lambda: file_ledger.buy("bob", "ethereum", 6, 100),
        )

        failures = [o for o in outcomes if isinstance(o, AppError)]
        assert len(failures) == 1
        assert isinstance(failures[0], InsufficientFundsError)
        assert file_ledger.get_account("bob").cash_balance == Decimal("400")
        assert len(file_ledger.list_positions("bob")) == 1
        assert len(file_ledger.history("bob")) == 1

    def test_many_small_buys_stay_consistent(self, file_ledger: PortfolioLedger):
        """
        GIVEN carol has $1,000
        WHEN eight $100 buys across four assets run at once
        THEN all succeed and cash, positions and history add up
        """
        file_ledger.open_account("carol", initial_cash=1000)
        assets = ["bitcoin", "ethereum", "solana", "cardano"]

        outcomes = _run_concurrently(
            *[
                (lambda asset_id=asset_id: file_ledger.buy("carol", asset_id, 1, 100))
                for asset_id in assets * 2
            ]
        )

        assert not [o for o in outcomes if isinstance(o, AppError)]
        assert file_ledger.get_account("carol").cash_balance == Decimal("200")
        positions = file_ledger.list_positions("carol")
        assert {p.asset_id: p.quantity for p in positions} == {a: Decimal("2") for a in assets}
        assert len(file_ledger.history("carol")) == 8
