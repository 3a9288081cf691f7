"""Repository layer - data access abstractions and implementations."""

from chainxchange.repositories.protocols import (
    AccountRepository,
    PositionRepository,
    LedgerEntryRepository,
    UnitOfWork,
)

__all__ = [
    "AccountRepository",
    "PositionRepository",
    "LedgerEntryRepository",
    "UnitOfWork",
]
