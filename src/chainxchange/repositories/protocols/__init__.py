"""Repository protocol definitions (interfaces)."""

from chainxchange.repositories.protocols.account_repo import AccountRepository
from chainxchange.repositories.protocols.position_repo import PositionRepository
from chainxchange.repositories.protocols.ledger_entry_repo import LedgerEntryRepository
from chainxchange.repositories.protocols.unit_of_work import UnitOfWork

__all__ = [
    "AccountRepository",
    "PositionRepository",
    "LedgerEntryRepository",
    "UnitOfWork",
]
