"""Unit of work protocol grouping repositories on one transaction."""

from typing import Protocol

from chainxchange.repositories.protocols.account_repo import AccountRepository
from chainxchange.repositories.protocols.position_repo import PositionRepository
from chainxchange.repositories.protocols.ledger_entry_repo import LedgerEntryRepository


class UnitOfWork(Protocol):
    """
    Transaction scope shared by the account, position and ledger repositories.

    Used as a context manager. Anything not committed when the block exits
    is rolled back.
    """

    accounts: AccountRepository
    positions: PositionRepository
    entries: LedgerEntryRepository

    def __enter__(self) -> "UnitOfWork":
        ...

    def __exit__(self, exc_type, exc, tb) -> None:
        ...

    def commit(self) -> None:
        """Commit all pending writes."""
        ...

    def rollback(self) -> None:
        """Discard all pending writes."""
        ...
