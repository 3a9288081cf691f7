"""SQLAlchemy implementation of UnitOfWork."""

from typing import Callable, Optional

from sqlalchemy.orm import Session

from chainxchange.repositories.sqlalchemy.account_repo import SqlAlchemyAccountRepository
from chainxchange.repositories.sqlalchemy.position_repo import SqlAlchemyPositionRepository
from chainxchange.repositories.sqlalchemy.ledger_entry_repo import SqlAlchemyLedgerEntryRepository


class SqlAlchemyUnitOfWork:
    """
    Opens one session per block and binds all repositories to it.

    Usage:
        with uow_factory() as uow:
            uow.accounts.debit_if_sufficient(...)
            uow.entries.append(...)
            uow.commit()
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory
        self._session: Optional[Session] = None

    def __enter__(self) -> "SqlAlchemyUnitOfWork":
        self._session = self._session_factory()
        self.accounts = SqlAlchemyAccountRepository(self._session)
        self.positions = SqlAlchemyPositionRepository(self._session)
        self.entries = SqlAlchemyLedgerEntryRepository(self._session)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            self.rollback()
        finally:
            self._session.close()
            self._session = None

    def commit(self) -> None:
        """Commit all pending writes."""
        self._session.commit()

    def rollback(self) -> None:
        """Discard all pending writes."""
        self._session.rollback()


def make_uow_factory(session_factory: Callable[[], Session]) -> Callable[[], SqlAlchemyUnitOfWork]:
    """Return a zero-argument callable producing fresh units of work."""

    def _factory() -> SqlAlchemyUnitOfWork:
        return SqlAlchemyUnitOfWork(session_factory)

    return _factory
