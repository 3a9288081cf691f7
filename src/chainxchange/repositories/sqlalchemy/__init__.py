"""SQLAlchemy repository implementations."""

from chainxchange.repositories.sqlalchemy.database import (
    get_engine,
    get_session_factory,
    init_db,
    init_db_with_path,
    reset_database,
    Base,
)
from chainxchange.repositories.sqlalchemy.account_repo import SqlAlchemyAccountRepository
from chainxchange.repositories.sqlalchemy.position_repo import SqlAlchemyPositionRepository
from chainxchange.repositories.sqlalchemy.ledger_entry_repo import SqlAlchemyLedgerEntryRepository
from chainxchange.repositories.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork, make_uow_factory

__all__ = [
    "get_engine",
    "get_session_factory",
    "init_db",
    "init_db_with_path",
    "reset_database",
    "Base",
    "SqlAlchemyAccountRepository",
    "SqlAlchemyPositionRepository",
    "SqlAlchemyLedgerEntryRepository",
    "SqlAlchemyUnitOfWork",
    "make_uow_factory",
]
