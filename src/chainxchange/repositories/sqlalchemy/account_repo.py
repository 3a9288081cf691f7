"""SQLAlchemy implementation of AccountRepository."""

from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from chainxchange.core.exceptions import ConcurrentModificationError
from chainxchange.core.timezone import to_utc
from chainxchange.domain.models import Account
from chainxchange.repositories.sqlalchemy.orm_models import AccountORM

_MAX_SWAP_ATTEMPTS = 5


class SqlAlchemyAccountRepository:
    """SQLAlchemy-backed account repository. Writes are flushed, never committed here."""

    def __init__(self, db: Session):
        self._db = db

    def create(self, account: Account) -> Account:
        """Persist a new account."""
        orm_account = AccountORM(
            user_id=account.user_id,
            cash_balance=account.cash_balance,
            version=account.version,
            created_at=account.created_at,
        )
        self._db.add(orm_account)
        self._db.flush()
        return self._to_domain(orm_account)

    def get_by_id(self, user_id: str) -> Optional[Account]:
        """Retrieve account by user ID."""
        orm_account = self._db.query(AccountORM).filter(
            AccountORM.user_id == user_id
        ).first()
        return self._to_domain(orm_account) if orm_account else None

    def debit_if_sufficient(self, user_id: str, amount: Decimal) -> bool:
        """Subtract amount unless the balance is below it. Version-checked write."""
        for _ in range(_MAX_SWAP_ATTEMPTS):
            current = self._load(user_id)
            if current is None or current.cash_balance < amount:
                return False
            if self._swap_balance(current, current.cash_balance - amount):
                return True
        raise ConcurrentModificationError("Account", user_id)

    def credit(self, user_id: str, amount: Decimal) -> bool:
        """Add amount to the cash balance. Version-checked write."""
        for _ in range(_MAX_SWAP_ATTEMPTS):
            current = self._load(user_id)
            if current is None:
                return False
            if self._swap_balance(current, current.cash_balance + amount):
                return True
        raise ConcurrentModificationError("Account", user_id)

    def _load(self, user_id: str) -> Optional[AccountORM]:
        return (
            self._db.query(AccountORM)
            .populate_existing()
            .filter(AccountORM.user_id == user_id)
            .first()
        )

    def _swap_balance(self, current: AccountORM, new_balance: Decimal) -> bool:
        expected_version = current.version
        updated = (
            self._db.query(AccountORM)
            .filter(
                AccountORM.user_id == current.user_id,
                AccountORM.version == expected_version,
            )
            .update(
                {
                    AccountORM.cash_balance: new_balance,
                    AccountORM.version: expected_version + 1,
                },
                synchronize_session=False,
            )
        )
        self._db.expire_all()
        return updated == 1

    @staticmethod
    def _to_domain(orm: AccountORM) -> Account:
        """Convert ORM model to domain model."""
        return Account(
            user_id=orm.user_id,
            cash_balance=orm.cash_balance if orm.cash_balance is not None else Decimal("0"),
            version=orm.version or 0,
            created_at=to_utc(orm.created_at) if orm.created_at else None,
        )
