"""Account repository protocol."""

from decimal import Decimal
from typing import Protocol, Optional

from chainxchange.domain.models import Account


class AccountRepository(Protocol):
    """Interface for account data access."""

    def create(self, account: Account) -> Account:
        """Persist a new account."""
        ...

    def get_by_id(self, user_id: str) -> Optional[Account]:
        """Retrieve account by user ID."""
        ...

    def debit_if_sufficient(self, user_id: str, amount: Decimal) -> bool:
        """
        Subtract amount from the cash balance with a version-checked write.

        Returns False, leaving the row untouched, when the balance is below amount
        or the account does not exist.
        """
        ...

    def credit(self, user_id: str, amount: Decimal) -> bool:
        """Add amount to the cash balance with a version-checked write. False if no such account."""
        ...
