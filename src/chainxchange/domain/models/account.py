"""Account domain model."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional


@dataclass
class Account:
    """
    Simulated trading account for one user.

    cash_balance is never negative after a committed mutation.
    """

    user_id: str
    cash_balance: Decimal = field(default_factory=lambda: Decimal("0"))
    version: int = 0
    created_at: Optional[datetime] = field(default=None)
