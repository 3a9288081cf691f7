"""Position domain model."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional


@dataclass
class Position:
    """
    Quantity of one asset held by one user, with its average cost basis.

    A position only exists while quantity > 0; reaching zero deletes it.
    """

    user_id: str
    asset_id: str
    quantity: Decimal
    average_cost: Decimal
    version: int = 0
    updated_at: Optional[datetime] = field(default=None)

    @property
    def invested(self) -> Decimal:
        """Cost basis of the units still held."""
        return self.quantity * self.average_cost
