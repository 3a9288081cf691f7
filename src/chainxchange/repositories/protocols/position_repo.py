"""Position repository protocol."""

from typing import Protocol, Optional

from chainxchange.domain.models import Position


class PositionRepository(Protocol):
    """Interface for position data access."""

    def get(self, user_id: str, asset_id: str, for_update: bool = False) -> Optional[Position]:
        """Retrieve the position for a (user, asset) pair."""
        ...

    def list_by_user(self, user_id: str) -> list[Position]:
        """List all positions for a user, ordered by asset ID."""
        ...

    def insert(self, position: Position) -> Position:
        """Persist a new position."""
        ...

    def update_if_version(self, position: Position, expected_version: int) -> bool:
        """Write quantity and average cost only if the stored version still matches."""
        ...

    def delete_if_version(self, user_id: str, asset_id: str, expected_version: int) -> bool:
        """Delete the position only if the stored version still matches."""
        ...
