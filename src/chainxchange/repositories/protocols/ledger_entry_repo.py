"""Ledger entry repository protocol."""

from typing import Protocol, Optional

from chainxchange.domain.models import LedgerEntry, TradeSide, HistorySortField, SortOrder


class LedgerEntryRepository(Protocol):
    """Interface for the append-only ledger."""

    def append(self, entry: LedgerEntry) -> LedgerEntry:
        """Append a new entry. Entries are never updated."""
        ...

    def query(
        self,
        user_id: str,
        side: Optional[TradeSide] = None,
        sort_by: HistorySortField = HistorySortField.TIMESTAMP,
        order: SortOrder = SortOrder.DESC,
    ) -> list[LedgerEntry]:
        """Query a user's entries with an optional side filter and sort."""
        ...
