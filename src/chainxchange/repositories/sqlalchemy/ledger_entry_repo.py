"""SQLAlchemy implementation of LedgerEntryRepository."""

from typing import Optional

from sqlalchemy.orm import Session

from chainxchange.core.timezone import to_utc
from chainxchange.domain.models import LedgerEntry, TradeSide, HistorySortField, SortOrder
from chainxchange.repositories.sqlalchemy.orm_models import LedgerEntryORM

_SORT_COLUMNS = {
    HistorySortField.TIMESTAMP: LedgerEntryORM.timestamp,
    HistorySortField.SIDE: LedgerEntryORM.side,
}

# Stored as exact decimal strings, so these are ordered after loading
_NUMERIC_SORT_FIELDS = {
    HistorySortField.PRICE: "price",
    HistorySortField.QUANTITY: "quantity",
    HistorySortField.TOTAL: "total",
}


class SqlAlchemyLedgerEntryRepository:
    """SQLAlchemy-backed append-only ledger."""

    def __init__(self, db: Session):
        self._db = db

    def append(self, entry: LedgerEntry) -> LedgerEntry:
        """Append a new entry."""
        orm_entry = LedgerEntryORM(
            entry_id=entry.entry_id,
            user_id=entry.user_id,
            asset_id=entry.asset_id,
            side=entry.side,
            quantity=entry.quantity,
            price=entry.price,
            total=entry.total,
            timestamp=entry.timestamp,
        )
        self._db.add(orm_entry)
        self._db.flush()
        return entry

    def query(
        self,
        user_id: str,
        side: Optional[TradeSide] = None,
        sort_by: HistorySortField = HistorySortField.TIMESTAMP,
        order: SortOrder = SortOrder.DESC,
    ) -> list[LedgerEntry]:
        """Query a user's entries with an optional side filter and sort."""
        query = self._db.query(LedgerEntryORM).filter(LedgerEntryORM.user_id == user_id)
        if side is not None:
            query = query.filter(LedgerEntryORM.side == side)

        descending = order != SortOrder.ASC
        tie_breaker = LedgerEntryORM.seq.desc() if descending else LedgerEntryORM.seq.asc()

        if sort_by in _NUMERIC_SORT_FIELDS:
            entries = [self._to_domain(e) for e in query.order_by(tie_breaker).all()]
            attribute = _NUMERIC_SORT_FIELDS[sort_by]
            # sorted() is stable, so equal values keep their insertion order
            return sorted(entries, key=lambda e: getattr(e, attribute), reverse=descending)

        column = _SORT_COLUMNS[sort_by]
        query = query.order_by(column.desc() if descending else column.asc(), tie_breaker)
        return [self._to_domain(e) for e in query.all()]

    @staticmethod
    def _to_domain(orm: LedgerEntryORM) -> LedgerEntry:
        """Convert ORM model to domain model."""
        return LedgerEntry(
            entry_id=orm.entry_id,
            user_id=orm.user_id,
            asset_id=orm.asset_id,
            side=orm.side,
            quantity=orm.quantity,
            price=orm.price,
            total=orm.total,
            timestamp=to_utc(orm.timestamp),
        )
