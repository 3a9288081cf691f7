"""SQLAlchemy ORM model definitions."""

from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    ForeignKey,
    Index,
    Enum as SqlEnum,
)
from sqlalchemy.types import TypeDecorator

from chainxchange.repositories.sqlalchemy.database import Base
from chainxchange.domain.models.enums import TradeSide


class ExactDecimal(TypeDecorator):
    """Decimal stored as its exact string form. Compare and do arithmetic in Python, not SQL."""

    impl = String(64)
    cache_ok = True

    def process_bind_param(self, value, dialect) -> Optional[str]:
        if value is None:
            return None
        if not isinstance(value, Decimal):
            value = Decimal(str(value))
        return str(value)

    def process_result_value(self, value, dialect) -> Optional[Decimal]:
        if value is None:
            return None
        return Decimal(value)


class AccountORM(Base):
    """SQLAlchemy model for Account."""

    __tablename__ = "accounts"

    user_id = Column(String(64), primary_key=True)
    cash_balance = Column(ExactDecimal(), nullable=False, default=Decimal("0"))
    version = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False)


class PositionORM(Base):
    """SQLAlchemy model for Position. Rows with zero quantity are deleted, not kept."""

    __tablename__ = "positions"

    user_id = Column(String(64), ForeignKey("accounts.user_id"), primary_key=True)
    asset_id = Column(String(100), primary_key=True)
    quantity = Column(ExactDecimal(), nullable=False)
    average_cost = Column(ExactDecimal(), nullable=False)
    version = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime(timezone=True), nullable=True)


class LedgerEntryORM(Base):
    """SQLAlchemy model for LedgerEntry (append-only)."""

    __tablename__ = "ledger_entries"

    # Insertion order, used to break timestamp ties
    seq = Column(Integer, primary_key=True, autoincrement=True)
    entry_id = Column(String(36), unique=True, nullable=False)
    user_id = Column(String(64), ForeignKey("accounts.user_id"), nullable=False)
    asset_id = Column(String(100), nullable=False)
    side = Column(SqlEnum(TradeSide), nullable=False)
    quantity = Column(ExactDecimal(), nullable=False)
    price = Column(ExactDecimal(), nullable=False)
    total = Column(ExactDecimal(), nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (Index("ix_ledger_entries_user_time", "user_id", "timestamp"),)
