"""Portfolio ledger: cash balances, positions and the trade audit trail."""

import logging
import uuid
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Optional, Union

from chainxchange.core.exceptions import (
    ConcurrentModificationError,
    InsufficientFundsError,
    InsufficientHoldingsError,
    NotFoundError,
    ValidationError,
)
from chainxchange.core.locks import KeyedLock
from chainxchange.core.timezone import now_utc
from chainxchange.domain.models import (
    Account,
    HistorySortField,
    LedgerEntry,
    Position,
    SortOrder,
    TradeSide,
)
from chainxchange.domain.views import TradeResult
from chainxchange.repositories.protocols import UnitOfWork

logger = logging.getLogger(__name__)

NumberLike = Union[Decimal, int, float, str]
CommitListener = Callable[[LedgerEntry], None]


def _to_decimal(value: Any, name: str) -> Decimal:
    """Parse a numeric input, rejecting booleans, garbage and non-finite values."""
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{name} is required")
    try:
        number = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{name} must be a number, got {value!r}")
    if not number.is_finite():
        raise ValidationError(f"{name} must be finite")
    return number


def _to_positive_decimal(value: Any, name: str) -> Decimal:
    number = _to_decimal(value, name)
    if number <= 0:
        raise ValidationError(f"{name} must be greater than 0")
    return number


def require_id(value: Optional[str], name: str) -> str:
    """Stripped identifier; blank or missing raises ValidationError."""
    if value is None or not str(value).strip():
        raise ValidationError(f"{name} is required")
    return str(value).strip()


class PortfolioLedger:
    """
    Owns per-user cash and positions and applies buy/sell mutations.

    Each mutation runs inside one unit of work: the cash change, the position
    upsert/delete and the ledger append commit together or not at all.
    Mutations on the same (user, asset) pair are serialized by an in-process
    lock; across pairs they run in parallel. Cash is shared by every pair of
    a user, so balance checks and writes go through a version-checked swap
    that re-reads on conflict and can never go negative. Position writes are
    version-checked too, so a writer from another process cannot be silently
    overwritten.

    Prices are supplied by the caller; the ledger never talks to the market.
    """

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        starting_cash: Decimal = Decimal("10000"),
        clock: Callable[[], datetime] = now_utc,
    ):
        self._uow_factory = uow_factory
        self._starting_cash = Decimal(starting_cash)
        self._clock = clock
        self._locks = KeyedLock()
        self._listeners: list[CommitListener] = []

    def add_listener(self, listener: CommitListener) -> None:
        """Register a callable invoked with each committed LedgerEntry."""
        self._listeners.append(listener)

    # --- Accounts ---

    def open_account(self, user_id: str, initial_cash: Optional[NumberLike] = None) -> Account:
        """
        Create an account funded with initial_cash (the configured starting cash by default).

        Raises:
            ValidationError: missing user ID, negative cash, or account already exists
        """
        user_id = require_id(user_id, "user_id")
        cash = self._starting_cash if initial_cash is None else _to_decimal(initial_cash, "initial_cash")
        if cash < 0:
            raise ValidationError("initial_cash cannot be negative")

        with self._uow_factory() as uow:
            if uow.accounts.get_by_id(user_id) is not None:
                raise ValidationError(f"Account for user '{user_id}' already exists")
            account = uow.accounts.create(
                Account(user_id=user_id, cash_balance=cash, created_at=self._clock())
            )
            uow.commit()
        logger.info("Opened account %s with %s cash", user_id, cash)
        return account

    def get_account(self, user_id: str) -> Account:
        """Get account by user ID."""
        user_id = require_id(user_id, "user_id")
        with self._uow_factory() as uow:
            account = uow.accounts.get_by_id(user_id)
        if account is None:
            raise NotFoundError("Account", user_id)
        return account

    # --- Positions ---

    def get_position(self, user_id: str, asset_id: str) -> Optional[Position]:
        """Current position for a pair, or None if nothing is held."""
        user_id = require_id(user_id, "user_id")
        asset_id = require_id(asset_id, "asset_id").lower()
        with self._uow_factory() as uow:
            return uow.positions.get(user_id, asset_id)

    def list_positions(self, user_id: str) -> list[Position]:
        """All positions held by a user."""
        user_id = require_id(user_id, "user_id")
        with self._uow_factory() as uow:
            return uow.positions.list_by_user(user_id)

    # --- Mutations ---

    def buy(
        self,
        user_id: str,
        asset_id: str,
        quantity: NumberLike,
        price: NumberLike,
    ) -> TradeResult:
        """
        Buy quantity units of asset_id at price.

        Debits quantity x price from cash and folds the purchase into the
        average cost: (old_qty x old_avg + cost) / (old_qty + qty).

        Raises:
            ValidationError: bad identifiers, non-positive or non-finite numbers
            NotFoundError: no account for user_id
            InsufficientFundsError: cash balance below the total cost
        """
        user_id = require_id(user_id, "user_id")
        asset_id = require_id(asset_id, "asset_id").lower()
        quantity = _to_positive_decimal(quantity, "quantity")
        price = _to_positive_decimal(price, "price")
        total_cost = quantity * price

        with self._locks.hold((user_id, asset_id)):
            with self._uow_factory() as uow:
                account = uow.accounts.get_by_id(user_id)
                if account is None:
                    raise NotFoundError("Account", user_id)

                if not uow.accounts.debit_if_sufficient(user_id, total_cost):
                    raise InsufficientFundsError(str(total_cost), str(account.cash_balance))

                now = self._clock()
                existing = uow.positions.get(user_id, asset_id, for_update=True)
                if existing is not None:
                    new_quantity = existing.quantity + quantity
                    position = Position(
                        user_id=user_id,
                        asset_id=asset_id,
                        quantity=new_quantity,
                        average_cost=(existing.invested + total_cost) / new_quantity,
                        version=existing.version + 1,
                        updated_at=now,
                    )
                    if not uow.positions.update_if_version(position, existing.version):
                        raise ConcurrentModificationError("Position", f"{user_id}/{asset_id}")
                else:
                    position = uow.positions.insert(
                        Position(
                            user_id=user_id,
                            asset_id=asset_id,
                            quantity=quantity,
                            average_cost=price,
                            updated_at=now,
                        )
                    )

                entry = uow.entries.append(
                    self._new_entry(user_id, asset_id, TradeSide.BUY, quantity, price, now)
                )
                cash_balance = uow.accounts.get_by_id(user_id).cash_balance
                uow.commit()

        logger.info("BUY %s %s @ %s for %s", quantity, asset_id, price, user_id)
        self._notify(entry)
        return TradeResult(entry=entry, cash_balance=cash_balance, position=position)

    def sell(
        self,
        user_id: str,
        asset_id: str,
        quantity: NumberLike,
        price: NumberLike,
    ) -> TradeResult:
        """
        Sell quantity units of asset_id at price.

        Credits quantity x price to cash. The average cost of remaining units
        is unchanged; selling everything deletes the position.

        Raises:
            ValidationError: bad identifiers, non-positive or non-finite numbers
            NotFoundError: no account for user_id
            InsufficientHoldingsError: no position, or fewer units held than requested
        """
        user_id = require_id(user_id, "user_id")
        asset_id = require_id(asset_id, "asset_id").lower()
        quantity = _to_positive_decimal(quantity, "quantity")
        price = _to_positive_decimal(price, "price")
        proceeds = quantity * price

        with self._locks.hold((user_id, asset_id)):
            with self._uow_factory() as uow:
                if uow.accounts.get_by_id(user_id) is None:
                    raise NotFoundError("Account", user_id)

                existing = uow.positions.get(user_id, asset_id, for_update=True)
                available = existing.quantity if existing is not None else Decimal("0")
                if existing is None or existing.quantity < quantity:
                    raise InsufficientHoldingsError(asset_id, str(quantity), str(available))

                now = self._clock()
                remaining = existing.quantity - quantity
                position: Optional[Position]
                if remaining == 0:
                    position = None
                    if not uow.positions.delete_if_version(user_id, asset_id, existing.version):
                        raise ConcurrentModificationError("Position", f"{user_id}/{asset_id}")
                else:
                    position = Position(
                        user_id=user_id,
                        asset_id=asset_id,
                        quantity=remaining,
                        average_cost=existing.average_cost,
                        version=existing.version + 1,
                        updated_at=now,
                    )
                    if not uow.positions.update_if_version(position, existing.version):
                        raise ConcurrentModificationError("Position", f"{user_id}/{asset_id}")

                if not uow.accounts.credit(user_id, proceeds):
                    raise NotFoundError("Account", user_id)

                entry = uow.entries.append(
                    self._new_entry(user_id, asset_id, TradeSide.SELL, quantity, price, now)
                )
                cash_balance = uow.accounts.get_by_id(user_id).cash_balance
                uow.commit()

        logger.info("SELL %s %s @ %s for %s", quantity, asset_id, price, user_id)
        self._notify(entry)
        return TradeResult(entry=entry, cash_balance=cash_balance, position=position)

    # --- History ---

    def history(
        self,
        user_id: str,
        side: Optional[Union[TradeSide, str]] = None,
        sort_by: Optional[str] = None,
        order: Optional[str] = None,
    ) -> list[LedgerEntry]:
        """
        Transaction history for a user.

        side filters to buy or sell ("all" or None for both). Unknown sort
        fields fall back to timestamp descending; order defaults to desc.
        """
        user_id = require_id(user_id, "user_id")
        side_filter = self._parse_side(side)

        try:
            sort_field = HistorySortField(sort_by) if sort_by else HistorySortField.TIMESTAMP
            sort_order = SortOrder.ASC if order == SortOrder.ASC.value else SortOrder.DESC
        except ValueError:
            sort_field, sort_order = HistorySortField.TIMESTAMP, SortOrder.DESC

        with self._uow_factory() as uow:
            return uow.entries.query(
                user_id=user_id,
                side=side_filter,
                sort_by=sort_field,
                order=sort_order,
            )

    # --- Internal ---

    @staticmethod
    def _parse_side(side: Optional[Union[TradeSide, str]]) -> Optional[TradeSide]:
        if side is None or isinstance(side, TradeSide):
            return side
        normalized = side.strip().lower()
        if normalized in ("", "all"):
            return None
        try:
            return TradeSide(normalized)
        except ValueError:
            raise ValidationError(f"side must be 'buy' or 'sell', got {side!r}")

    @staticmethod
    def _new_entry(
        user_id: str,
        asset_id: str,
        side: TradeSide,
        quantity: Decimal,
        price: Decimal,
        timestamp: datetime,
    ) -> LedgerEntry:
        return LedgerEntry(
            entry_id=str(uuid.uuid4()),
            user_id=user_id,
            asset_id=asset_id,
            side=side,
            quantity=quantity,
            price=price,
            total=quantity * price,
            timestamp=timestamp,
        )

    def _notify(self, entry: LedgerEntry) -> None:
        # The mutation is already committed; a failing listener must not undo it
        for listener in self._listeners:
            try:
                listener(entry)
            except Exception:
                logger.exception("Ledger commit listener failed for entry %s", entry.entry_id)
