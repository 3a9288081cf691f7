"""SQLAlchemy implementation of PositionRepository."""

from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from chainxchange.core.exceptions import ConcurrentModificationError
from chainxchange.core.timezone import now_utc, to_utc
from chainxchange.domain.models import Position
from chainxchange.repositories.sqlalchemy.orm_models import PositionORM


class SqlAlchemyPositionRepository:
    """SQLAlchemy-backed position repository with version-checked writes."""

    def __init__(self, db: Session):
        self._db = db

    def get(self, user_id: str, asset_id: str, for_update: bool = False) -> Optional[Position]:
        """Retrieve the position for a (user, asset) pair."""
        query = self._db.query(PositionORM).filter(
            PositionORM.user_id == user_id,
            PositionORM.asset_id == asset_id,
        )
        if for_update:
            query = query.with_for_update()
        orm_pos = query.first()
        return self._to_domain(orm_pos) if orm_pos else None

    def list_by_user(self, user_id: str) -> list[Position]:
        """List all positions for a user, ordered by asset ID."""
        orm_positions = (
            self._db.query(PositionORM)
            .filter(PositionORM.user_id == user_id)
            .order_by(PositionORM.asset_id)
            .all()
        )
        return [self._to_domain(p) for p in orm_positions]

    def insert(self, position: Position) -> Position:
        """Persist a new position."""
        orm_pos = PositionORM(
            user_id=position.user_id,
            asset_id=position.asset_id,
            quantity=position.quantity,
            average_cost=position.average_cost,
            version=position.version,
            updated_at=position.updated_at or now_utc(),
        )
        self._db.add(orm_pos)
        try:
            self._db.flush()
        except IntegrityError as exc:
            # Another writer created the same pair first
            raise ConcurrentModificationError(
                "Position", f"{position.user_id}/{position.asset_id}"
            ) from exc
        return self._to_domain(orm_pos)

    def update_if_version(self, position: Position, expected_version: int) -> bool:
        """Compare-and-swap on the version column."""
        updated = (
            self._db.query(PositionORM)
            .filter(
                PositionORM.user_id == position.user_id,
                PositionORM.asset_id == position.asset_id,
                PositionORM.version == expected_version,
            )
            .update(
                {
                    PositionORM.quantity: position.quantity,
                    PositionORM.average_cost: position.average_cost,
                    PositionORM.version: expected_version + 1,
                    PositionORM.updated_at: position.updated_at or now_utc(),
                },
                synchronize_session=False,
            )
        )
        self._db.expire_all()
        return updated == 1

    def delete_if_version(self, user_id: str, asset_id: str, expected_version: int) -> bool:
        """Delete the position only if nobody changed it since it was read."""
        deleted = (
            self._db.query(PositionORM)
            .filter(
                PositionORM.user_id == user_id,
                PositionORM.asset_id == asset_id,
                PositionORM.version == expected_version,
            )
            .delete(synchronize_session=False)
        )
        self._db.expire_all()
        return deleted == 1

    @staticmethod
    def _to_domain(orm: PositionORM) -> Position:
        """Convert ORM model to domain model."""
        return Position(
            user_id=orm.user_id,
            asset_id=orm.asset_id,
            quantity=orm.quantity,
            average_cost=orm.average_cost,
            version=orm.version or 0,
            updated_at=to_utc(orm.updated_at) if orm.updated_at else None,
        )
