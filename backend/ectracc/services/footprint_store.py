"""
Row store for footprint entries and goals, backed by SQLAlchemy.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import DisconnectionError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from ectracc.core.errors import InternalServiceError, ServiceUnavailableError
from ectracc.models.footprint import Footprint
from ectracc.models.goal import Goal

logger = logging.getLogger(__name__)


def to_utc_naive(value: datetime) -> datetime:
    """Timestamps are stored as naive UTC."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class SqlFootprintStore:
    """Row Store capability over one SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    def insert(self, row: Dict[str, Any]) -> Footprint:
        data = dict(row)
        data["logged_at"] = to_utc_naive(data["logged_at"])
        footprint = Footprint(**data)
        try:
            self.db.add(footprint)
            self.db.commit()
            self.db.refresh(footprint)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise _translate(e) from e
        logger.info(f"Footprint {footprint.id} logged for user {footprint.user_id}")
        return footprint

    def query(
        self,
        user_id: str,
        start: datetime,
        end: datetime,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> List[Footprint]:
        """Entries of one user with ``start <= logged_at <= end``, oldest first."""
        q = (
            self.db.query(Footprint)
            .filter(
                Footprint.user_id == user_id,
                Footprint.logged_at >= to_utc_naive(start),
                Footprint.logged_at <= to_utc_naive(end),
            )
            .order_by(Footprint.logged_at.asc(), Footprint.id.asc())
        )
        if offset:
            q = q.offset(offset)
        if limit is not None:
            q = q.limit(limit)
        try:
            return q.all()
        except SQLAlchemyError as e:
            raise _translate(e) from e

    def list_goals(self, user_id: str) -> List[Goal]:
        try:
            return (
                self.db.query(Goal)
                .filter(Goal.user_id == user_id)
                .order_by(Goal.created_at.desc(), Goal.id.desc())
                .all()
            )
        except SQLAlchemyError as e:
            raise _translate(e) from e

    def upsert_goal(self, user_id: str, data: Dict[str, Any]) -> Goal:
        """Update the user's goal for the timeframe, or create it."""
        try:
            goal = (
                self.db.query(Goal)
                .filter(Goal.user_id == user_id, Goal.timeframe == data["timeframe"])
                .first()
            )
            if goal:
                goal.target_value = data["target_value"]
                goal.description = data.get("description")
                goal.updated_at = datetime.utcnow()
            else:
                goal = Goal(user_id=user_id, **data)
                self.db.add(goal)
            self.db.commit()
            self.db.refresh(goal)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise _translate(e) from e
        return goal


def _translate(error: SQLAlchemyError) -> Exception:
    if isinstance(error, (OperationalError, DisconnectionError)):
        return ServiceUnavailableError(f"Footprint store unreachable: {error}")
    return InternalServiceError(f"Footprint store error: {error}")
