"""
Goal database model.
"""

from sqlalchemy import Column, Integer, String, Float, DateTime, CheckConstraint, UniqueConstraint
from datetime import datetime

from ectracc.database import Base

GOAL_TIMEFRAMES = ("weekly", "monthly")


class Goal(Base):
    """Per-user carbon target; at most one per (user, timeframe)."""

    __tablename__ = "goals"
    __table_args__ = (
        UniqueConstraint("user_id", "timeframe", name="uq_goal_user_timeframe"),
        CheckConstraint("timeframe IN ('weekly', 'monthly')", name="ck_goal_timeframe"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), nullable=False, index=True)
    target_value = Column(Float, nullable=False)  # kg CO2e
    timeframe = Column(String(10), nullable=False)
    description = Column(String(200), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "target_value": self.target_value,
            "timeframe": self.timeframe,
            "description": self.description,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
