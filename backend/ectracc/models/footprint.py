"""
Footprint database model: one logged carbon-emitting activity.
"""

from sqlalchemy import Column, Integer, String, Float, DateTime, Index, CheckConstraint
from datetime import datetime

from ectracc.database import Base

FOOTPRINT_CATEGORIES = ("food", "transport", "energy", "shopping", "misc")


class Footprint(Base):
    """A user's footprint entry, traceable to a product barcode or a manual item."""

    __tablename__ = "footprints"
    __table_args__ = (
        Index("idx_footprint_user_logged", "user_id", "logged_at"),
        CheckConstraint(
            "(product_barcode IS NULL) <> (manual_item IS NULL)",
            name="ck_footprint_item_source",
        ),
        CheckConstraint("amount > 0 AND amount <= 10000", name="ck_footprint_amount"),
        CheckConstraint(
            "carbon_total > 0 AND carbon_total <= 100000", name="ck_footprint_carbon_total"
        ),
        CheckConstraint(
            "category IN ('food', 'transport', 'energy', 'shopping', 'misc')",
            name="ck_footprint_category",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), nullable=False, index=True)  # identity provider subject
    product_barcode = Column(String(14), nullable=True)
    manual_item = Column(String(100), nullable=True)
    amount = Column(Float, nullable=False)
    carbon_total = Column(Float, nullable=False)  # kg CO2e
    category = Column(String(20), nullable=False)
    logged_at = Column(DateTime, nullable=False, index=True)  # naive UTC
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "product_barcode": self.product_barcode,
            "manual_item": self.manual_item,
            "amount": self.amount,
            "carbon_total": self.carbon_total,
            "category": self.category,
            "logged_at": self.logged_at.isoformat() if self.logged_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
