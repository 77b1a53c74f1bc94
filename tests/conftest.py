"""
Pytest configuration - shared fixtures
"""
import sys
import os
from datetime import datetime
from typing import Generator
from unittest.mock import AsyncMock

import pytest
from bson import ObjectId
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

# Add backend directory to sys.path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../backend"))

# Keep the app's own engine off disk and requests unthrottled
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

from ectracc.database import Base
from ectracc.models.footprint import Footprint
from ectracc.models.goal import Goal  # noqa: F401
from ectracc.services.catalog_service import CatalogService
from ectracc.services.footprint_service import FootprintService
from ectracc.services.footprint_store import SqlFootprintStore


@pytest.fixture
def test_db() -> Generator[Session, None, None]:
    """Create in-memory SQLite database for testing"""
    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine)
    session = SessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)


@pytest.fixture
def footprint_service(test_db) -> FootprintService:
    return FootprintService(SqlFootprintStore(test_db))


@pytest.fixture
def mock_store() -> AsyncMock:
    """Document store double; tests set return values per call."""
    store = AsyncMock()
    store.aggregate.return_value = []
    store.find_one.return_value = None
    store.query.return_value = []
    store.count.return_value = 0
    return store


@pytest.fixture
def catalog(mock_store) -> CatalogService:
    return CatalogService(mock_store)


@pytest.fixture
def sample_products():
    """Catalog documents as the store returns them"""
    return [
        {
            "_id": ObjectId("64b000000000000000000001"),
            "barcode": "8076800195057",
            "product_name": "San Pellegrino Sparkling Water",
            "brands": ["San Pellegrino"],
            "categories": ["Beverages", "Waters", "Sparkling waters"],
            "ecoscore_grade": "A",
            "carbon_footprint": 0.3,
            "last_updated": datetime(2024, 5, 1),
        },
        {
            "_id": ObjectId("64b000000000000000000002"),
            "barcode": "4000417025005",
            "product_name": "Beef Burger Patties",
            "brands": ["Premium Meat Co"],
            "categories": ["Meats", "Prepared meats", "Beef preparations"],
            "ecoscore_grade": "E",
            "carbon_footprint": 15.2,
            "last_updated": datetime(2024, 5, 1),
        },
    ]


@pytest.fixture
def add_footprint(test_db):
    """Insert a footprint row directly"""
    def _add(user_id="user-1", carbon_total=1.0, category="food", logged_at=None, **extra):
        row = Footprint(
            user_id=user_id,
            manual_item=extra.pop("manual_item", None if "product_barcode" in extra else "Groceries"),
            amount=extra.pop("amount", 1.0),
            carbon_total=carbon_total,
            category=category,
            logged_at=logged_at or datetime(2024, 6, 12, 12, 0),
            **extra,
        )
        test_db.add(row)
        test_db.commit()
        return row
    return _add
