"""
Seed the product catalog with a small sample set.

Usage: python scripts/seed_products.py
"""

import asyncio
import logging
from datetime import datetime, timezone

from ectracc.config import settings
from ectracc.services.document_store import connect_document_store

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logger = logging.getLogger("seed_products")

SAMPLE_PRODUCTS = [
    {
        "barcode": "3017620422003",
        "product_name": "Nutella Spread",
        "brands": ["Ferrero"],
        "categories": ["Spreads", "Sweet spreads", "Chocolate spreads"],
        "ecoscore_grade": "D",
        "carbon_footprint": 3.2,
        "nutrition_info": {"energy_100g": 2255, "fat_100g": 30.9, "sugars_100g": 56.3},
    },
    {
        "barcode": "3017624047434",
        "product_name": "Organic Peanut Butter",
        "brands": ["Earth Natural"],
        "categories": ["Spreads", "Nut spreads", "Peanut butter"],
        "ecoscore_grade": "B",
        "carbon_footprint": 1.8,
        "nutrition_info": {"energy_100g": 2580, "fat_100g": 51.0, "proteins_100g": 26.0},
    },
    {
        "barcode": "8076800195057",
        "product_name": "San Pellegrino Sparkling Water",
        "brands": ["San Pellegrino"],
        "categories": ["Beverages", "Waters", "Sparkling waters"],
        "ecoscore_grade": "A",
        "carbon_footprint": 0.3,
        "nutrition_info": {"energy_100g": 0, "salt_100g": 0.036},
    },
    {
        "barcode": "3168930010883",
        "product_name": "Organic Bananas",
        "brands": ["Bio Organic"],
        "categories": ["Plant-based foods", "Fruits", "Fresh fruits", "Bananas"],
        "ecoscore_grade": "A",
        "carbon_footprint": 0.7,
        "nutrition_info": {"energy_100g": 371, "sugars_100g": 17.2},
    },
    {
        "barcode": "4000417025005",
        "product_name": "Beef Burger Patties",
        "brands": ["Premium Meat Co"],
        "categories": ["Meats", "Prepared meats", "Beef preparations"],
        "ecoscore_grade": "E",
        "carbon_footprint": 15.2,
        "nutrition_info": {"energy_100g": 1050, "fat_100g": 20.0, "proteins_100g": 18.0},
    },
    {
        "barcode": "5449000000996",
        "product_name": "Cola Classic",
        "brands": ["Coca-Cola"],
        "categories": ["Beverages", "Carbonated drinks", "Sodas"],
        "ecoscore_grade": "C",
        "nutrition_info": {"energy_100g": 180, "sugars_100g": 10.6},
    },
]


async def seed():
    client, store = await connect_document_store(settings)
    if store is None:
        raise SystemExit("MongoDB is not reachable; check MONGODB_URI")
    try:
        now = datetime.now(timezone.utc)
        for product in SAMPLE_PRODUCTS:
            await store.collection.update_one(
                {"barcode": product["barcode"]},
                {"$set": {**product, "last_updated": now}},
                upsert=True,
            )
        logger.info(f"Seeded {len(SAMPLE_PRODUCTS)} products")
    finally:
        client.close()


if __name__ == "__main__":
    asyncio.run(seed())
