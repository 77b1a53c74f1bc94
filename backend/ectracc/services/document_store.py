"""
MongoDB-backed document store for the product catalog.

Wraps a motor collection behind the small set of calls the catalog engine
needs and translates driver errors into service errors. Connection
lifecycle belongs to the application lifespan, not to this class.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection
from pymongo import ASCENDING, TEXT
from pymongo.errors import ConnectionFailure, PyMongoError

from ectracc.config import Settings
from ectracc.core.errors import InternalServiceError, ServiceUnavailableError

logger = logging.getLogger(__name__)

TEXT_INDEX_NAME = "product_search_text"
TEXT_INDEX_WEIGHTS = {"product_name": 10, "brands": 5, "categories": 1}


class MongoDocumentStore:
    """Document Store capability over a single motor collection."""

    def __init__(self, collection: AsyncIOMotorCollection):
        self.collection = collection

    async def find_one(
        self, filter: Dict[str, Any], projection: Optional[Dict[str, Any]] = None
    ) -> Optional[Dict[str, Any]]:
        try:
            return await self.collection.find_one(filter, projection)
        except PyMongoError as e:
            raise _translate(e) from e

    async def query(
        self,
        filter: Dict[str, Any],
        sort: Optional[List[Tuple[str, int]]] = None,
        skip: int = 0,
        limit: int = 0,
        projection: Optional[Dict[str, Any]] = None,
    ) -> List[Dict[str, Any]]:
        try:
            cursor = self.collection.find(filter, projection)
            if sort:
                cursor = cursor.sort(sort)
            return await cursor.skip(skip).limit(limit).to_list(length=None)
        except PyMongoError as e:
            raise _translate(e) from e

    async def count(self, filter: Dict[str, Any]) -> int:
        try:
            return await self.collection.count_documents(filter)
        except PyMongoError as e:
            raise _translate(e) from e

    async def aggregate(self, pipeline: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        try:
            return await self.collection.aggregate(pipeline).to_list(length=None)
        except PyMongoError as e:
            raise _translate(e) from e

    async def ensure_indexes(self) -> None:
        """Create the catalog indexes; failures are logged, not raised."""
        try:
            await self.collection.create_index([("barcode", ASCENDING)], unique=True)
            await self.collection.create_index(
                [("product_name", TEXT), ("brands", TEXT), ("categories", TEXT)],
                name=TEXT_INDEX_NAME,
                weights=TEXT_INDEX_WEIGHTS,
            )
            await self.collection.create_index([("ecoscore_grade", ASCENDING)])
            await self.collection.create_index([("carbon_footprint", ASCENDING)])
            await self.collection.create_index(
                [("categories", ASCENDING), ("ecoscore_grade", ASCENDING)]
            )
            logger.info("Product indexes ensured")
        except PyMongoError as e:
            logger.warning(f"Product indexes already exist or could not be created: {e}")


def _translate(error: PyMongoError) -> Exception:
    if isinstance(error, ConnectionFailure):
        return ServiceUnavailableError(f"Document store unreachable: {error}")
    return InternalServiceError(f"Document store error: {error}")


async def connect_document_store(
    settings: Settings,
) -> Tuple[Optional[AsyncIOMotorClient], Optional[MongoDocumentStore]]:
    """
    Connect to MongoDB and return ``(client, store)``.

    Returns ``(None, None)`` when the server cannot be reached so the API
    can still start; catalog routes then answer 503.
    """
    logger.info("Connecting to MongoDB...")
    client = AsyncIOMotorClient(
        settings.MONGODB_URI, serverSelectionTimeoutMS=settings.MONGODB_TIMEOUT_MS
    )
    try:
        await client.admin.command("ping")
    except PyMongoError as e:
        logger.warning(f"MongoDB connection failed: {e}")
        client.close()
        return None, None

    store = MongoDocumentStore(client[settings.MONGODB_DATABASE][settings.PRODUCTS_COLLECTION])
    await store.ensure_indexes()
    logger.info("Connected to MongoDB")
    return client, store
