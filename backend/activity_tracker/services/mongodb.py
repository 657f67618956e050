from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import PyMongoError
from typing import Any, Dict, Optional
import logging

from ..core.config import get_settings
from ..core.exceptions import StoreUnavailableError
from .store import ActivityStore

logger = logging.getLogger(__name__)

# Global client shared by every store instance
client: Optional[AsyncIOMotorClient] = None


async def connect_to_mongodb() -> AsyncIOMotorClient:
    """Create the database connection."""
    global client
    settings = get_settings()

    if client is None:
        client = AsyncIOMotorClient(settings.MONGO_URI, tz_aware=True, serverSelectionTimeoutMS=5000)
        logger.info(f"✅ Connected to MongoDB database {settings.DATABASE_NAME}")
    return client


async def close_mongodb_connection() -> None:
    """Close the database connection."""
    global client
    if client:
        client.close()
        client = None
        logger.info("MongoDB connection closed")


def get_collection(mongo_client: AsyncIOMotorClient):
    """Get the daily activity collection."""
    settings = get_settings()
    return mongo_client[settings.DATABASE_NAME][settings.ACTIVITY_COLLECTION]


class MongoActivityStore(ActivityStore):
    """Daily activity documents in a MongoDB collection, keyed by ``_id``."""

    def __init__(self, collection):
        self.collection = collection

    async def get(self, key: str) -> Optional[Dict[str, Any]]:
        try:
            return await self.collection.find_one({"_id": key})
        except PyMongoError as e:
            logger.error(f"❌ Error reading activity document {key}: {e}")
            raise StoreUnavailableError(f"Failed to read {key}: {e}") from e

    async def merge(self, key: str, fields: Dict[str, Any]) -> None:
        try:
            await self.collection.update_one(
                {"_id": key},
                {
                    "$set": fields,
                    "$currentDate": {"updatedAt": True}
                },
                upsert=True
            )
        except PyMongoError as e:
            logger.error(f"❌ Error writing activity document {key}: {e}")
            raise StoreUnavailableError(f"Failed to write {key}: {e}") from e

    async def ping(self) -> bool:
        try:
            await self.collection.database.command("ping")
            return True
        except PyMongoError as e:
            logger.warning(f"MongoDB ping failed: {e}")
            return False

    async def close(self) -> None:
        await close_mongodb_connection()


async def create_mongo_store() -> MongoActivityStore:
    """Connect and return a store over the activity collection."""
    mongo_client = await connect_to_mongodb()
    collection = get_collection(mongo_client)

    try:
        await collection.create_index([("userId", 1), ("date", 1)])
    except PyMongoError as e:
        logger.warning(f"⚠️ Could not create activity indexes: {e}")

    return MongoActivityStore(collection)
