"""MongoDB database connection using Motor (async driver)."""
import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING

from kaizen.config import settings

logger = logging.getLogger(__name__)


class Database:
    """MongoDB database connection manager."""

    client: AsyncIOMotorClient | None = None
    db: AsyncIOMotorDatabase | None = None

    async def connect(self) -> None:
        """Connect to MongoDB and make sure indexes exist."""
        self.client = AsyncIOMotorClient(settings.mongodb_url, tz_aware=True)
        self.db = self.client[settings.mongodb_db_name]
        await ensure_indexes(self.db)
        logger.info("Connected to MongoDB: %s", settings.mongodb_db_name)

    async def disconnect(self) -> None:
        """Disconnect from MongoDB."""
        if self.client:
            self.client.close()
            logger.info("Disconnected from MongoDB")

    def get_collection(self, name: str):
        """Get a MongoDB collection."""
        if self.db is None:
            raise RuntimeError("Database not connected")
        return self.db[name]


async def ensure_indexes(db) -> None:
    """
    Create the indexes the services rely on.

    An open time entry carries ``running_user_id``; closing it unsets the
    field. The unique sparse index on that field means a second open entry
    for the same user can never be inserted, even by concurrent requests.
    """
    await db["users"].create_index("email", unique=True)
    await db["time_entries"].create_index(
        [("user_id", ASCENDING), ("start_time", DESCENDING)]
    )
    await db["time_entries"].create_index(
        "running_user_id", unique=True, sparse=True
    )
    await db["tasks"].create_index([("user_id", ASCENDING), ("project_id", ASCENDING)])
    await db["projects"].create_index("user_id")


# Global database instance
database = Database()


async def get_database() -> AsyncIOMotorDatabase:
    """Dependency to get database instance."""
    if database.db is None:
        raise RuntimeError("Database not connected")
    return database.db
