"""MongoDB database connection using Motor (async driver)."""
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from motor.motor_asyncio import (
    AsyncIOMotorClient,
    AsyncIOMotorClientSession,
    AsyncIOMotorDatabase,
)

from timesheet_api.config import settings

logger = logging.getLogger(__name__)


class Database:
    """MongoDB database connection manager."""

    client: AsyncIOMotorClient | None = None
    db: AsyncIOMotorDatabase | None = None

    async def connect(self) -> None:
        """Connect to MongoDB."""
        self.client = AsyncIOMotorClient(settings.mongodb_url)
        self.db = self.client[settings.mongodb_db_name]
        logger.info("Connected to MongoDB: %s", settings.mongodb_db_name)

    async def disconnect(self) -> None:
        """Disconnect from MongoDB."""
        if self.client is not None:
            self.client.close()
            logger.info("Disconnected from MongoDB")

    def get_collection(self, name: str):
        """Get a MongoDB collection."""
        if self.db is None:
            raise RuntimeError("Database not connected")
        return self.db[name]


# Global database instance
database = Database()


async def get_database() -> AsyncIOMotorDatabase:
    """Dependency to get database instance."""
    if database.db is None:
        raise RuntimeError("Database not connected")
    return database.db


@asynccontextmanager
async def unit_of_work(db) -> AsyncIterator[Optional[AsyncIOMotorClientSession]]:
    """
    Group several writes into one atomic unit.

    With ``mongodb_use_transactions`` enabled this opens a session and a
    multi-document transaction that is committed when the block exits cleanly
    and aborted when it raises. Otherwise it yields ``None`` and callers rely on
    single-document atomicity and conditional updates.

    Example:
        >>> async with unit_of_work(db) as session:
        ...     await db["invoices"].insert_one(doc, session=session)
    """
    if not settings.mongodb_use_transactions:
        yield None
        return

    async with await db.client.start_session() as session:
        async with session.start_transaction():
            yield session
