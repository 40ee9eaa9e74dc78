import logging
from datetime import datetime, timezone
from typing import List, Optional

import certifi
from bson.errors import InvalidDocument
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import PyMongoError

from georeport.errors import StorageError
from georeport.models import LOCATIONS, REPORTS, SOURCE_REVIEWS, serialize_doc

logger = logging.getLogger(__name__)

COLLECTIONS = (REPORTS, SOURCE_REVIEWS, LOCATIONS)


class MongoStore:
    """
    Owns the MongoDB connection and exposes the two operations handlers need:
    insert one document, and read a whole collection in sorted order.
    """

    def __init__(
        self,
        uri: Optional[str] = None,
        db_name: str = "georeport",
        timeout_ms: int = 5000,
        database: Optional[AsyncIOMotorDatabase] = None,
    ):
        self.uri = uri
        self.db_name = db_name
        self.timeout_ms = timeout_ms
        self._client: Optional[AsyncIOMotorClient] = None
        self.db = database

    async def connect(self) -> None:
        if self.db is not None:
            return
        if not self.uri:
            raise StorageError("MONGO_URI is not set")

        kwargs = {"serverSelectionTimeoutMS": self.timeout_ms, "tz_aware": True}
        if self.uri.startswith("mongodb+srv://"):
            kwargs["tlsCAFile"] = certifi.where()

        client = AsyncIOMotorClient(self.uri, **kwargs)
        try:
            await client[self.db_name].command("ping")
        except PyMongoError as e:
            client.close()
            logger.error(f"❌ MongoDB connection failed: {e}")
            raise StorageError("MongoDB connection failed", cause=e) from e

        self._client = client
        self.db = client[self.db_name]
        logger.info(f"✅ Connected to MongoDB (db={self.db_name})")

    async def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
            self.db = None
            logger.info("🛑 MongoDB connection closed")

    def _database(self) -> AsyncIOMotorDatabase:
        if self.db is None:
            raise StorageError("Database not connected")
        return self.db

    async def ping(self) -> bool:
        try:
            await self._database().command("ping")
        except (PyMongoError, StorageError) as e:
            logger.warning(f"MongoDB ping failed: {e}")
            return False
        return True

    async def insert(self, collection: str, record: dict) -> str:
        doc = dict(record)
        doc.setdefault("timestamp", datetime.now(timezone.utc))
        try:
            res = await self._database()[collection].insert_one(doc)
        except PyMongoError as e:
            logger.error(f"Insert into {collection} failed: {e}")
            raise StorageError(f"Insert into {collection} failed", cause=e) from e
        except (InvalidDocument, OverflowError) as e:
            logger.error(f"Document for {collection} could not be encoded: {e}")
            raise StorageError(f"Insert into {collection} failed", cause=e) from e
        return str(res.inserted_id)

    async def find_all_sorted(
        self, collection: str, sort_key: str = "timestamp", descending: bool = True
    ) -> List[dict]:
        direction = DESCENDING if descending else ASCENDING
        try:
            cursor = self._database()[collection].find({}).sort(sort_key, direction)
            return [serialize_doc(d) async for d in cursor]
        except PyMongoError as e:
            logger.error(f"Read from {collection} failed: {e}")
            raise StorageError(f"Read from {collection} failed", cause=e) from e

    async def ensure_indexes(self) -> None:
        database = self._database()
        try:
            for name in COLLECTIONS:
                await database[name].create_index([("timestamp", DESCENDING)])
        except PyMongoError as e:
            raise StorageError("Index creation failed", cause=e) from e
        logger.info(f"Indexes ensured on {', '.join(COLLECTIONS)}")
