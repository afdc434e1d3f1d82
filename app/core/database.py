import asyncio
import logging
from typing import Any, Callable, Dict, Optional, Tuple

from pymongo import AsyncMongoClient
from pymongo.errors import OperationFailure

from app.core.config import settings
from app.core.exceptions import DatabaseError

logger = logging.getLogger(__name__)


class MongoConnector:
    """Owns the single MongoDB client for the lifetime of the process.

    The client is created on first use and cached together with the database
    handle; later calls hand out the cached pair. Concurrent first calls wait
    on the same lock, so only one connection is ever opened.
    """

    def __init__(
        self,
        uri: Optional[str],
        db_name: str,
        client_factory: Callable[..., Any] = AsyncMongoClient,
        unique_indexes: Optional[Dict[str, str]] = None,
    ):
        self.uri = uri
        self.db_name = db_name
        self._client_factory = client_factory
        # collection name -> field that must be unique
        self._unique_indexes = unique_indexes or {}
        self._client = None
        self._db = None
        self._lock = asyncio.Lock()

    @property
    def connected(self) -> bool:
        return self._client is not None and self._db is not None

    async def get_handle(self) -> Tuple[Any, Any]:
        """Return (client, database), connecting on the first call."""
        if self.connected:
            return self._client, self._db

        async with self._lock:
            if self.connected:
                return self._client, self._db

            if not self.uri:
                raise DatabaseError("MONGODB_URI is not set")

            client = self._client_factory(self.uri)
            try:
                await client.aconnect()
                db = client[self.db_name]
                await self._ensure_indexes(db)
            except Exception:
                # Nothing is cached; the next call connects from scratch
                await client.close()
                raise

            self._client = client
            self._db = db
            logger.info(f"Connected to MongoDB database '{self.db_name}'")

        return self._client, self._db

    async def get_collection(self, name: str):
        _, db = await self.get_handle()
        return db[name]

    async def _ensure_indexes(self, db) -> None:
        for collection, field in self._unique_indexes.items():
            try:
                await db[collection].create_index(field, unique=True)
            except OperationFailure as e:
                # Existing duplicates block the index; keep serving without it
                logger.warning(f"Could not create unique index on {collection}.{field}: {e}")

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
        self._client = None
        self._db = None


_connector: Optional[MongoConnector] = None


def get_connector() -> MongoConnector:
    global _connector
    if _connector is None:
        unique = {settings.WAITLIST_COLLECTION: "email"} if settings.WAITLIST_UNIQUE_INDEX else {}
        _connector = MongoConnector(
            settings.MONGODB_URI,
            settings.MONGODB_DB_NAME,
            unique_indexes=unique,
        )
    return _connector
