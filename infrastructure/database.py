"""MongoDB connection handle shared by the stores"""
import logging
from datetime import timezone
from typing import Optional

from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import PyMongoError

logger = logging.getLogger(__name__)

PROFILES_COLLECTION = "perfis"
USERS_COLLECTION = "usuarios"


class DatabaseConnectionError(RuntimeError):
    """Raised when the database cannot be reached at startup"""


class MongoDatabase:
    """Owns one MongoClient for the lifetime of the process.

    ``client`` may be supplied directly (mongomock in tests); otherwise it is
    built from ``url`` on :meth:`connect`.
    """

    def __init__(
        self,
        url: Optional[str],
        name: str,
        timeout_ms: int = 10000,
        client: Optional[MongoClient] = None,
    ):
        self.url = url
        self.name = name
        self.timeout_ms = timeout_ms
        self._client = client

    @property
    def client(self) -> MongoClient:
        if self._client is None:
            raise DatabaseConnectionError("Database is not connected")
        return self._client

    @property
    def db(self) -> Database:
        return self.client[self.name]

    def connect(self) -> "MongoDatabase":
        """Create the client if needed and confirm the server answers a ping"""
        if self._client is None:
            self._client = MongoClient(
                self.url,
                serverSelectionTimeoutMS=self.timeout_ms,
                connectTimeoutMS=self.timeout_ms,
                tz_aware=True,
                tzinfo=timezone.utc,
            )
        try:
            self._client.admin.command("ping")
        except PyMongoError as exc:
            logger.error("Database ping failed: %s", exc)
            raise DatabaseConnectionError(f"Could not connect to database: {exc}") from exc
        logger.info("Database connection established (%s)", self.name)
        return self

    def ping(self) -> bool:
        try:
            self.client.admin.command("ping")
        except (PyMongoError, DatabaseConnectionError) as exc:
            logger.warning("Database health check failed: %s", exc)
            return False
        return True

    def collection(self, name: str) -> Collection:
        return self.db[name]

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
            logger.info("Database connection closed")
