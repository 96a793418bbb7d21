import logging
from typing import Optional

from bson.codec_options import DatetimeConversion
from pymongo import AsyncMongoClient
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import PyMongoError

logger = logging.getLogger(__name__)


# Out-of-range dates and invalid UTF-8 decode instead of failing the whole batch.
DECODE_OPTIONS = {
    "datetime_conversion": DatetimeConversion.DATETIME_AUTO,
    "unicode_decode_error_handler": "replace",
}


class MongoConnection:
    """
    Process-wide handle to MongoDB.

    Opened once in the application lifespan and shared by every request.
    The client pools its own connections and is safe for concurrent use, so
    no locking is done here. When no client could be created the holder is
    left unset and reports degrade to the empty response.
    """

    def __init__(self, client: Optional[AsyncMongoClient] = None):
        self.client = client

    @classmethod
    def open(cls, uri: str, **client_options) -> "MongoConnection":
        if not uri:
            logger.info("No MongoDB connection string configured, reports will be empty")
            return cls()
        try:
            client = AsyncMongoClient(uri, **{**DECODE_OPTIONS, **client_options})
        except (PyMongoError, ValueError) as e:
            logger.error("Error creating mongodb connection: %s", e)
            return cls()
        logger.info("Created mongodb connection for %s", uri)
        return cls(client)

    @property
    def is_connected(self) -> bool:
        return self.client is not None

    def database(self, name: str) -> Optional[AsyncDatabase]:
        if self.client is None:
            return None
        return self.client[name]

    async def close(self) -> None:
        if self.client is not None:
            await self.client.close()
            self.client = None
            logger.info("MongoDB connection closed")
