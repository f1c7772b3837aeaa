"""
MongoDB access shared by the whole process.

One ``MongoClient`` is created lazily on first use and reused by every request
thread. Concurrent first callers wait on the same lock, so only one client is
ever built. A failed connection attempt is not cached and the next caller
tries again.
"""
import logging
import os
import threading
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import PyMongoError

from errors import StoreUnavailable

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_NAME = "recipes"
DEFAULT_TIMEOUT_MS = 5000

_client: Optional[MongoClient] = None
_client_lock = threading.Lock()


def get_client() -> MongoClient:
    global _client

    if _client is not None:
        return _client

    with _client_lock:
        if _client is not None:
            return _client

        url = os.getenv("DATABASE_URL")
        if not url:
            logger.error("DATABASE_URL is not set; cannot connect to MongoDB")
            raise StoreUnavailable()

        timeout_ms = int(os.getenv("DATABASE_TIMEOUT_MS", DEFAULT_TIMEOUT_MS))
        logger.info("Establishing new MongoDB connection")
        client = MongoClient(url, serverSelectionTimeoutMS=timeout_ms)
        try:
            client.admin.command("ping")
        except PyMongoError:
            logger.exception("Failed to connect to MongoDB")
            client.close()
            raise StoreUnavailable()

        logger.info("MongoDB connection established")
        _client = client
        return _client


def get_db() -> Database:
    return get_client()[os.getenv("DATABASE_NAME", DEFAULT_DATABASE_NAME)]


def close_client() -> None:
    global _client

    with _client_lock:
        if _client is not None:
            _client.close()
            logger.info("MongoDB connection closed")
        _client = None


def create_document(collection: Collection, data: Dict[str, Any]) -> Dict[str, Any]:
    """Insert ``data`` stamped with ``createdAt``/``updatedAt`` and return the stored document."""
    now = datetime.now(timezone.utc)
    document = dict(data)
    document["createdAt"] = now
    document["updatedAt"] = now
    result = collection.insert_one(document)
    document["_id"] = result.inserted_id
    return document


def get_documents(
    collection: Collection,
    filter_dict: Optional[Dict[str, Any]] = None,
    limit: Optional[int] = None,
) -> List[Dict[str, Any]]:
    cursor = collection.find(filter_dict or {})
    if limit:
        cursor = cursor.limit(limit)
    return list(cursor)
