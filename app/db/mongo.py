"""
app/db/mongo.py

Purpose: MongoDB connection lifecycle

- One Motor client per process, opened at startup with retry and backoff
- Collection accessors for admin-code-requests and admin-codes
- Ping-based health check for /health and /ready
"""

import asyncio
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo.errors import ConnectionFailure, PyMongoError, ServerSelectionTimeoutError

from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)

_client: Optional[AsyncIOMotorClient] = None
_database: Optional[AsyncIOMotorDatabase] = None


async def _open_client() -> AsyncIOMotorClient:
    client = AsyncIOMotorClient(
        settings.MONGODB_URL,
        maxPoolSize=settings.MONGODB_MAX_POOL_SIZE,
        serverSelectionTimeoutMS=settings.MONGODB_SERVER_SELECTION_TIMEOUT_MS,
        retryWrites=True,
        retryReads=True,
        tz_aware=True,
    )
    try:
        await client.admin.command("ping")
    except PyMongoError:
        client.close()
        raise
    return client


async def connect_to_mongo():
    """
    Opens the process-wide client.

    Retries MONGODB_CONNECT_RETRIES times, doubling the delay between
    attempts, then gives up with ConnectionError so startup fails loudly.
    """
    global _client, _database

    if _client is not None:
        logger.warning("MongoDB client already initialized")
        return

    attempts = settings.MONGODB_CONNECT_RETRIES
    delay = settings.MONGODB_RETRY_DELAY_SECONDS

    for attempt in range(1, attempts + 1):
        try:
            _client = await _open_client()
            _database = _client[settings.MONGODB_DB_NAME]
            logger.info(f"✅ Connected to MongoDB database '{settings.MONGODB_DB_NAME}'")
            return
        except (ConnectionFailure, ServerSelectionTimeoutError) as e:
            logger.error(f"MongoDB connection attempt {attempt}/{attempts} failed: {e}")
            if attempt == attempts:
                logger.critical("Giving up on MongoDB")
                raise ConnectionError("Could not establish MongoDB connection") from e

            logger.info(f"Retrying in {delay:g}s...")
            await asyncio.sleep(delay)
            delay *= 2


async def close_mongo_connection():
    global _client, _database

    if _client is None:
        return

    _client.close()
    _client = None
    _database = None
    logger.info("MongoDB connection closed")


async def check_database_health() -> bool:
    """
    True when the server answers a ping.
    """
    if _client is None:
        logger.error("MongoDB client not initialized")
        return False

    try:
        await _client.admin.command("ping")
        return True
    except PyMongoError as e:
        logger.error(f"Database health check failed: {e}")
        return False


def get_database() -> AsyncIOMotorDatabase:
    """
    Raises:
        RuntimeError: connect_to_mongo() has not run
    """
    if _database is None:
        raise RuntimeError("Database not initialized. Call connect_to_mongo() during startup.")
    return _database


def get_collection(name: str) -> AsyncIOMotorCollection:
    return get_database()[name]


def get_admin_code_requests_collection() -> AsyncIOMotorCollection:
    """
    Admin code requests, keyed by the string field `id`.
    """
    return get_collection(settings.ADMIN_CODE_REQUESTS_COLLECTION)


def get_admin_codes_collection() -> AsyncIOMotorCollection:
    """
    Issued admin codes, keyed by `id`, unique on `code`.
    """
    return get_collection(settings.ADMIN_CODES_COLLECTION)
