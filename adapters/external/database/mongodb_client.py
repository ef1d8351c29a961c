"""
Motor client factory shared by the HTTP app and one-off scripts.
"""

from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient

from config.settings import settings


def get_mongo_client(uri: Optional[str] = None) -> AsyncIOMotorClient:
    """
    Build an AsyncIOMotorClient with the configured pool and timeouts.

    `uri` overrides MONGODB_URI (e.g. a scratch database for a backfill script).
    """
    return AsyncIOMotorClient(
        uri or settings.MONGODB_URI,
        appname=settings.APP_NAME,
        uuidRepresentation="standard",
        maxPoolSize=settings.MONGODB_MAX_POOL_SIZE,
        serverSelectionTimeoutMS=settings.MONGODB_SERVER_SELECTION_TIMEOUT_MS,
        connectTimeoutMS=settings.MONGODB_CONNECT_TIMEOUT_MS,
        socketTimeoutMS=settings.MONGODB_SOCKET_TIMEOUT_MS,
    )
