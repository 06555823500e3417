"""
Database connection and Beanie ODM initialization.

Beanie is an async ODM for MongoDB built on Motor and Pydantic.
We initialize it once at startup and close at shutdown.
"""

import logging
from typing import List, Optional, Type

from beanie import init_beanie
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from app.config import get_settings
from app.models.activity import ActivityDocument
from app.models.user import UserDocument

logger = logging.getLogger(__name__)

_client: Optional[AsyncIOMotorClient] = None


async def init_models(database: AsyncIOMotorDatabase) -> None:
    """Register the document models with Beanie and create their indexes."""
    # Both models share the users collection; see app.models.user
    document_models: List[Type] = [UserDocument, ActivityDocument]

    await init_beanie(
        database=database,
        document_models=document_models,
    )


async def connect_to_mongo() -> None:
    """
    Create Motor client and initialize Beanie with document models.
    Called once at application startup.
    """
    global _client
    settings = get_settings()
    # tz_aware so timestamps read back as UTC-aware datetimes
    _client = AsyncIOMotorClient(settings.mongodb_url, tz_aware=True)
    await init_models(_client[settings.mongodb_database])
    logger.info("MongoDB connection established; Beanie initialized.")


async def close_mongo_connection() -> None:
    """Close the Motor client on application shutdown."""
    global _client
    logger.info("Closing MongoDB connection.")
    if _client is not None:
        _client.close()
        _client = None


async def ping_database() -> bool:
    """True if the server answers a ping."""
    if _client is None:
        return False
    try:
        await _client.admin.command("ping")
    except Exception as e:
        logger.warning("MongoDB ping failed: %s", e)
        return False
    return True
