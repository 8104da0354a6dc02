"""MongoDB connection setup and Beanie ODM initialization."""

import logging
from typing import TYPE_CHECKING

from beanie import init_beanie
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from bizdir.config import DatabaseConfig

if TYPE_CHECKING:
    from beanie import Document

logger = logging.getLogger(__name__)


def get_document_models() -> list[type["Document"]]:
    """Get all Beanie document models for initialization."""
    from bizdir.models import BusinessDocument, User

    return [BusinessDocument, User]


async def connect_database(
    config: DatabaseConfig,
    motor_client: AsyncIOMotorClient | None = None,
) -> tuple[AsyncIOMotorClient, AsyncIOMotorDatabase]:
    """Connect to MongoDB, verify the server answers, and initialize Beanie.

    Args:
        config: Database configuration; ``mongodb_url`` must be set unless a
            client is passed in.
        motor_client: Optional pre-configured motor client (for testing).

    Returns:
        The motor client and the selected database.

    Raises:
        Exception: Whatever the driver raises when the server cannot be
            reached (typically ``ServerSelectionTimeoutError``).
    """
    if motor_client is not None:
        client = motor_client
    else:
        client = AsyncIOMotorClient(
            config.mongodb_url,
            minPoolSize=config.min_pool_size,
            maxPoolSize=config.max_pool_size,
            serverSelectionTimeoutMS=config.server_selection_timeout_ms,
            uuidRepresentation="standard",
        )

    database = client[config.mongodb_database]
    try:
        await database.command("ping")
        await init_beanie(
            database=database,
            document_models=get_document_models(),
        )
    except Exception:
        if motor_client is None:
            client.close()
        raise

    logger.info("Connected to MongoDB database '%s'", config.mongodb_database)
    return client, database
