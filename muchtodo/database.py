import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient
from pymongo import ASCENDING
from pymongo.errors import ConnectionFailure

from muchtodo.config import Config, ConfigError, redact_uri

logger = logging.getLogger(__name__)

client: AsyncIOMotorClient = None  # type: ignore
db_name: Optional[str] = None


async def connect_to_mongo(config: Config):
    """Establishes connection to MongoDB and ensures necessary indexes are created."""
    global client, db_name
    if not config.mongo_uri:
        raise ConfigError("MONGO_URI is not set; cannot connect to MongoDB.")
    try:
        client = AsyncIOMotorClient(config.mongo_uri)
        db_name = config.db_name
        await client.admin.command("ping")
        logger.info("Connected to MongoDB", extra={"mongo_uri": redact_uri(config.mongo_uri), "db_name": db_name})

        todos_collection = get_collection("todos")
        await todos_collection.create_index([("user_id", ASCENDING)])
        logger.info("Ensured index on 'user_id' for 'todos' collection.")
    except ConnectionFailure as e:
        logger.error(f"Could not connect to MongoDB: {e}")
        client.close()
        client = None
        db_name = None
        raise


async def close_mongo_connection():
    """Closes the MongoDB connection."""
    global client, db_name
    if client:
        client.close()
        client = None
        db_name = None
        logger.info("MongoDB connection closed.")


def get_collection(collection_name: str):
    """
    Returns a MongoDB collection instance.

    Args:
        collection_name (str): The name of the collection to retrieve.
    """
    if client is None:
        raise ConnectionFailure("MongoDB client is not initialized. Call connect_to_mongo() first.")
    return client[db_name][collection_name]
