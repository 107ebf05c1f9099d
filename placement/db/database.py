import logging

from pymongo import AsyncMongoClient
from beanie import Document, init_beanie

import placement.schemas
from placement.core.config import get_settings


class DBMongo:
    client: AsyncMongoClient = None


db = DBMongo()


def document_models():
    return [
        model for model in placement.schemas.__dict__.values()
        if isinstance(model, type) and issubclass(model, Document)
    ]


async def connect_to_mongo():
    logger = logging.getLogger(__name__)
    settings = get_settings()
    if not settings.MONGODB_DATABASE:
        logger.error("MONGODB_DATABASE environment variable not set")
        return False
    if not settings.MONGODB_CLUSTER:
        logger.error("MONGODB_CLUSTER environment variable not set")
        return False

    try:
        db.client = AsyncMongoClient(settings.MONGODB_DATABASE)
        await init_beanie(database=db.client[settings.MONGODB_CLUSTER], document_models=document_models())
        await db.client.admin.command("ping")
    except Exception as e:
        logger.exception("Failed to connect to MongoDB: %s", e)
        db.client = None
        return False

    logger.info("Successfully connected to MongoDB")
    return True


async def close_mongo_connection():
    if db.client is not None:
        await db.client.close()
        db.client = None
