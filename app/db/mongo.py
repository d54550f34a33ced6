# app/db/mongo.py
import logging
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from app.core.config import get_settings
import certifi

logger = logging.getLogger(__name__)

_client: AsyncIOMotorClient | None = None
_db: AsyncIOMotorDatabase | None = None


def get_client() -> AsyncIOMotorClient | None:
    return _client


def get_db() -> AsyncIOMotorDatabase | None:
    """Orders database, or None when MONGO_URI is not configured."""
    return _db


async def connect():
    """
    Create the Motor client.
    Do not crash the app if the initial ping fails: keep a lazy client so
    requests can retry once the network is OK.
    """
    global _client, _db
    settings = get_settings()
    if not settings.MONGO_URI:
        logger.warning("No MONGO_URI provided, order storage disabled")
        return

    def _new_client() -> AsyncIOMotorClient:
        tls = settings.MONGO_URI.startswith("mongodb+srv://")
        kwargs = {"tls": True, "tlsCAFile": certifi.where()} if tls else {}
        return AsyncIOMotorClient(
            settings.MONGO_URI,
            uuidRepresentation="standard",
            serverSelectionTimeoutMS=6000,
            connectTimeoutMS=6000,
            **kwargs,
        )

    try:
        _client = _new_client()
        _db = _client[settings.MONGO_DB]
        await _client.admin.command("ping")
        logger.info("Mongo connected (ping ok)")
    except Exception as e:
        # the client stays lazy; the first real query will try to connect again
        logger.warning("Mongo ping at startup failed, will retry lazily: %s", e)


async def disconnect():
    global _client, _db
    if _client:
        _client.close()
        logger.info("Mongo disconnected")
    _client = None
    _db = None
