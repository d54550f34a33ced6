# app/core/lifespan.py
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from app.db import mongo, redis as r
from app.domain.repositories.catalog_repo import get_catalog

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # --- Startup ---
    # Catalog is mandatory: a broken catalog file must stop the app
    catalog = get_catalog()
    logger.info("Catalog ready: %s products", len(catalog.get_all_products()))

    # Redis and Mongo are optional; both modules log and degrade on failure
    await r.connect()
    await mongo.connect()

    # Application runs
    yield

    # --- Shutdown ---
    try:
        await r.disconnect()
    except Exception as e:
        logger.warning("Redis disconnect failed: %s", e)

    try:
        await mongo.disconnect()
    except Exception as e:
        logger.warning("Mongo disconnect failed: %s", e)
