# app/api/deps.py
from fastapi import Depends, HTTPException
from app.core.config import get_settings
from app.db.memory import memory_kv
from app.db.mongo import get_db
from app.db.redis import get_redis
from app.domain.repositories.catalog_repo import CatalogRepo, get_catalog
from app.domain.repositories.order_repo import OrderRepo
from app.domain.repositories.session_repo import SessionRepo

# Dependency for injecting the MongoDB database into endpoints/services
async def mongo_db(db = Depends(get_db)):
    # Orders need Mongo; without it the route answers 503
    if db is None:
        raise HTTPException(status_code=503, detail="Order storage is not configured.")
    return db

# Dependency for injecting the key/value store (Redis, else in-process)
def redis_dep():
    return get_redis() or memory_kv

def catalog_dep() -> CatalogRepo:
    return get_catalog()

def session_repo_dep(kv = Depends(redis_dep)) -> SessionRepo:
    settings = get_settings()
    return SessionRepo(
        kv,
        key_prefix=settings.session_key_prefix,
        session_ttl=settings.session_ttl,
        cart_ttl=settings.cart_ttl,
        lock_ttl=settings.session_lock_ttl,
        lock_wait=settings.session_lock_wait,
    )

def order_repo_dep(db = Depends(mongo_db)) -> OrderRepo:
    return OrderRepo(db)
