import json

# `redis` is a redis.asyncio.Redis client or the in-process MemoryKV

async def cache_get(redis, key: str):
    if val := await redis.get(key):
        return json.loads(val)
    return None

async def cache_set(redis, key: str, value, ex: int | None = 60):
    await redis.set(key, json.dumps(value, separators=(",", ":")), ex=ex)
