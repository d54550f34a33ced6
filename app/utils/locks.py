# app/utils/locks.py
from __future__ import annotations
from typing import Optional
import uuid, asyncio


class LockTimeout(Exception):
    """Raised when a session lock stays busy past the wait budget."""


class RedisLock:
    """
    Simple, single-instance lock using SET NX EX.
    Serializes read-modify-write cycles on one session (profile or cart).
    Works with redis.asyncio.Redis and with the in-process MemoryKV.

        async with RedisLock(kv, "sess:abc", ttl=5, wait_timeout=5):
            ...
    """
    def __init__(self, redis, key: str, ttl: int = 5, wait_timeout: int = 5):
        self.redis = redis
        self.key = f"lock:{key}"
        self.ttl = ttl
        self.wait_timeout = wait_timeout
        self._token: Optional[str] = None

    async def acquire(self) -> bool:
        token = uuid.uuid4().hex
        ok = await self.redis.set(self.key, token, nx=True, ex=self.ttl)
        if ok:
            self._token = token
            return True
        return False

    async def release(self) -> None:
        # only drop the lock if it is still ours (it may have expired and been retaken)
        if self._token is None:
            return
        current = await self.redis.get(self.key)
        if current == self._token:
            await self.redis.delete(self.key)
        self._token = None

    async def wait(self, timeout: int = 10) -> None:
        """Wait for another worker to release the lock."""
        for _ in range(timeout * 10):
            if not await self.redis.exists(self.key):
                return
            await asyncio.sleep(0.1)

    async def __aenter__(self) -> "RedisLock":
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.wait_timeout
        while not await self.acquire():
            if loop.time() >= deadline:
                raise LockTimeout(self.key)
            await self.wait(timeout=1)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.release()
