# app/db/memory.py
import time
from typing import Dict, Optional, Tuple


class MemoryKV:
    """
    In-process key/value store used when REDIS_URL is not configured.
    Exposes the subset of the redis.asyncio API the repositories rely on
    (get / set with ex+nx / delete / exists / ping), values kept as strings.
    Single event loop only: there is no await between check and write.
    """

    def __init__(self):
        self._data: Dict[str, Tuple[Optional[float], str]] = {}

    def _alive(self, key: str) -> Optional[str]:
        entry = self._data.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if expires_at is not None and expires_at <= time.monotonic():
            del self._data[key]
            return None
        return value

    async def get(self, key: str) -> Optional[str]:
        return self._alive(key)

    async def set(self, key: str, value: str, ex: Optional[int] = None, nx: bool = False) -> bool:
        if nx and self._alive(key) is not None:
            return False
        expires_at = time.monotonic() + ex if ex else None
        self._data[key] = (expires_at, value)
        return True

    async def delete(self, key: str) -> int:
        return 1 if self._data.pop(key, None) is not None else 0

    async def exists(self, key: str) -> int:
        return 1 if self._alive(key) is not None else 0

    async def ping(self) -> bool:
        return True

    def clear(self) -> None:
        self._data.clear()


memory_kv = MemoryKV()
