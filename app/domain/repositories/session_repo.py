# app/domain/repositories/session_repo.py

from __future__ import annotations
import logging
import time
from typing import Awaitable, Callable, Optional, Tuple, TypeVar

from app.domain.models.cart import Cart
from app.domain.models.session import BehaviorEvent, SessionProfile
from app.domain.repositories.catalog_repo import CatalogRepo
from app.domain.services import cart_svc
from app.domain.services.session_learner_svc import create_default_profile, track_event
from app.utils.cache import cache_get, cache_set
from app.utils.locks import RedisLock

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SessionRepo:
    """
    Session profiles and carts stored as JSON under:
      {prefix}:profile:{session_id}
      {prefix}:cart:{session_id}
    Every write that reads the current value first runs under a per-session
    lock, so concurrent events on one session are applied one after another.
    """

    def __init__(
        self,
        kv,
        *,
        key_prefix: str = "sess",
        session_ttl: int = 7 * 24 * 3600,
        cart_ttl: int = 7 * 24 * 3600,
        lock_ttl: int = 5,
        lock_wait: int = 5,
    ):
        self.kv = kv  # redis.asyncio.Redis or MemoryKV
        self.prefix = key_prefix
        self.session_ttl = session_ttl
        self.cart_ttl = cart_ttl
        self.lock_ttl = lock_ttl
        self.lock_wait = lock_wait

    def key(self, kind: str, session_id: str) -> str:
        return f"{self.prefix}:{kind}:{session_id}"

    def _lock(self, session_id: str) -> RedisLock:
        return RedisLock(self.kv, self.key("lock", session_id), ttl=self.lock_ttl, wait_timeout=self.lock_wait)

    # ----- Profiles -----------------------------------------------------------

    async def get_profile(self, session_id: str) -> Optional[SessionProfile]:
        raw = await cache_get(self.kv, self.key("profile", session_id))
        return SessionProfile.model_validate(raw) if raw else None

    async def save_profile(self, profile: SessionProfile) -> None:
        await cache_set(
            self.kv,
            self.key("profile", profile.session_id),
            profile.model_dump(mode="json"),
            ex=self.session_ttl,
        )

    async def create_profile(self) -> SessionProfile:
        profile = create_default_profile()
        await self.save_profile(profile)
        logger.info("session created session_id=%s", profile.session_id)
        return profile

    async def reset_profile(self, session_id: str) -> Optional[SessionProfile]:
        """Back to the default state; the session id is kept so clients can keep using it."""
        async with self._lock(session_id):
            if await self.get_profile(session_id) is None:
                return None
            fresh = create_default_profile().model_copy(update={"session_id": session_id})
            await self.save_profile(fresh)
        logger.info("session reset session_id=%s", session_id)
        return fresh

    async def track(self, session_id: str, event: BehaviorEvent, catalog: CatalogRepo) -> Optional[SessionProfile]:
        """Load, apply one event, save. None when the session does not exist."""
        t0 = time.perf_counter()
        async with self._lock(session_id):
            profile = await self.get_profile(session_id)
            if profile is None:
                return None
            updated = track_event(profile, event, catalog)
            await self.save_profile(updated)
        logger.debug(
            "session event session_id=%s type=%s product_id=%s n=%s time=%.4fs",
            session_id, event.type, event.product_id, updated.interaction_count, time.perf_counter() - t0,
        )
        return updated

    # ----- Carts --------------------------------------------------------------

    async def get_cart(self, session_id: str) -> Cart:
        raw = await cache_get(self.kv, self.key("cart", session_id))
        return Cart.model_validate(raw) if raw else Cart()

    async def save_cart(self, session_id: str, cart: Cart) -> None:
        await cache_set(self.kv, self.key("cart", session_id), cart.model_dump(mode="json"), ex=self.cart_ttl)

    async def update_cart(self, session_id: str, edit: Callable[[Cart], Cart]) -> Tuple[Cart, Cart]:
        """Apply `edit` to the stored cart under the session lock. Returns (before, after)."""
        async with self._lock(session_id):
            before = await self.get_cart(session_id)
            after = edit(before)
            await self.save_cart(session_id, after)
        return before, after


    async def update_cart_and_track(
        self,
        session_id: str,
        edit: Callable[[Cart], Cart],
        event: BehaviorEvent,
        catalog: CatalogRepo,
    ) -> Optional[Tuple[Cart, SessionProfile]]:
        """
        Apply a cart edit and the profile event it implies under one lock.
        Both are saved or neither is. None when the session does not exist.
        """
        async with self._lock(session_id):
            profile = await self.get_profile(session_id)
            if profile is None:
                return None
            cart = edit(await self.get_cart(session_id))
            updated = track_event(profile, event, catalog)
            await self.save_cart(session_id, cart)
            await self.save_profile(updated)
        logger.debug(
            "cart event session_id=%s type=%s product_id=%s lines=%s",
            session_id, event.type, event.product_id, len(cart.items),
        )
        return cart, updated

    async def checkout(self, session_id: str, place: Callable[[Cart], Awaitable[Optional[T]]]) -> Optional[T]:
        """
        Hand the stored cart to `place` and empty it once `place` returns a result.
        The whole step holds the session lock, so a concurrent cart edit lands
        either in the order or in the cart left behind. If `place` raises, the
        cart is kept as it was.
        """
        async with self._lock(session_id):
            result = await place(await self.get_cart(session_id))
            if result is not None:
                await self.save_cart(session_id, cart_svc.clear_cart())
        return result
