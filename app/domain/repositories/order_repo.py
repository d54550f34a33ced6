# app/domain/repositories/order_repo.py

from __future__ import annotations
from typing import List, Optional
from motor.motor_asyncio import AsyncIOMotorDatabase
from app.domain.models.cart import Order

class OrderRepo:
    """
    Order repository backed by the 'orders' collection.
    Documents are the Order model dump keyed by `id` (Mongo's _id is never exposed).
    """

    def __init__(self, db: AsyncIOMotorDatabase, collection_name: str = "orders"):
        self.col = db[collection_name]

    async def insert(self, order: Order) -> None:
        await self.col.insert_one(order.model_dump(mode="json"))

    async def get_by_id(self, order_id: str) -> Optional[Order]:
        doc = await self.col.find_one({"id": order_id}, {"_id": 0})
        return Order.model_validate(doc) if doc else None

    async def list_for_session(self, session_id: str, limit: int = 50) -> List[Order]:
        # newest first
        cursor = self.col.find({"session_id": session_id}, {"_id": 0}).sort("created_at", -1).limit(limit)
        return [Order.model_validate(doc) async for doc in cursor]

    async def delete(self, order_id: str) -> bool:
        res = await self.col.delete_one({"id": order_id})
        return res.deleted_count > 0
