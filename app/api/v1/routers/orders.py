# app/api/v1/routers/orders.py
from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Optional
import logging

from app.api.deps import catalog_dep, order_repo_dep, session_repo_dep
from app.api.v1.schemas.reco import CheckoutIn, OrderListOut
from app.domain.models.cart import Cart, Order
from app.domain.repositories.catalog_repo import CatalogRepo
from app.domain.repositories.order_repo import OrderRepo
from app.domain.repositories.session_repo import SessionRepo
from app.domain.services.order_svc import build_order

logger = logging.getLogger(__name__)

router = APIRouter(tags=["orders"])


@router.post("/sessions/{session_id}/orders", response_model=Order, status_code=201)
async def place_order(
    session_id: str,
    body: CheckoutIn,
    repo: SessionRepo = Depends(session_repo_dep),
    orders: OrderRepo = Depends(order_repo_dep),
    catalog: CatalogRepo = Depends(catalog_dep),
):
    """
    Turn the session cart into a confirmed order, then empty the cart.
    Read, insert and clear share one session lock; a failed insert keeps the cart.
    """
    if await repo.get_profile(session_id) is None:
        raise HTTPException(status_code=404, detail="Session not found.")

    async def _place(cart: Cart) -> Optional[Order]:
        order = build_order(cart, body.shipping_address, session_id=session_id, catalog=catalog)
        if order is not None:
            await orders.insert(order)
        return order

    order = await repo.checkout(session_id, _place)
    if order is None:
        raise HTTPException(status_code=400, detail="Cart is empty.")

    logger.info("order placed session_id=%s order_id=%s total=%s", session_id, order.id, order.total)
    return order


@router.get("/sessions/{session_id}/orders", response_model=OrderListOut)
async def list_orders(
    session_id: str,
    limit: int = Query(50, ge=1, le=200),
    orders: OrderRepo = Depends(order_repo_dep),
):
    items = await orders.list_for_session(session_id, limit=limit)
    return OrderListOut(items=items, count=len(items))


@router.get("/orders/{order_id}", response_model=Order)
async def get_order(order_id: str, orders: OrderRepo = Depends(order_repo_dep)):
    order = await orders.get_by_id(order_id)
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found.")
    return order


@router.delete("/orders/{order_id}", status_code=204)
async def delete_order(order_id: str, orders: OrderRepo = Depends(order_repo_dep)):
    if not await orders.delete(order_id):
        raise HTTPException(status_code=404, detail="Order not found.")
