# app/api/v1/routers/cart.py
from fastapi import APIRouter, Depends, HTTPException
from typing import Callable
import logging

from app.api.deps import catalog_dep, session_repo_dep
from app.api.v1.schemas.reco import CartItemIn, CartOut, CartQuantityIn
from app.domain.models.cart import Cart
from app.domain.models.session import BehaviorEvent
from app.domain.repositories.catalog_repo import CatalogRepo
from app.domain.repositories.session_repo import SessionRepo
from app.domain.services import cart_svc

logger = logging.getLogger(__name__)

router = APIRouter(tags=["cart"])


def _out(session_id: str, cart: Cart, catalog: CatalogRepo) -> CartOut:
    return CartOut(
        session_id=session_id,
        cart=cart,
        item_count=cart_svc.get_item_count(cart),
        total=cart_svc.get_total(cart, catalog),
    )


async def _require_session(repo: SessionRepo, session_id: str) -> None:
    if await repo.get_profile(session_id) is None:
        raise HTTPException(status_code=404, detail="Session not found.")


async def _edit_with_event(
    repo: SessionRepo,
    catalog: CatalogRepo,
    session_id: str,
    edit: Callable[[Cart], Cart],
    event: BehaviorEvent,
) -> Cart:
    # cart line and profile event are written together, or not at all
    res = await repo.update_cart_and_track(session_id, edit, event, catalog)
    if res is None:
        raise HTTPException(status_code=404, detail="Session not found.")
    cart, _ = res
    return cart


async def _remove(repo: SessionRepo, catalog: CatalogRepo, session_id: str, product_id: str) -> Cart:
    return await _edit_with_event(
        repo, catalog, session_id,
        lambda c: cart_svc.remove_item(c, product_id),
        BehaviorEvent(type="remove-from-cart", product_id=product_id),
    )


@router.get("/sessions/{session_id}/cart", response_model=CartOut)
async def get_cart(
    session_id: str,
    repo: SessionRepo = Depends(session_repo_dep),
    catalog: CatalogRepo = Depends(catalog_dep),
):
    await _require_session(repo, session_id)
    return _out(session_id, await repo.get_cart(session_id), catalog)


@router.post("/sessions/{session_id}/cart/items", response_model=CartOut)
async def add_cart_item(
    session_id: str,
    body: CartItemIn,
    repo: SessionRepo = Depends(session_repo_dep),
    catalog: CatalogRepo = Depends(catalog_dep),
):
    """Add one unit of a product and feed an add-to-cart event to the session."""
    await _require_session(repo, session_id)
    if catalog.get_product_by_id(body.product_id) is None:
        raise HTTPException(status_code=404, detail="Product not found.")

    cart = await _edit_with_event(
        repo, catalog, session_id,
        lambda c: cart_svc.add_item(c, body.product_id),
        BehaviorEvent(type="add-to-cart", product_id=body.product_id),
    )
    logger.info("cart add session_id=%s product_id=%s lines=%s", session_id, body.product_id, len(cart.items))
    return _out(session_id, cart, catalog)


@router.patch("/sessions/{session_id}/cart/items/{product_id}", response_model=CartOut)
async def update_cart_item(
    session_id: str,
    product_id: str,
    body: CartQuantityIn,
    repo: SessionRepo = Depends(session_repo_dep),
    catalog: CatalogRepo = Depends(catalog_dep),
):
    """Set a line's quantity; 0 removes the line."""
    await _require_session(repo, session_id)
    if body.quantity <= 0:
        cart = await _remove(repo, catalog, session_id, product_id)
    else:
        _, cart = await repo.update_cart(session_id, lambda c: cart_svc.update_quantity(c, product_id, body.quantity))
    return _out(session_id, cart, catalog)


@router.delete("/sessions/{session_id}/cart/items/{product_id}", response_model=CartOut)
async def remove_cart_item(
    session_id: str,
    product_id: str,
    repo: SessionRepo = Depends(session_repo_dep),
    catalog: CatalogRepo = Depends(catalog_dep),
):
    await _require_session(repo, session_id)
    cart = await _remove(repo, catalog, session_id, product_id)
    logger.info("cart remove session_id=%s product_id=%s lines=%s", session_id, product_id, len(cart.items))
    return _out(session_id, cart, catalog)


@router.delete("/sessions/{session_id}/cart", response_model=CartOut)
async def clear_cart(
    session_id: str,
    repo: SessionRepo = Depends(session_repo_dep),
    catalog: CatalogRepo = Depends(catalog_dep),
):
    await _require_session(repo, session_id)
    _, cart = await repo.update_cart(session_id, lambda c: cart_svc.clear_cart())
    return _out(session_id, cart, catalog)
