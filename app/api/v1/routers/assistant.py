# app/api/v1/routers/assistant.py
from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Optional
import time
import logging

from app.api.deps import catalog_dep, session_repo_dep
from app.api.v1.schemas.reco import CartAdvisorIn, RecommendProductsIn
from app.domain.models.reco import CartAdvisorResult, PageName, RecommendationContext, RecommendProductsResult
from app.domain.models.session import BehaviorEvent
from app.domain.repositories.catalog_repo import CatalogRepo
from app.domain.repositories.session_repo import SessionRepo
from app.domain.services.pipeline_svc import advise_cart, recommend_products

logger = logging.getLogger(__name__)

router = APIRouter(tags=["assistant"])


@router.post("/ai/recommend-products", response_model=RecommendProductsResult)
async def recommend_products_stateless(body: RecommendProductsIn, catalog: CatalogRepo = Depends(catalog_dep)):
    """
    Rank the catalog for a profile sent by the client.
    Nothing is stored; the same body always gives the same ranking.
    """
    logger.info(
        "Request: recommend_products session_id=%s page=%s query=%r",
        body.session_profile.session_id, body.context.current_page, body.chat_query,
    )
    return recommend_products(body.session_profile, body.context, body.chat_query, catalog)


@router.post("/ai/cart-advisor", response_model=CartAdvisorResult)
async def cart_advisor_stateless(body: CartAdvisorIn, catalog: CatalogRepo = Depends(catalog_dep)):
    logger.info("Request: cart_advisor session_id=%s lines=%s", body.session_profile.session_id, len(body.cart))
    return advise_cart(body.cart, body.session_profile, catalog)


@router.get("/sessions/{session_id}/recommendations", response_model=RecommendProductsResult)
async def session_recommendations(
    session_id: str,
    page: PageName = Query("home"),
    product_id: Optional[str] = Query(None, description="Product currently on screen"),
    q: Optional[str] = Query(None, description="Chat query used to narrow the ranking"),
    limit: Optional[int] = Query(None, ge=1, le=50),
    repo: SessionRepo = Depends(session_repo_dep),
    catalog: CatalogRepo = Depends(catalog_dep),
):
    """
    Recommendations for a stored session.
    A chat query is also recorded on the profile as a 'chat' event before ranking.
    """
    start_time = time.perf_counter()
    if q:
        profile = await repo.track(session_id, BehaviorEvent(type="chat", query=q), catalog)
    else:
        profile = await repo.get_profile(session_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="Session not found.")

    cart = await repo.get_cart(session_id)
    context = RecommendationContext(
        current_page=page,
        current_product_id=product_id,
        cart_product_ids=cart.product_ids(),
        limit=limit,
    )
    res = recommend_products(profile, context, q, catalog)
    logger.info(
        "Response: session_recommendations session_id=%s count=%s elapsed_time=%.4fs",
        session_id, len(res.recommendations), time.perf_counter() - start_time,
    )
    return res


@router.get("/sessions/{session_id}/cart-advice", response_model=CartAdvisorResult)
async def session_cart_advice(
    session_id: str,
    repo: SessionRepo = Depends(session_repo_dep),
    catalog: CatalogRepo = Depends(catalog_dep),
):
    profile = await repo.get_profile(session_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="Session not found.")
    cart = await repo.get_cart(session_id)
    return advise_cart(cart.items, profile, catalog)
