import logging
import time
from typing import List, Optional, Sequence

from app.core.config import get_settings
from app.domain.models.cart import CartItem
from app.domain.models.reco import (
    CartAdvisorResult,
    ProductRecommendation,
    RecommendationContext,
    RecommendProductsResult,
    ScoredProduct,
)
from app.domain.models.session import SessionProfile
from app.domain.repositories.catalog_repo import CatalogRepo, get_catalog
from app.domain.services.cart_advisor_svc import analyze_cart
from app.domain.services.confidence_svc import calculate_confidence, get_confidence_label
from app.domain.services.constants import CART_PAGE, DEFAULT_CONFIDENCE
from app.domain.services.reasoning_svc import (
    generate_cart_summary,
    generate_conversational_response,
    generate_price_sensitivity_insight,
    generate_reasoning,
    generate_session_insight,
    total_potential_saving,
)
from app.domain.services.recommendation_svc import (
    apply_query_filter,
    determine_badge_type,
    score_all_products,
)

logger = logging.getLogger(__name__)

def _elapsed_ms(t0: float) -> int:
    return int(round((time.perf_counter() - t0) * 1000))

def _mean_confidence(values: Sequence[float]) -> float:
    if not values:
        return DEFAULT_CONFIDENCE
    return round(sum(values) / len(values), 2)

def _to_recommendation(sp: ScoredProduct, profile: SessionProfile, catalog: CatalogRepo) -> ProductRecommendation:
    badge = determine_badge_type(sp.product, sp.score, sp.factors)
    confidence = calculate_confidence(profile, sp.factors)
    return ProductRecommendation(
        product_id=sp.product.id,
        score=round(sp.score),
        confidence=round(confidence, 2),
        reasoning=generate_reasoning(sp.product, sp.factors, profile, catalog),
        badge_text=badge.badge_text,
        badge_type=badge.badge_type,
        factors=sp.factors,
    )

def recommend_products(
    profile: SessionProfile,
    context: RecommendationContext,
    chat_query: Optional[str] = None,
    catalog: Optional[CatalogRepo] = None,
) -> RecommendProductsResult:
    """
    Ranked recommendations for one request.

    High-level flow:
      1) Score every in-stock product against the profile.
      2) Narrow by the chat query, but only if that leaves something to show.
      3) Drop products already in the cart unless the shopper is on the cart page.
      4) Stable sort by score (ties keep catalog order) and cut to `limit`.
      5) Attach badge, confidence and reasoning, then the conversational wrapper.
    """
    catalog = catalog or get_catalog()
    settings = get_settings()
    t0 = time.perf_counter()
    logger.info(
        "recommend start session_id=%s page=%s product_id=%s query=%r",
        profile.session_id, context.current_page, context.current_product_id, chat_query,
    )

    # ---- 1) Score -----------------------------------------------------------
    scored: List[ScoredProduct] = score_all_products(profile, context, catalog)

    # ---- 2) Query filter with fallback --------------------------------------
    if chat_query:
        filtered = apply_query_filter(scored, chat_query)
        if filtered:
            scored = filtered
        else:
            logger.info("recommend query matched nothing, keeping full ranking query=%r", chat_query)

    # ---- 3) Cart exclusion --------------------------------------------------
    if context.current_page != CART_PAGE:
        cart_ids = set(context.cart_product_ids or [])
        scored = [sp for sp in scored if sp.product.id not in cart_ids]

    # ---- 4) Rank & truncate -------------------------------------------------
    limit = context.limit or settings.max_recommendations
    top = sorted(scored, key=lambda sp: sp.score, reverse=True)[:limit]

    # ---- 5) Explain ---------------------------------------------------------
    recommendations = [_to_recommendation(sp, profile, catalog) for sp in top]
    confidence = _mean_confidence([r.confidence for r in recommendations])

    result = RecommendProductsResult(
        recommendations=recommendations,
        message=generate_conversational_response(recommendations, chat_query, profile, catalog),
        confidence=confidence,
        confidence_label=get_confidence_label(confidence),
        session_insight=generate_session_insight(profile, catalog),
        processing_time_ms=_elapsed_ms(t0),
    )
    logger.info(
        "recommend done session_id=%s items=%s confidence=%.2f time_ms=%s",
        profile.session_id, len(recommendations), confidence, result.processing_time_ms,
    )
    return result

def advise_cart(
    cart: Sequence[CartItem],
    profile: SessionProfile,
    catalog: Optional[CatalogRepo] = None,
) -> CartAdvisorResult:
    """Cart optimizations plus the summary texts shown next to them."""
    catalog = catalog or get_catalog()
    t0 = time.perf_counter()

    optimizations = analyze_cart(cart, profile, catalog)
    result = CartAdvisorResult(
        optimizations=optimizations,
        summary=generate_cart_summary(optimizations),
        total_potential_saving=total_potential_saving(optimizations),
        price_sensitivity_insight=generate_price_sensitivity_insight(profile),
        confidence=_mean_confidence([o.confidence for o in optimizations]),
        processing_time_ms=_elapsed_ms(t0),
    )
    logger.info(
        "cart_advice done session_id=%s lines=%s optimizations=%s saving=%s time_ms=%s",
        profile.session_id, len(cart), len(optimizations), result.total_potential_saving, result.processing_time_ms,
    )
    return result
