# app/domain/services/recommendation_svc.py
import logging
import math
import time
from typing import List, Optional

from app.domain.models.product import Product
from app.domain.models.reco import Badge, RecommendationContext, RecommendationFactor, ScoredProduct
from app.domain.models.session import SessionProfile
from app.domain.repositories.catalog_repo import CatalogRepo, get_catalog
from app.domain.services.constants import (
    BEST_MATCH_SCORE,
    FACTOR_CATEGORY,
    FACTOR_POPULARITY,
    FACTOR_PRICE,
    FACTOR_RECENCY,
    FACTOR_TAG,
    PENALTY_CURRENT_PRODUCT,
    PENALTY_IN_CART,
    PENALTY_LAST_VIEWED,
    RECENCY_CATEGORY_BOOST,
    RECENCY_TAG_BOOST,
    RECENCY_TAG_CAP,
    RECENT_VIEW_WINDOW,
    RELATED_CATEGORY_FACTOR,
    SCORING_WEIGHTS,
)

logger = logging.getLogger(__name__)

# --- sub-scores (each roughly 0..100) --------------------------------------

def category_affinity_score(product: Product, profile: SessionProfile, catalog: CatalogRepo) -> float:
    direct = profile.category_affinity.get(product.category, 0.0)
    related = sum(
        profile.category_affinity.get(cat, 0.0) * RELATED_CATEGORY_FACTOR
        for cat in catalog.get_category_by_id(product.category).related_categories
    )
    return min(100.0, (direct + related) * 100)

def price_range_fit_score(product: Product, profile: SessionProfile) -> float:
    pr = profile.price_range
    if pr.average == 0:
        return 50.0  # no price history yet
    spread = (pr.max - pr.min) or 1
    d = abs(product.price - pr.average) / spread
    return max(0.0, 100 * math.exp(-2 * d * d))

def tag_affinity_score(product: Product, profile: SessionProfile) -> float:
    if not product.tags:
        return 0.0
    total = sum(profile.tag_affinity.get(t, 0.0) for t in product.tags)
    return min(100.0, (total / len(product.tags)) * 100)

def popularity_score(product: Product) -> float:
    return product.popularity_score * 0.8 + product.rating * 4

def recency_boost_score(product: Product, profile: SessionProfile, catalog: CatalogRepo) -> float:
    recent = [catalog.get_product_by_id(pid) for pid in profile.viewed_product_ids[-RECENT_VIEW_WINDOW:]]
    recent = [p for p in recent if p is not None]
    recent_categories = {p.category for p in recent}
    recent_tags = {t for p in recent for t in p.tags}

    boost = 0.0
    if product.category in recent_categories:
        boost += RECENCY_CATEGORY_BOOST
    overlap = sum(1 for t in product.tags if t in recent_tags)
    boost += min(RECENCY_TAG_CAP, overlap * RECENCY_TAG_BOOST)
    return min(100.0, boost)

# --- scoring ---------------------------------------------------------------

def _score_product(
    product: Product,
    profile: SessionProfile,
    context: RecommendationContext,
    cart_ids: set,
    last_viewed: Optional[str],
    catalog: CatalogRepo,
) -> ScoredProduct:
    cat = category_affinity_score(product, profile, catalog)
    price = price_range_fit_score(product, profile)
    tag = tag_affinity_score(product, profile)
    pop = popularity_score(product)
    rec = recency_boost_score(product, profile, catalog)
    w = SCORING_WEIGHTS

    factors = [
        RecommendationFactor(
            name=FACTOR_CATEGORY,
            weight=(cat / 100) * w["category_affinity"],
            detail=f"{catalog.get_category_name(product.category)} affinity: {round(cat)}%",
        ),
        RecommendationFactor(
            name=FACTOR_PRICE,
            weight=(price / 100) * w["price_range_fit"],
            detail=f"Price fit: {round(price)}%",
        ),
        RecommendationFactor(
            name=FACTOR_TAG,
            weight=(tag / 100) * w["tag_affinity"],
            detail=f"Tag match: {round(tag)}%",
        ),
        RecommendationFactor(
            name=FACTOR_POPULARITY,
            weight=(pop / 100) * w["popularity"],
            detail=f"Popularity: {round(pop)}%",
        ),
        RecommendationFactor(
            name=FACTOR_RECENCY,
            weight=(rec / 100) * w["recency_boost"],
            detail=f"Recency: {round(rec)}%",
        ),
    ]

    score = (
        cat * w["category_affinity"]
        + price * w["price_range_fit"]
        + tag * w["tag_affinity"]
        + pop * w["popularity"]
        + rec * w["recency_boost"]
    )

    # Penalties stack on the total, never per factor
    if product.id in cart_ids:
        score -= PENALTY_IN_CART
    if context.current_product_id == product.id:
        score -= PENALTY_CURRENT_PRODUCT
    if last_viewed == product.id:
        score -= PENALTY_LAST_VIEWED

    return ScoredProduct(product=product, score=max(0.0, score), factors=factors)

def score_all_products(
    profile: SessionProfile,
    context: RecommendationContext,
    catalog: Optional[CatalogRepo] = None,
) -> List[ScoredProduct]:
    """
    Score every in-stock catalog product against the profile.
    Returns products in catalog order; sorting and truncation belong to the caller.
    """
    catalog = catalog or get_catalog()
    t0 = time.perf_counter()
    cart_ids = set(context.cart_product_ids or [])
    last_viewed = profile.viewed_product_ids[-1] if profile.viewed_product_ids else None

    scored = [
        _score_product(p, profile, context, cart_ids, last_viewed, catalog)
        for p in catalog.get_all_products()
        if p.in_stock
    ]
    logger.debug(
        "score_all_products session_id=%s page=%s n=%s time=%.4fs",
        profile.session_id, context.current_page, len(scored), time.perf_counter() - t0,
    )
    return scored

def apply_query_filter(scored: List[ScoredProduct], query: str) -> List[ScoredProduct]:
    """
    Keep products where any query term (lowercased, longer than 2 chars) is a
    substring of name/description/category/subcategory/tags.
    """
    terms = [t for t in query.lower().split() if len(t) > 2]
    if not terms:
        return []

    def _haystack(p: Product) -> str:
        return " ".join([p.name, p.description, p.category, p.subcategory, *p.tags]).lower()

    return [sp for sp in scored if any(term in _haystack(sp.product) for term in terms)]

def determine_badge_type(product: Product, score: float, factors: List[RecommendationFactor]) -> Badge:
    if score >= BEST_MATCH_SCORE:
        return Badge(badge_text="Best for You", badge_type="best-match")

    if not factors:
        return Badge(badge_text="New for You", badge_type="new-for-you")

    # sorted() is stable: the first of equal weights wins
    top = sorted(factors, key=lambda f: f.weight, reverse=True)[0]

    if top.name == FACTOR_PRICE and product.original_price:
        return Badge(badge_text="Great Value", badge_type="value")
    if top.name == FACTOR_POPULARITY:
        return Badge(badge_text="Trending", badge_type="trending")
    if top.name == FACTOR_TAG:
        return Badge(badge_text="Similar to Viewed", badge_type="complement")
    if top.name == FACTOR_CATEGORY:
        return Badge(badge_text="Best for You", badge_type="best-match")
    return Badge(badge_text="New for You", badge_type="new-for-you")
