"""Templated, deterministic explanations for recommendations and cart advice."""

from typing import List, Optional, Sequence

from app.domain.models.product import Product
from app.domain.models.reco import CartOptimization, ProductRecommendation, RecommendationFactor
from app.domain.models.session import SessionProfile
from app.domain.repositories.catalog_repo import CatalogRepo, get_catalog
from app.domain.services.constants import (
    FACTOR_CATEGORY,
    FACTOR_POPULARITY,
    FACTOR_PRICE,
    FACTOR_RECENCY,
    FACTOR_TAG,
)
from app.utils.format import format_price, format_rating

STRONG_TAG_AFFINITY = 0.3
FALLBACK_REASONING = "This product could be a great addition based on current trends."


def _factor_sentence(
    factor: RecommendationFactor,
    product: Product,
    profile: SessionProfile,
    catalog: CatalogRepo,
) -> Optional[str]:
    if factor.name == FACTOR_CATEGORY:
        views = profile.viewed_categories.get(product.category, 0)
        cat_name = catalog.get_category_name(product.category)
        if views > 3:
            return (
                f"You've been exploring {cat_name} products ({views} items viewed this session), "
                f"and this is a strong match in that category."
            )
        if views > 0:
            return f"Based on your interest in {cat_name}, this could be a great pick."
        return None

    if factor.name == FACTOR_PRICE:
        return (
            f"At {format_price(product.price)}, this fits well within your typical browsing range "
            f"around {format_price(profile.price_range.average)}."
        )

    if factor.name == FACTOR_TAG:
        matching = [t for t in product.tags if profile.tag_affinity.get(t, 0) > STRONG_TAG_AFFINITY]
        if matching:
            return f"This matches your interest in {' and '.join(matching[:2])} products."
        return "The features of this product align with your browsing patterns."

    if factor.name == FACTOR_POPULARITY:
        return (
            f"This is one of our most popular items with a {format_rating(product.rating)}/5 rating "
            f"from {product.review_count:,} reviews."
        )

    if factor.name == FACTOR_RECENCY:
        return "Based on what you were just browsing, this seems like a great next pick."

    return None


def generate_reasoning(
    product: Product,
    factors: Sequence[RecommendationFactor],
    profile: SessionProfile,
    catalog: Optional[CatalogRepo] = None,
) -> str:
    """Up to two sentences, one per top-weighted factor."""
    catalog = catalog or get_catalog()
    top = sorted(factors, key=lambda f: f.weight, reverse=True)[:2]
    parts = [s for s in (_factor_sentence(f, product, profile, catalog) for f in top) if s]
    return " ".join(parts) or FALLBACK_REASONING


def generate_conversational_response(
    recommendations: Sequence[ProductRecommendation],
    query: Optional[str],
    profile: SessionProfile,
    catalog: Optional[CatalogRepo] = None,
) -> str:
    count = len(recommendations)

    if count == 0:
        if query:
            return (
                f'I couldn\'t find products matching "{query}" right now. '
                f"Try browsing our categories or asking me about something else!"
            )
        return "I don't have enough data yet to make personalized recommendations. Try browsing some products first!"

    if query:
        catalog = catalog or get_catalog()
        first = recommendations[0]
        top = catalog.get_product_by_id(first.product_id)
        top_name = top.name if top else "this one"
        lead = first.reasoning.split(".")[0]
        return f"Based on your request, I found {count} great options. I'd especially recommend {top_name}: {lead}."

    n = profile.interaction_count
    if n < 3:
        return (
            f"Here are {count} popular picks to get you started! As you browse more, "
            f"I'll learn your preferences and personalize these suggestions."
        )
    if n < 8:
        return f"I'm starting to understand your taste! Here are {count} products I think you'll like based on your browsing so far."
    return (
        f"Based on everything I've learned about your preferences, here are my top {count} picks for you. "
        f"I'm quite confident about these recommendations!"
    )


def generate_session_insight(profile: SessionProfile, catalog: Optional[CatalogRepo] = None) -> str:
    if profile.interaction_count < 2:
        return "I'm just getting started learning your preferences. Browse a few products and I'll start personalizing!"

    catalog = catalog or get_catalog()
    top_categories = sorted(profile.category_affinity.items(), key=lambda kv: kv[1], reverse=True)[:2]
    top_tags = [t for t, _ in sorted(profile.tag_affinity.items(), key=lambda kv: kv[1], reverse=True)[:3]]

    parts: List[str] = []
    if top_categories:
        names = " and ".join(catalog.get_category_name(c) for c, _ in top_categories)
        parts.append(f"You seem to enjoy {names}")
    if top_tags:
        parts.append(f"with a preference for {', '.join(top_tags)} features")
    if profile.price_range.average > 0:
        parts.append(f"in the {format_price(profile.price_range.average)} range")

    return " ".join(parts) + "."


def total_potential_saving(optimizations: Sequence[CartOptimization]) -> float:
    return sum(o.estimated_saving or 0 for o in optimizations)


def generate_cart_summary(optimizations: Sequence[CartOptimization]) -> str:
    n = len(optimizations)
    if n == 0:
        return "Your cart looks good! I don't have any optimization suggestions right now."

    plural = "s" if n > 1 else ""
    saving = total_potential_saving(optimizations)
    if saving > 0:
        return f"I found {n} suggestion{plural} that could save you up to {format_price(saving)}!"
    return f"I have {n} suggestion{plural} to optimize your cart."


_SENSITIVITY_INSIGHTS = {
    "budget": "You appear to be a value-conscious shopper, so I'll prioritize affordable options.",
    "moderate": "You tend to browse mid-range products, a nice balance of quality and value.",
    "premium": "You gravitate toward premium products, so I'll highlight top-tier options.",
    "indifferent": "You browse across a wide price range, so I'll show you the best options regardless of price.",
}


def generate_price_sensitivity_insight(profile: SessionProfile) -> str:
    return _SENSITIVITY_INSIGHTS[profile.price_range.sensitivity]
