import logging
from typing import Iterable, Optional

from app.domain.models.session import BehaviorEvent, PriceRange, SessionProfile, now_ms
from app.domain.repositories.catalog_repo import CatalogRepo, get_catalog
from app.domain.services.constants import (
    BUDGET_AVG_PRICE,
    CATEGORY_WEIGHT_ADD_TO_CART,
    CATEGORY_WEIGHT_VIEW,
    INDIFFERENT_RANGE_RATIO,
    MODERATE_AVG_PRICE,
    PREMIUM_AVG_PRICE,
    TAG_DELTA_ADD_TO_CART,
    TAG_DELTA_REMOVE_FROM_CART,
    TAG_DELTA_VIEW,
)

logger = logging.getLogger(__name__)


def create_default_profile() -> SessionProfile:
    """Fresh, empty profile with a new session id."""
    ts = now_ms()
    return SessionProfile(started_at=ts, last_interaction_at=ts)


def recalculate_category_affinity(profile: SessionProfile) -> None:
    """
    Rebuild `category_affinity` from `viewed_categories`.
    Each category with a nonzero count gets count / total; the map is left
    empty while there is no view signal at all.
    """
    total = sum(v for v in profile.viewed_categories.values() if v)
    if total <= 0:
        profile.category_affinity = {}
        return
    profile.category_affinity = {
        cat: count / total
        for cat, count in profile.viewed_categories.items()
        if count
    }


def update_tag_affinity(profile: SessionProfile, tags: Iterable[str], delta: float) -> None:
    for tag in tags:
        current = profile.tag_affinity.get(tag, 0.0)
        profile.tag_affinity[tag] = max(0.0, min(1.0, current + delta))


def _derive_sensitivity(pr: PriceRange) -> str:
    avg = pr.average
    if avg < BUDGET_AVG_PRICE:
        return "budget"
    if avg < MODERATE_AVG_PRICE:
        return "moderate"
    if avg >= PREMIUM_AVG_PRICE:
        return "premium"
    if (pr.max - pr.min) > avg * INDIFFERENT_RANGE_RATIO:
        return "indifferent"
    return "moderate"


def update_price_range(profile: SessionProfile, price: float) -> None:
    """
    Fold one viewed price into the running price range.

    The first observation (one viewed product or fewer at call time) resets
    the range to that price. Afterwards min/max are running extremes and the
    average is a streaming mean divided by the current number of viewed
    products, so it drifts from the exact mean when a product is re-viewed.
    Sensitivity is re-derived on every call.
    """
    view_count = len(profile.viewed_product_ids)

    if view_count <= 1:
        profile.price_range = PriceRange(min=price, max=price, average=price, sensitivity="indifferent")
        return

    pr = profile.price_range
    pr.min = min(pr.min, price)
    pr.max = max(pr.max, price)
    pr.average += (price - pr.average) / view_count
    pr.sensitivity = _derive_sensitivity(pr)


def _bump_category(profile: SessionProfile, category: str, weight: int) -> None:
    profile.viewed_categories[category] = profile.viewed_categories.get(category, 0) + weight
    recalculate_category_affinity(profile)


def track_event(
    profile: SessionProfile,
    event: BehaviorEvent,
    catalog: Optional[CatalogRepo] = None,
) -> SessionProfile:
    """
    Apply one behavioral event and return the updated profile.
    The input profile is never touched: the update runs on a deep copy, so a
    caller holding the old value never observes a half-applied event.
    Unknown products only advance the interaction counter.
    """
    catalog = catalog or get_catalog()
    updated = profile.model_copy(deep=True)
    updated.interaction_count += 1
    updated.last_interaction_at = event.timestamp

    if event.type == "search":
        if event.query:
            updated.search_queries.append(event.query)
        return updated

    if event.type == "chat":
        return updated

    product = catalog.get_product_by_id(event.product_id)
    if product is None:
        if event.product_id:
            logger.debug("track_event unresolved product_id=%s type=%s", event.product_id, event.type)
        return updated

    if event.type == "view":
        if product.id not in updated.viewed_product_ids:
            updated.viewed_product_ids.append(product.id)
        _bump_category(updated, product.category, CATEGORY_WEIGHT_VIEW)
        update_tag_affinity(updated, product.tags, TAG_DELTA_VIEW)
        update_price_range(updated, product.price)

    elif event.type == "add-to-cart":
        update_tag_affinity(updated, product.tags, TAG_DELTA_ADD_TO_CART)
        _bump_category(updated, product.category, CATEGORY_WEIGHT_ADD_TO_CART)

    elif event.type == "remove-from-cart":
        updated.cart_history.append(product.id)
        update_tag_affinity(updated, product.tags, TAG_DELTA_REMOVE_FROM_CART)

    return updated
