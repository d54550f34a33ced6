# app/domain/services/cart_advisor_svc.py
import logging
import time
from typing import Dict, List, Optional, Sequence, Tuple

from app.domain.models.cart import CartItem
from app.domain.models.product import Product
from app.domain.models.reco import CartOptimization
from app.domain.models.session import SessionProfile
from app.domain.repositories.catalog_repo import CatalogRepo, get_catalog
from app.domain.services.constants import (
    ALTERNATIVE_CONFIDENCE,
    ALTERNATIVE_MAX_PRICE_RATIO,
    ALTERNATIVE_MIN_RATING,
    BUNDLE_CONFIDENCE,
    BUNDLE_SAVING_RATE,
    MAX_CART_OPTIMIZATIONS,
    OVERLAP_CONFIDENCE,
    PRICE_ALERT_CONFIDENCE,
    PRICE_ALERT_RATIO,
    QUANTITY_CONFIDENCE,
    QUANTITY_MAX,
    QUANTITY_MIN,
    QUANTITY_SAVING_RATE,
)
from app.utils.format import format_price, format_rating, round_half_up

logger = logging.getLogger(__name__)

# --- detectors -------------------------------------------------------------

def detect_bundles(cart: Sequence[CartItem], catalog: CatalogRepo) -> List[CartOptimization]:
    """Suggest declared bundle partners missing from the cart (one per partner)."""
    in_cart = {i.product_id for i in cart}
    seen: set = set()
    out: List[CartOptimization] = []

    for item in cart:
        product = catalog.get_product_by_id(item.product_id)
        if product is None:
            continue
        for partner_id in product.bundle_eligible:
            if partner_id in in_cart or partner_id in seen:
                continue
            partner = catalog.get_product_by_id(partner_id)
            if partner is None:
                continue
            seen.add(partner_id)
            out.append(CartOptimization(
                type="bundle",
                title=f"Complete the set with {partner.name}",
                description=(
                    f"{product.name} pairs great with {partner.name}. "
                    f"Customers who bought both saved an average of 15%."
                ),
                confidence=BUNDLE_CONFIDENCE,
                affected_product_ids=[item.product_id],
                suggested_product_id=partner_id,
                estimated_saving=round_half_up(partner.price * BUNDLE_SAVING_RATE),
            ))
    return out

def _best_alternative(product: Product, catalog: CatalogRepo) -> Optional[Product]:
    best: Optional[Product] = None
    tags = set(product.tags)
    for cand in catalog.get_all_products():
        if (
            cand.id != product.id
            and cand.category == product.category
            and cand.price < product.price * ALTERNATIVE_MAX_PRICE_RATIO
            and cand.rating >= ALTERNATIVE_MIN_RATING
            and tags.intersection(cand.tags)
        ):
            # strict '>' keeps the first candidate in catalog order on ties
            if best is None or cand.rating > best.rating:
                best = cand
    return best

def find_alternatives(cart: Sequence[CartItem], profile: SessionProfile, catalog: CatalogRepo) -> List[CartOptimization]:
    if profile.price_range.sensitivity not in ("budget", "moderate"):
        return []

    out: List[CartOptimization] = []
    for item in cart:
        product = catalog.get_product_by_id(item.product_id)
        if product is None:
            continue
        alt = _best_alternative(product, catalog)
        if alt is None:
            continue
        saving = product.price - alt.price
        out.append(CartOptimization(
            type="alternative",
            title=f"Save {format_price(saving)} with a similar option",
            description=(
                f"{alt.name} ({format_rating(alt.rating)}/5 stars) offers similar features "
                f"to {product.name} at a lower price."
            ),
            confidence=ALTERNATIVE_CONFIDENCE,
            affected_product_ids=[item.product_id],
            suggested_product_id=alt.id,
            estimated_saving=saving,
        ))
    return out

def detect_overlaps(cart: Sequence[CartItem], catalog: CatalogRepo) -> List[CartOptimization]:
    """
    Flag cart lines sharing a (category, subcategory).
    Only a flag: nothing here decides which line should go.
    """
    groups: Dict[Tuple[str, str], List[Tuple[CartItem, Product]]] = {}
    for item in cart:
        product = catalog.get_product_by_id(item.product_id)
        if product is None:
            continue
        groups.setdefault((product.category, product.subcategory), []).append((item, product))

    out: List[CartOptimization] = []
    for (_, subcategory), group in groups.items():
        if len(group) < 2:
            continue
        names = " and ".join(p.name for _, p in group)
        out.append(CartOptimization(
            type="remove-duplicate",
            title="Similar items detected",
            description=f"You have {len(group)} items in {subcategory}. Did you mean to add both {names}?",
            confidence=OVERLAP_CONFIDENCE,
            affected_product_ids=[i.product_id for i, _ in group],
        ))
    return out

def analyze_price_sensitivity(cart: Sequence[CartItem], profile: SessionProfile, catalog: CatalogRepo) -> Optional[CartOptimization]:
    browsed_avg = profile.price_range.average
    if browsed_avg == 0:
        return None  # no browsing signal yet

    total = 0.0
    for item in cart:
        product = catalog.get_product_by_id(item.product_id)
        total += (product.price if product else 0) * item.quantity
    item_count = sum(i.quantity for i in cart)
    cart_avg = total / max(1, item_count)

    if cart_avg > browsed_avg * PRICE_ALERT_RATIO and profile.price_range.sensitivity != "premium":
        return CartOptimization(
            type="price-alert",
            title="Cart is above your typical range",
            description=(
                f"Your cart averages {format_price(cart_avg)} per item, while you've been browsing "
                f"items around {format_price(browsed_avg)}. Want me to find some alternatives?"
            ),
            confidence=PRICE_ALERT_CONFIDENCE,
            affected_product_ids=[i.product_id for i in cart],
        )
    return None

def suggest_quantity_discounts(cart: Sequence[CartItem], catalog: CatalogRepo) -> List[CartOptimization]:
    out: List[CartOptimization] = []
    for item in cart:
        if not (QUANTITY_MIN <= item.quantity < QUANTITY_MAX):
            continue
        product = catalog.get_product_by_id(item.product_id)
        if product is None:
            continue
        out.append(CartOptimization(
            type="quantity-discount",
            title=f"Get more value on {product.name}",
            description=(
                f"You already have {item.quantity}. Buying {item.quantity + 1} or more "
                f"often qualifies for multi-buy savings."
            ),
            confidence=QUANTITY_CONFIDENCE,
            affected_product_ids=[item.product_id],
            estimated_saving=round_half_up(product.price * QUANTITY_SAVING_RATE),
        ))
    return out

# --- entry point -----------------------------------------------------------

def analyze_cart(
    cart: Sequence[CartItem],
    profile: SessionProfile,
    catalog: Optional[CatalogRepo] = None,
) -> List[CartOptimization]:
    """
    Run the five detectors and keep the most confident suggestions.
    Order before sorting: bundle, alternative, overlap, price alert, quantity.
    The sort is stable, so equal confidences keep that order.
    """
    if not cart:
        return []

    catalog = catalog or get_catalog()
    t0 = time.perf_counter()

    price_alert = analyze_price_sensitivity(cart, profile, catalog)
    found: List[CartOptimization] = [
        *detect_bundles(cart, catalog),
        *find_alternatives(cart, profile, catalog),
        *detect_overlaps(cart, catalog),
        *([price_alert] if price_alert else []),
        *suggest_quantity_discounts(cart, catalog),
    ]
    ranked = sorted(found, key=lambda o: o.confidence, reverse=True)[:MAX_CART_OPTIMIZATIONS]

    logger.debug(
        "analyze_cart session_id=%s lines=%s found=%s kept=%s time=%.4fs",
        profile.session_id, len(cart), len(found), len(ranked), time.perf_counter() - t0,
    )
    return ranked
