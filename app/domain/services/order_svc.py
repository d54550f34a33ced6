import logging
import uuid
from typing import List, Optional

from app.domain.models.cart import Cart, Order, OrderItem, ShippingAddress
from app.domain.repositories.catalog_repo import CatalogRepo, get_catalog

logger = logging.getLogger(__name__)

def build_order(
    cart: Cart,
    address: ShippingAddress,
    session_id: Optional[str] = None,
    catalog: Optional[CatalogRepo] = None,
) -> Optional[Order]:
    """
    Turn the cart into a confirmed order at current catalog prices.
    Returns None for an empty cart. Lines whose product is gone are dropped.
    """
    if not cart.items:
        return None

    catalog = catalog or get_catalog()
    items: List[OrderItem] = []
    for line in cart.items:
        product = catalog.get_product_by_id(line.product_id)
        if product is None:
            logger.warning("order skip unknown product_id=%s", line.product_id)
            continue
        items.append(OrderItem(product_id=line.product_id, quantity=line.quantity, price_at_purchase=product.price))

    total = sum(i.price_at_purchase * i.quantity for i in items)
    return Order(
        id=str(uuid.uuid4()),
        session_id=session_id,
        items=items,
        total=total,
        shipping_address=address,
        status="confirmed",
    )
