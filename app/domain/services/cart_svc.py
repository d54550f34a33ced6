from typing import Optional

from app.domain.models.cart import Cart, CartItem
from app.domain.models.session import now_ms
from app.domain.repositories.catalog_repo import CatalogRepo, get_catalog

# Cart edits return a new Cart; the stored value is replaced as a whole.

def add_item(cart: Cart, product_id: str) -> Cart:
    items = [i.model_copy() for i in cart.items]
    for i in items:
        if i.product_id == product_id:
            i.quantity += 1
            break
    else:
        items.append(CartItem(product_id=product_id, quantity=1))
    return Cart(items=items, last_modified=now_ms())

def remove_item(cart: Cart, product_id: str) -> Cart:
    return Cart(items=[i for i in cart.items if i.product_id != product_id], last_modified=now_ms())

def update_quantity(cart: Cart, product_id: str, quantity: int) -> Cart:
    if quantity <= 0:
        return remove_item(cart, product_id)
    items = [
        i.model_copy(update={"quantity": quantity}) if i.product_id == product_id else i
        for i in cart.items
    ]
    return Cart(items=items, last_modified=now_ms())

def clear_cart() -> Cart:
    return Cart(items=[], last_modified=now_ms())

def get_item_count(cart: Cart) -> int:
    return sum(i.quantity for i in cart.items)

def get_total(cart: Cart, catalog: Optional[CatalogRepo] = None) -> float:
    catalog = catalog or get_catalog()
    total = 0.0
    for i in cart.items:
        product = catalog.get_product_by_id(i.product_id)
        total += (product.price if product else 0) * i.quantity
    return total
