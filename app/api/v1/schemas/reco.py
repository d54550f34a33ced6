# api/v1/schemas/reco.py
from pydantic import BaseModel, Field
from typing import List, Optional

from app.domain.models.cart import Cart, CartItem, Order, ShippingAddress
from app.domain.models.reco import RecommendationContext
from app.domain.models.session import SessionProfile


class RecommendProductsIn(BaseModel):
    session_profile: SessionProfile
    context: RecommendationContext = Field(default_factory=RecommendationContext)
    chat_query: Optional[str] = None


class CartAdvisorIn(BaseModel):
    cart: List[CartItem] = Field(default_factory=list)
    session_profile: SessionProfile
    chat_query: Optional[str] = None


class CartItemIn(BaseModel):
    product_id: str = Field(min_length=1)


class CartQuantityIn(BaseModel):
    quantity: int = Field(ge=0, le=99)  # 0 removes the line


class CartOut(BaseModel):
    session_id: str
    cart: Cart
    item_count: int
    total: float


class CheckoutIn(BaseModel):
    shipping_address: ShippingAddress


class OrderListOut(BaseModel):
    items: List[Order]
    count: int
