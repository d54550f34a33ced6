from typing import List, Literal, Optional
from pydantic import BaseModel, Field, field_validator

from app.domain.models.session import now_ms

OrderStatus = Literal["confirmed", "shipped", "delivered"]

class CartItem(BaseModel):
    product_id: str
    quantity: int = Field(default=1, ge=1)
    added_at: int = Field(default_factory=now_ms)

class Cart(BaseModel):
    items: List[CartItem] = Field(default_factory=list)
    last_modified: int = Field(default_factory=now_ms)

    def product_ids(self) -> List[str]:
        return [i.product_id for i in self.items]

class ShippingAddress(BaseModel):
    full_name: str
    email: str
    address: str
    city: str
    zip_code: str

    @field_validator("full_name", "email", "address", "city", "zip_code")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()

class OrderItem(BaseModel):
    product_id: str
    quantity: int = Field(ge=1)
    price_at_purchase: float = Field(ge=0)

class Order(BaseModel):
    id: str
    session_id: Optional[str] = None
    items: List[OrderItem]
    total: float = Field(ge=0)
    shipping_address: ShippingAddress
    status: OrderStatus = "confirmed"
    created_at: int = Field(default_factory=now_ms)
