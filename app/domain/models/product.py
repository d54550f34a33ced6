from pydantic import BaseModel, Field
from typing import Optional, List, Literal

CategoryId = Literal["electronics", "clothing", "home", "sports", "books", "beauty"]

class Product(BaseModel):
    id: str
    name: str
    description: str = ""
    price: float = Field(ge=0)
    original_price: Optional[float] = None
    category: CategoryId
    subcategory: str
    tags: List[str] = []
    rating: float = Field(default=0, ge=0, le=5)
    review_count: int = 0
    image_url: Optional[str] = None
    in_stock: bool = True
    bundle_eligible: List[str] = []
    popularity_score: float = 0

    model_config = {"frozen": True}  # immuable = safe

class Category(BaseModel):
    id: CategoryId
    name: str
    description: str = ""
    related_categories: List[CategoryId] = []

    model_config = {"frozen": True}
