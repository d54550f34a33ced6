from typing import List, Literal, Optional
from pydantic import BaseModel, Field

from app.domain.models.product import Product

BadgeType = Literal["best-match", "value", "trending", "complement", "new-for-you"]
CartOptimizationType = Literal[
    "bundle",
    "alternative",
    "remove-duplicate",
    "price-alert",
    "quantity-discount",
]
PageName = Literal["home", "products", "product-detail", "cart"]

class RecommendationFactor(BaseModel):
    name: str
    weight: float  # contribution to the total score, not the raw sub-score
    detail: str
    model_config = {"frozen": True}

class ScoredProduct(BaseModel):
    product: Product
    score: float = Field(ge=0)
    factors: List[RecommendationFactor]

class Badge(BaseModel):
    badge_text: str
    badge_type: BadgeType
    model_config = {"frozen": True}

class ProductRecommendation(BaseModel):
    product_id: str
    score: float = Field(ge=0)
    confidence: float = Field(ge=0, le=1)
    reasoning: str
    badge_text: str
    badge_type: BadgeType
    factors: List[RecommendationFactor]
    model_config = {"frozen": True} # immuable = safe

class CartOptimization(BaseModel):
    type: CartOptimizationType
    title: str
    description: str
    confidence: float = Field(ge=0, le=1)
    affected_product_ids: List[str]
    suggested_product_id: Optional[str] = None
    estimated_saving: Optional[float] = None
    model_config = {"frozen": True}

class RecommendationContext(BaseModel):
    current_page: PageName = "home"
    current_product_id: Optional[str] = None
    cart_product_ids: List[str] = Field(default_factory=list)
    limit: Optional[int] = Field(default=None, ge=1, le=50)

class RecommendProductsResult(BaseModel):
    recommendations: List[ProductRecommendation]
    message: str
    confidence: float
    confidence_label: str
    session_insight: str
    processing_time_ms: int
    model_config = {"frozen": True}

class CartAdvisorResult(BaseModel):
    optimizations: List[CartOptimization]
    summary: str
    total_potential_saving: float
    price_sensitivity_insight: str
    confidence: float
    processing_time_ms: int
    model_config = {"frozen": True}
