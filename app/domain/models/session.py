import time
import uuid
from typing import Dict, List, Literal, Optional
from pydantic import BaseModel, Field

from app.domain.models.product import CategoryId

PriceSensitivity = Literal["budget", "moderate", "premium", "indifferent"]
EventType = Literal["view", "add-to-cart", "remove-from-cart", "search", "chat"]


def now_ms() -> int:
    return int(time.time() * 1000)


class PriceRange(BaseModel):
    min: float = 0
    max: float = 0
    average: float = 0
    sensitivity: PriceSensitivity = "indifferent"


class SessionProfile(BaseModel):
    """
    Behavioral profile of one shopping session.
    `category_affinity` and `price_range.sensitivity` are derived fields:
    only the session learner writes them.
    """
    session_id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    started_at: int = Field(default_factory=now_ms)
    last_interaction_at: int = Field(default_factory=now_ms)

    viewed_product_ids: List[str] = Field(default_factory=list)
    viewed_categories: Dict[CategoryId, int] = Field(default_factory=dict)
    search_queries: List[str] = Field(default_factory=list)
    cart_history: List[str] = Field(default_factory=list)

    price_range: PriceRange = Field(default_factory=PriceRange)
    category_affinity: Dict[CategoryId, float] = Field(default_factory=dict)
    tag_affinity: Dict[str, float] = Field(default_factory=dict)
    interaction_count: int = Field(default=0, ge=0)


class BehaviorEvent(BaseModel):
    type: EventType
    product_id: Optional[str] = None
    category: Optional[CategoryId] = None
    query: Optional[str] = None
    timestamp: int = Field(default_factory=now_ms)
