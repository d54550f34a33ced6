# app/domain/repositories/catalog_repo.py

from __future__ import annotations
import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional

from app.core.config import get_settings
from app.domain.models.product import Category, CategoryId, Product

logger = logging.getLogger(__name__)

class CatalogRepo:
    """
    Read-only product catalog.
    Products keep their file order; that order is the catalog order every
    scorer and detector iterates in.
    """

    def __init__(self, products: List[Product], categories: List[Category]):
        self._products = list(products)
        self._by_id: Dict[str, Product] = {p.id: p for p in self._products}
        self._categories: Dict[str, Category] = {c.id: c for c in categories}

    @classmethod
    def from_file(cls, path: str | Path) -> "CatalogRepo":
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        products = [Product.model_validate(p) for p in raw.get("products", [])]
        categories = [Category.model_validate(c) for c in raw.get("categories", [])]
        logger.info("catalog loaded path=%s products=%s categories=%s", path, len(products), len(categories))
        return cls(products, categories)

    def get_product_by_id(self, product_id: Optional[str]) -> Optional[Product]:
        if not product_id:
            return None
        return self._by_id.get(product_id)

    def get_all_products(self) -> List[Product]:
        return list(self._products)

    def get_products_by_category(self, category: CategoryId) -> List[Product]:
        return [p for p in self._products if p.category == category]

    def get_category_by_id(self, category_id: CategoryId) -> Category:
        # A category missing from the file still resolves, just without neighbours
        cat = self._categories.get(category_id)
        if cat is None:
            return Category(id=category_id, name=str(category_id).title())
        return cat

    def get_category_name(self, category_id: CategoryId) -> str:
        return self.get_category_by_id(category_id).name

    def get_all_categories(self) -> List[Category]:
        return list(self._categories.values())


@lru_cache
def get_catalog() -> CatalogRepo:
    """Process-wide catalog, loaded once from settings.catalog_path."""
    return CatalogRepo.from_file(get_settings().catalog_path)
