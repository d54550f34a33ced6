import pytest

from app.core.config import DEFAULT_CATALOG_PATH
from app.domain.models.product import Category, Product
from app.domain.models.session import PriceRange, SessionProfile
from app.domain.repositories.catalog_repo import CatalogRepo


@pytest.fixture(scope="session")
def catalog() -> CatalogRepo:
    """The bundled catalog shipped in app/data/catalog.json."""
    return CatalogRepo.from_file(DEFAULT_CATALOG_PATH)


CATEGORIES = [
    Category(id="electronics", name="Electronics", related_categories=["home"]),
    Category(id="home", name="Home & Living", related_categories=["electronics"]),
    Category(id="books", name="Books", related_categories=[]),
]


def make_product(pid: str, **kw) -> Product:
    data = {
        "id": pid,
        "name": f"Product {pid}",
        "description": "",
        "price": 1000,
        "category": "electronics",
        "subcategory": "misc",
        "tags": [],
        "rating": 4.0,
        "review_count": 10,
        "in_stock": True,
        "bundle_eligible": [],
        "popularity_score": 50,
    }
    data.update(kw)
    return Product(**data)


def make_catalog(*products: Product) -> CatalogRepo:
    return CatalogRepo(list(products), CATEGORIES)


def make_profile(**kw) -> SessionProfile:
    price = kw.pop("price_range", None)
    profile = SessionProfile(**kw)
    if price is not None:
        profile.price_range = PriceRange(**price)
    return profile


class _DeleteResult:
    def __init__(self, n: int):
        self.deleted_count = n


class _Cursor:
    def __init__(self, docs):
        self._docs = docs

    def sort(self, key, direction):
        self._docs = sorted(self._docs, key=lambda d: d.get(key), reverse=direction < 0)
        return self

    def limit(self, n):
        self._docs = self._docs[:n]
        return self

    def __aiter__(self):
        self._it = iter(self._docs)
        return self

    async def __anext__(self):
        try:
            return next(self._it)
        except StopIteration:
            raise StopAsyncIteration


class FakeCollection:
    """Just enough of a Motor collection for OrderRepo."""

    def __init__(self):
        self.docs = []

    @staticmethod
    def _match(doc, flt):
        return all(doc.get(k) == v for k, v in flt.items())

    async def insert_one(self, doc):
        self.docs.append(dict(doc, _id=len(self.docs) + 1))

    async def find_one(self, flt, projection=None):
        for d in self.docs:
            if self._match(d, flt):
                return {k: v for k, v in d.items() if k != "_id"}
        return None

    def find(self, flt, projection=None):
        return _Cursor([{k: v for k, v in d.items() if k != "_id"} for d in self.docs if self._match(d, flt)])

    async def delete_one(self, flt):
        for i, d in enumerate(self.docs):
            if self._match(d, flt):
                del self.docs[i]
                return _DeleteResult(1)
        return _DeleteResult(0)


class FakeDb(dict):
    def __missing__(self, name):
        col = self[name] = FakeCollection()
        return col


@pytest.fixture
def fake_db() -> FakeDb:
    return FakeDb()
