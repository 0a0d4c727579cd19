from __future__ import annotations

from decimal import Decimal
from typing import Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

FILTER_FIELDS = ("search", "category", "sub_category", "segment", "brand", "sku")


class Product(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int
    name: str
    sku: str
    quantity: str = ""
    brand: Optional[str] = None
    category: Optional[str] = None
    sub_category: Optional[str] = None
    segment: Optional[str] = None
    global_wholesale_price: Optional[Decimal] = None

    @field_validator("name", "sku")
    @classmethod
    def required_stripped(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("value is required")
        return value.strip()


class ProductFilters(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    search: Optional[str] = None
    category: Optional[str] = None
    sub_category: Optional[str] = None
    segment: Optional[str] = None
    brand: Optional[str] = None
    sku: Optional[str] = None


def build_filters(**values: Optional[str]) -> Optional[ProductFilters]:
    """Build a filter set from raw dropdown/search values.

    Empty values are dropped and the search text is trimmed. Returns ``None``
    when no filter is active, meaning "all products".
    """
    unknown = set(values) - set(FILTER_FIELDS)
    if unknown:
        raise ValueError(f"unknown filters: {', '.join(sorted(unknown))}")
    active = {}
    for field in FILTER_FIELDS:
        value = values.get(field)
        if value is None:
            continue
        if field == "search":
            value = value.strip()
        if value:
            active[field] = value
    if not active:
        return None
    return ProductFilters(**active)


def _same(left: Optional[str], right: str) -> bool:
    return left is not None and left.strip().lower() == right.strip().lower()


def matches(product: Product, filters: ProductFilters) -> bool:
    if filters.search:
        needle = filters.search.strip().lower()
        if needle not in product.name.lower() and needle not in product.sku.lower():
            return False
    for field in FILTER_FIELDS[1:]:
        expected = getattr(filters, field)
        if expected and not _same(getattr(product, field), expected):
            return False
    return True


def filter_products(products: Iterable[Product], filters: Optional[ProductFilters]) -> List[Product]:
    if filters is None:
        return list(products)
    return [product for product in products if matches(product, filters)]
