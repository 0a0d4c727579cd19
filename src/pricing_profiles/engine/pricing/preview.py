from __future__ import annotations

from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from pricing_profiles.engine.catalog.models import Product
from pricing_profiles.engine.pricing.adjustment import (
    ZERO,
    BatchItem,
    BatchResult,
    PriceAdjustmentRule,
    compute_batch,
    require_positive_adjustment,
)

PREVIEW_COLUMNS = ["id", "title", "sku", "category", "wholesale_price", "adjustment", "new_price"]


class PricingTableItem(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: int
    title: str
    sku: str
    category: str
    wholesale_price: Decimal
    adjustment: Decimal
    new_price: Decimal


def _fallback_row(product: Product) -> PricingTableItem:
    wholesale_price = product.global_wholesale_price or ZERO
    return PricingTableItem(
        id=product.id,
        title=product.name,
        sku=product.sku,
        category=product.category or "",
        wholesale_price=wholesale_price,
        adjustment=ZERO,
        new_price=wholesale_price,
    )


def compute_preview_batch(
    selected_products: Sequence[Product],
    rule: PriceAdjustmentRule,
) -> List[BatchResult]:
    return compute_batch(
        [
            BatchItem(id=product.id, base_price=product.global_wholesale_price or ZERO)
            for product in selected_products
        ],
        rule,
    )


def generate_pricing_preview(
    selected_products: Sequence[Product],
    rule: PriceAdjustmentRule,
) -> List[PricingTableItem]:
    if not selected_products:
        return []
    if require_positive_adjustment(rule.adjustment_value):
        return []
    return build_pricing_table(selected_products, compute_preview_batch(selected_products, rule))


def build_pricing_table(
    selected_products: Sequence[Product],
    calculated: Iterable[BatchResult],
) -> List[PricingTableItem]:
    """Join batch results back onto their products, in product order.

    Products without a usable result keep their wholesale price unchanged.
    The first result wins when an id repeats.
    """
    by_id: Dict[int, BatchResult] = {}
    for result in calculated:
        by_id.setdefault(result.id, result)

    rows: List[PricingTableItem] = []
    for product in selected_products:
        result = by_id.get(product.id)
        if result is None or result.error:
            rows.append(_fallback_row(product))
            continue
        rows.append(
            PricingTableItem(
                id=product.id,
                title=product.name,
                sku=product.sku,
                category=product.category or "",
                wholesale_price=result.base_price,
                adjustment=result.adjustment,
                new_price=result.new_price,
            )
        )
    return rows


def summarize_preview(results: Iterable[BatchResult]) -> Dict[str, int]:
    rows = 0
    errors = 0
    for result in results:
        rows += 1
        if result.error:
            errors += 1
    return {"rows": rows, "errors": errors}


ProductKey = Tuple[int, str, str, Optional[str], Optional[Decimal]]
CacheKey = Tuple[Tuple[ProductKey, ...], PriceAdjustmentRule]


class PreviewCache:
    """Memoizes preview tables keyed by the displayed product fields and the rule.

    Callers invalidate explicitly when the catalog changes underneath them.
    """

    def __init__(self) -> None:
        self._entries: Dict[CacheKey, List[PricingTableItem]] = {}
        self.hits = 0
        self.misses = 0

    @staticmethod
    def _key(products: Sequence[Product], rule: PriceAdjustmentRule) -> CacheKey:
        fields = tuple(
            (product.id, product.name, product.sku, product.category, product.global_wholesale_price)
            for product in products
        )
        return fields, rule

    def get(self, products: Sequence[Product], rule: PriceAdjustmentRule) -> List[PricingTableItem]:
        key = self._key(products, rule)
        cached = self._entries.get(key)
        if cached is not None:
            self.hits += 1
            return list(cached)
        self.misses += 1
        rows = generate_pricing_preview(products, rule)
        self._entries[key] = rows
        return list(rows)

    def invalidate(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
