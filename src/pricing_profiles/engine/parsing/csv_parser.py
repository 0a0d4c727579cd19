from __future__ import annotations

import csv
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import IO, Any, Dict, List, Optional, Tuple

from pydantic import ValidationError

from pricing_profiles.engine.catalog.models import Product

REQUIRED_FIELDS = ["id", "name", "sku"]
OPTIONAL_FIELDS = ["quantity", "brand", "category", "sub_category", "segment", "wholesale_price"]


@dataclass
class ParseError:
    row_number: int
    reason: str
    row_data: Dict[str, Any]


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def _parse_decimal(value: Optional[str]) -> Optional[Decimal]:
    stripped = _clean(value)
    if stripped is None:
        return None
    try:
        parsed = Decimal(stripped.replace(",", "").lstrip("$"))
    except InvalidOperation as exc:
        raise ValueError(f"invalid decimal: {value}") from exc
    if not parsed.is_finite():
        raise ValueError(f"invalid decimal: {value}")
    return parsed


def _parse_int(value: Optional[str]) -> int:
    stripped = _clean(value)
    if stripped is None:
        raise ValueError("id is required")
    try:
        return int(stripped)
    except ValueError as exc:
        raise ValueError(f"invalid int: {value}") from exc


def parse_products_csv(
    handle: IO[str],
    *,
    column_map: Optional[Dict[str, str]] = None,
) -> Tuple[List[Product], List[ParseError]]:
    column_map = column_map or {}
    reader = csv.DictReader(handle)
    missing = []
    for field in REQUIRED_FIELDS:
        mapped = column_map.get(field, field)
        if not reader.fieldnames or mapped not in reader.fieldnames:
            missing.append(mapped)
    if missing:
        raise ValueError(f"missing columns: {', '.join(missing)}")

    products: List[Product] = []
    errors: List[ParseError] = []
    seen_ids: set[int] = set()
    for index, row in enumerate(reader, start=2):
        mapped = {field: row.get(column_map.get(field, field)) for field in REQUIRED_FIELDS + OPTIONAL_FIELDS}
        try:
            product_id = _parse_int(mapped["id"])
            if product_id in seen_ids:
                raise ValueError(f"duplicate id: {product_id}")
            product = Product(
                id=product_id,
                name=mapped["name"] or "",
                sku=mapped["sku"] or "",
                quantity=_clean(mapped["quantity"]) or "",
                brand=_clean(mapped["brand"]),
                category=_clean(mapped["category"]),
                sub_category=_clean(mapped["sub_category"]),
                segment=_clean(mapped["segment"]),
                global_wholesale_price=_parse_decimal(mapped["wholesale_price"]),
            )
        except (ValueError, ValidationError) as exc:
            errors.append(ParseError(row_number=index, reason=str(exc), row_data=dict(row)))
            continue
        seen_ids.add(product.id)
        products.append(product)
    return products, errors


def load_products_csv(
    path: str | Path,
    *,
    column_map: Optional[Dict[str, str]] = None,
    encoding: str = "utf-8",
) -> Tuple[List[Product], List[ParseError]]:
    with open(path, "r", encoding=encoding, newline="") as handle:
        return parse_products_csv(handle, column_map=column_map)
