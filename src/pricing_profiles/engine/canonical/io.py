from __future__ import annotations

import csv
import io
from decimal import Decimal, InvalidOperation, localcontext
from typing import Iterable, Sequence

DECIMAL_FIELDS = {"wholesale_price", "adjustment", "new_price"}


def _format_decimal(value: object) -> object:
    if value is None:
        return None
    if isinstance(value, Decimal):
        decimal_value = value
    else:
        try:
            decimal_value = Decimal(str(value))
        except (InvalidOperation, ValueError, TypeError):
            return value
    if not decimal_value.is_finite():
        return value
    with localcontext() as context:
        context.prec = max(context.prec, decimal_value.adjusted() + 3)
        return str(decimal_value.quantize(Decimal("0.01")))


def _normalize_row(row: dict) -> dict:
    normalized = dict(row)
    for field in DECIMAL_FIELDS:
        if field in normalized:
            normalized[field] = _format_decimal(normalized[field])
    return normalized


def _sort_key(row: dict) -> tuple[str, int, str]:
    row_id = row.get("id")
    try:
        numeric_id = int(str(row_id))
    except ValueError:
        numeric_id = 0
    return str(row.get("sku", "")), numeric_id, str(row_id)


def write_csv_bytes(
    rows: Iterable[dict],
    fieldnames: Sequence[str],
    *,
    extrasaction: str = "ignore",
) -> bytes:
    normalized_rows = [_normalize_row(row) for row in rows]
    normalized_rows.sort(key=_sort_key)
    buffer = io.StringIO()
    writer = csv.DictWriter(
        buffer,
        fieldnames=fieldnames,
        extrasaction=extrasaction,
        quoting=csv.QUOTE_MINIMAL,
        lineterminator="\n",
    )
    writer.writeheader()
    for row in normalized_rows:
        writer.writerow(row)
    return buffer.getvalue().encode("utf-8")


def read_csv_rows(bytes_blob: bytes) -> list[dict]:
    buffer = io.StringIO(bytes_blob.decode("utf-8"))
    reader = csv.DictReader(buffer)
    return list(reader)
