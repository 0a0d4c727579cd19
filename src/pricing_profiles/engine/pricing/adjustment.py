from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from pricing_profiles.util.errors import (
    FIXED_DECREASE_EXCEEDS_BASE,
    INVALID_ADJUSTMENT_VALUE,
    INVALID_BASE_PRICE,
    PERCENTAGE_OUT_OF_RANGE,
    PriceValidationError,
)

ZERO = Decimal("0")
HUNDRED = Decimal("100")
CENT = Decimal("0.01")
MIN_PRECISION = 28

INVALID_BASE_PRICE_MESSAGE = "Base price must be a valid positive number"
INVALID_ADJUSTMENT_VALUE_MESSAGE = "Adjustment value must be a valid positive number"
PERCENTAGE_OUT_OF_RANGE_MESSAGE = "Percentage adjustment cannot exceed 100%"
FIXED_DECREASE_EXCEEDS_BASE_MESSAGE = "Fixed decrease amount cannot exceed base price"
PERCENTAGE_DECREASE_OUT_OF_RANGE_MESSAGE = "Percentage decrease cannot exceed 100%"
INVALID_PRODUCT_PRICE_MESSAGE = "Invalid product price"


class AdjustmentType(str, Enum):
    FIXED = "fixed"
    DYNAMIC = "dynamic"


class IncrementType(str, Enum):
    INCREASE = "increase"
    DECREASE = "decrease"


class _EngineModel(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class PriceAdjustmentRule(_EngineModel):
    adjustment_type: AdjustmentType
    adjustment_value: Decimal = Field(allow_inf_nan=True)
    increment_type: IncrementType


class PriceComputationInput(PriceAdjustmentRule):
    base_price: Decimal = Field(allow_inf_nan=True)

    @classmethod
    def from_rule(cls, base_price: Any, rule: PriceAdjustmentRule) -> "PriceComputationInput":
        return cls(
            base_price=base_price,
            adjustment_type=rule.adjustment_type,
            adjustment_value=rule.adjustment_value,
            increment_type=rule.increment_type,
        )


class PriceComputationResult(_EngineModel):
    base_price: Decimal
    new_price: Decimal
    adjustment: Decimal


class BatchItem(_EngineModel):
    id: Any
    base_price: Optional[Decimal] = Field(default=None, allow_inf_nan=True)


class BatchResult(_EngineModel):
    id: Any
    base_price: Decimal
    new_price: Decimal
    adjustment: Decimal
    error: Optional[str] = None

    def as_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


def to_decimal(value: Any) -> Optional[Decimal]:
    """Coerce a number or numeric string to ``Decimal``; ``None`` when impossible.

    Floats go through ``str`` so ``99.99`` becomes ``Decimal("99.99")`` rather
    than its binary expansion. Non-finite values are returned as-is for the
    validator to reject.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            return None
        try:
            return Decimal(stripped)
        except InvalidOperation:
            return None
    return None


def _is_valid_amount(value: Optional[Decimal]) -> bool:
    return value is not None and value.is_finite() and value >= ZERO


def working_precision(*values: Decimal) -> int:
    """Digits needed to add, scale and quantize these values to cents exactly."""
    digits = 0
    for value in values:
        _, coefficient, exponent = value.as_tuple()
        digits += len(coefficient) + abs(int(exponent))
    return max(MIN_PRECISION, digits + 10)


def round_price(value: Decimal) -> Decimal:
    with localcontext() as context:
        context.prec = max(context.prec, working_precision(value))
        return value.quantize(CENT, rounding=ROUND_HALF_UP)


def clamp_price(value: Decimal, minimum: Decimal = ZERO) -> Decimal:
    return max(value, minimum)


def find_validation_error(params: PriceComputationInput) -> Optional[PriceValidationError]:
    if not _is_valid_amount(params.base_price):
        return PriceValidationError(INVALID_BASE_PRICE, INVALID_BASE_PRICE_MESSAGE)
    if not _is_valid_amount(params.adjustment_value):
        return PriceValidationError(INVALID_ADJUSTMENT_VALUE, INVALID_ADJUSTMENT_VALUE_MESSAGE)
    is_dynamic = params.adjustment_type == AdjustmentType.DYNAMIC
    if is_dynamic and params.adjustment_value > HUNDRED:
        return PriceValidationError(PERCENTAGE_OUT_OF_RANGE, PERCENTAGE_OUT_OF_RANGE_MESSAGE)
    if params.increment_type == IncrementType.DECREASE:
        if not is_dynamic and params.adjustment_value > params.base_price:
            return PriceValidationError(FIXED_DECREASE_EXCEEDS_BASE, FIXED_DECREASE_EXCEEDS_BASE_MESSAGE)
        # unreachable after the percentage check above; kept for decrease-specific callers
        if is_dynamic and params.adjustment_value > HUNDRED:
            return PriceValidationError(PERCENTAGE_OUT_OF_RANGE, PERCENTAGE_DECREASE_OUT_OF_RANGE_MESSAGE)
    return None


def validate_calculation_params(params: PriceComputationInput) -> Optional[str]:
    error = find_validation_error(params)
    return error.message if error else None


def require_positive_adjustment(value: Any) -> Optional[str]:
    """Reject adjustment values that are not strictly positive.

    The validator accepts zero; form fields and previews must not.
    """
    amount = to_decimal(value)
    if amount is None or not amount.is_finite() or amount <= ZERO:
        return INVALID_ADJUSTMENT_VALUE_MESSAGE
    return None


def _raw_price(params: PriceComputationInput) -> Decimal:
    base_price = params.base_price
    if params.adjustment_type == AdjustmentType.FIXED:
        amount = params.adjustment_value
    else:
        amount = params.adjustment_value / HUNDRED * base_price
    if params.increment_type == IncrementType.INCREASE:
        return base_price + amount
    return max(ZERO, base_price - amount)


def compute_single_price(params: PriceComputationInput) -> PriceComputationResult:
    error = find_validation_error(params)
    if error:
        raise error
    with localcontext() as context:
        context.prec = working_precision(params.base_price, params.adjustment_value)
        new_price = clamp_price(round_price(_raw_price(params)))
        adjustment = new_price - params.base_price
    return PriceComputationResult(
        base_price=params.base_price,
        new_price=new_price,
        adjustment=adjustment,
    )


def preview_single_price(params: PriceComputationInput) -> Optional[PriceComputationResult]:
    try:
        return compute_single_price(params)
    except PriceValidationError:
        return None


def _item_fields(item: Union[BatchItem, Mapping[str, Any]]) -> tuple[Any, Optional[Decimal]]:
    if isinstance(item, BatchItem):
        return item.id, item.base_price
    raw_price = item.get("basePrice", item.get("base_price"))
    return item.get("id"), to_decimal(raw_price)


def compute_batch(
    items: Iterable[Union[BatchItem, Mapping[str, Any]]],
    rule: PriceAdjustmentRule,
) -> List[BatchResult]:
    results: List[BatchResult] = []
    for item in items:
        item_id, base_price = _item_fields(item)
        if base_price is None or base_price.is_nan() or base_price <= ZERO:
            results.append(
                BatchResult(
                    id=item_id,
                    base_price=ZERO,
                    new_price=ZERO,
                    adjustment=ZERO,
                    error=INVALID_PRODUCT_PRICE_MESSAGE,
                )
            )
            continue
        try:
            computed = compute_single_price(PriceComputationInput.from_rule(base_price, rule))
        except PriceValidationError as exc:
            fallback = base_price if base_price.is_finite() else ZERO
            results.append(
                BatchResult(
                    id=item_id,
                    base_price=fallback,
                    new_price=fallback,
                    adjustment=ZERO,
                    error=exc.message,
                )
            )
            continue
        results.append(
            BatchResult(
                id=item_id,
                base_price=computed.base_price,
                new_price=computed.new_price,
                adjustment=computed.adjustment,
            )
        )
    return results
