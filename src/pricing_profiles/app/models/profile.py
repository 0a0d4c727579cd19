from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from pricing_profiles.engine.catalog.selection import PRICING_SCOPES, SCOPE_MULTIPLE
from pricing_profiles.engine.pricing.adjustment import (
    HUNDRED,
    AdjustmentType,
    IncrementType,
    PriceAdjustmentRule,
    to_decimal,
)

ADJUSTMENT_TYPES = tuple(item.value for item in AdjustmentType)
INCREMENT_TYPES = tuple(item.value for item in IncrementType)


class ProfileLimits(BaseModel):
    name_min_length: int = 3
    name_max_length: int = 100
    max_products: int = 1000
    max_fixed_adjustment: Decimal = Decimal("1000000")


class PricingProfileForm(BaseModel):
    """Pricing profile fields as entered, before any coercion."""

    name: str = ""
    adjustment_type: str = AdjustmentType.FIXED.value
    adjustment_value: Any = ""
    increment_type: str = IncrementType.INCREASE.value
    product_ids: List[Any] = Field(default_factory=list)
    scope: str = SCOPE_MULTIPLE

    def to_rule(self) -> PriceAdjustmentRule:
        value = to_decimal(self.adjustment_value)
        if value is None:
            raise ValueError(f"invalid adjustment value: {self.adjustment_value!r}")
        return PriceAdjustmentRule(
            adjustment_type=self.adjustment_type,
            adjustment_value=value,
            increment_type=self.increment_type,
        )


@dataclass
class ValidationResult:
    is_valid: bool
    errors: Dict[str, str] = field(default_factory=dict)

    def first_error(self) -> Optional[str]:
        return next(iter(self.errors.values()), None)


def _validate_name(name: str, limits: ProfileLimits) -> Optional[str]:
    trimmed = (name or "").strip()
    if not trimmed:
        return "Profile name is required"
    if len(trimmed) < limits.name_min_length:
        return f"Profile name must be at least {limits.name_min_length} characters"
    if len(trimmed) > limits.name_max_length:
        return f"Profile name must be less than {limits.name_max_length} characters"
    return None


def _validate_adjustment_value(form: PricingProfileForm, limits: ProfileLimits) -> Optional[str]:
    value = to_decimal(form.adjustment_value)
    if value is None or value.is_nan():
        return "Adjustment value must be a valid number"
    if value <= 0:
        return "Adjustment value must be greater than 0"
    if form.adjustment_type == AdjustmentType.DYNAMIC.value and value > HUNDRED:
        return "Percentage adjustment cannot exceed 100%"
    if form.adjustment_type == AdjustmentType.FIXED.value and value > limits.max_fixed_adjustment:
        return f"Fixed adjustment cannot exceed ${limits.max_fixed_adjustment:,}"
    return None


def _is_product_id(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _validate_product_ids(form: PricingProfileForm, limits: ProfileLimits) -> Optional[str]:
    if not form.product_ids:
        return "At least one product must be selected"
    if not all(_is_product_id(value) for value in form.product_ids):
        return "All product IDs must be valid numbers"
    if len(form.product_ids) > limits.max_products:
        return f"Cannot select more than {limits.max_products} products at once"
    return None


def validate_pricing_profile_form(
    form: PricingProfileForm,
    limits: Optional[ProfileLimits] = None,
) -> ValidationResult:
    limits = limits or ProfileLimits()
    errors: Dict[str, str] = {}

    name_error = _validate_name(form.name, limits)
    if name_error:
        errors["name"] = name_error

    if form.adjustment_type not in ADJUSTMENT_TYPES:
        errors["adjustment_type"] = "Adjustment type must be 'fixed' or 'dynamic'"

    value_error = _validate_adjustment_value(form, limits)
    if value_error:
        errors["adjustment_value"] = value_error

    if form.increment_type not in INCREMENT_TYPES:
        errors["increment_type"] = "Increment type must be 'increase' or 'decrease'"

    if form.scope not in PRICING_SCOPES:
        errors["scope"] = f"Pricing scope must be one of {', '.join(PRICING_SCOPES)}"

    products_error = _validate_product_ids(form, limits)
    if products_error:
        errors["product_ids"] = products_error

    return ValidationResult(is_valid=not errors, errors=errors)


def format_adjustment_sign(adjustment_type: str) -> str:
    return "$" if adjustment_type == AdjustmentType.FIXED.value else "%"


def format_adjustment_value(value: Any, adjustment_type: str) -> str:
    amount = to_decimal(value)
    if amount is None or not amount.is_finite():
        raise ValueError(f"invalid adjustment value: {value!r}")
    if adjustment_type == AdjustmentType.DYNAMIC.value:
        return f"{amount.normalize():f}%"
    return f"${amount.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)}"


def format_increment_type(increment_type: str) -> str:
    return "Increase" if increment_type == IncrementType.INCREASE.value else "Decrease"
