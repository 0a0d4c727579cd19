from decimal import Decimal

import pytest

from pricing_profiles.engine.pricing.adjustment import (
    AdjustmentType,
    IncrementType,
    PriceComputationInput,
    compute_single_price,
    preview_single_price,
)
from pricing_profiles.util.errors import (
    FIXED_DECREASE_EXCEEDS_BASE,
    PERCENTAGE_OUT_OF_RANGE,
    NonRetryableError,
    PriceValidationError,
)


def _params(base_price, adjustment_type, adjustment_value, increment_type) -> PriceComputationInput:
    return PriceComputationInput(
        base_price=base_price,
        adjustment_type=adjustment_type,
        adjustment_value=adjustment_value,
        increment_type=increment_type,
    )


def test_fixed_increase() -> None:
    result = compute_single_price(_params(100, "fixed", 20, "increase"))
    assert result.base_price == Decimal("100")
    assert result.new_price == Decimal("120")
    assert result.adjustment == Decimal("20")


def test_fixed_increase_with_decimal_prices() -> None:
    result = compute_single_price(_params(99.99, "fixed", 10.50, "increase"))
    assert result.new_price == Decimal("110.49")
    assert result.adjustment == Decimal("10.50")


def test_fixed_increase_rounds_to_cents() -> None:
    result = compute_single_price(_params("100.123", "fixed", "20.456", "increase"))
    assert result.new_price == Decimal("120.58")


def test_rounding_is_half_up_on_the_cent() -> None:
    result = compute_single_price(_params("100.005", "fixed", "0", "increase"))
    assert result.new_price == Decimal("100.01")
    assert result.new_price.as_tuple().exponent == -2


def test_fixed_decrease() -> None:
    result = compute_single_price(_params(100, "fixed", 20, "decrease"))
    assert result.new_price == Decimal("80")
    assert result.adjustment == Decimal("-20")


def test_fixed_decrease_to_exactly_zero() -> None:
    result = compute_single_price(_params(50, "fixed", 50, "decrease"))
    assert result.new_price == Decimal("0")
    assert result.adjustment == Decimal("-50")


def test_fixed_decrease_exceeding_base_is_rejected() -> None:
    with pytest.raises(PriceValidationError, match="Fixed decrease amount cannot exceed base price") as excinfo:
        compute_single_price(_params(50, "fixed", 100, "decrease"))
    assert excinfo.value.code == FIXED_DECREASE_EXCEEDS_BASE
    assert isinstance(excinfo.value, NonRetryableError)
    assert isinstance(excinfo.value, ValueError)


def test_dynamic_increase() -> None:
    result = compute_single_price(_params(100, "dynamic", 20, "increase"))
    assert result.new_price == Decimal("120")
    assert result.adjustment == Decimal("20")


def test_dynamic_increase_full_percent_doubles() -> None:
    result = compute_single_price(_params(100, "dynamic", 100, "increase"))
    assert result.new_price == Decimal("200")


def test_dynamic_increase_fractional_percent() -> None:
    result = compute_single_price(_params(100, "dynamic", "12.5", "increase"))
    assert result.new_price == Decimal("112.50")


def test_dynamic_increase_over_hundred_is_rejected() -> None:
    with pytest.raises(PriceValidationError, match="Percentage adjustment cannot exceed 100%") as excinfo:
        compute_single_price(_params(100, "dynamic", 150, "increase"))
    assert excinfo.value.code == PERCENTAGE_OUT_OF_RANGE


def test_dynamic_decrease() -> None:
    result = compute_single_price(_params(100, "dynamic", 20, "decrease"))
    assert result.new_price == Decimal("80")
    assert result.adjustment == Decimal("-20")


def test_dynamic_full_decrease_reaches_zero() -> None:
    result = compute_single_price(_params(100, "dynamic", 100, "decrease"))
    assert result.new_price == Decimal("0")
    assert result.adjustment == Decimal("-100")


def test_dynamic_decrease_over_hundred_is_rejected() -> None:
    with pytest.raises(PriceValidationError, match="Percentage adjustment cannot exceed 100%"):
        compute_single_price(_params(100, "dynamic", 150, "decrease"))


def test_dynamic_decrease_rounds_half_up() -> None:
    # 33% of 10.05 is 3.3165, leaving 6.7335
    result = compute_single_price(_params("10.05", "dynamic", 33, "decrease"))
    assert result.new_price == Decimal("6.73")


def test_zero_base_price_is_allowed() -> None:
    result = compute_single_price(_params(0, "dynamic", 50, "increase"))
    assert result.new_price == Decimal("0")
    assert result.adjustment == Decimal("0")


def test_enum_values_are_accepted() -> None:
    result = compute_single_price(_params(10, AdjustmentType.FIXED, 1, IncrementType.INCREASE))
    assert result.new_price == Decimal("11")


def test_compute_is_idempotent() -> None:
    params = _params("19.99", "dynamic", "7.5", "increase")
    assert compute_single_price(params) == compute_single_price(params)


def test_preview_single_price_swallows_validation_errors() -> None:
    assert preview_single_price(_params(50, "fixed", 100, "decrease")) is None
    assert preview_single_price(_params(50, "fixed", 10, "decrease")).new_price == Decimal("40")


def test_result_serializes_with_camel_case_keys() -> None:
    result = compute_single_price(_params(100, "fixed", 20, "increase"))
    assert result.model_dump(by_alias=True) == {
        "basePrice": Decimal("100"),
        "newPrice": Decimal("120.00"),
        "adjustment": Decimal("20.00"),
    }


@pytest.mark.parametrize(
    "base_price, adjustment_type, adjustment_value, increment_type",
    [
        ("0.01", "fixed", "0.01", "decrease"),
        ("0.01", "dynamic", "99.99", "decrease"),
        ("1234.56", "dynamic", "100", "decrease"),
        ("5", "fixed", "4.999", "decrease"),
    ],
)
def test_new_price_is_never_negative(base_price, adjustment_type, adjustment_value, increment_type) -> None:
    result = compute_single_price(_params(base_price, adjustment_type, adjustment_value, increment_type))
    assert result.new_price >= 0


def test_compute_single_price_keeps_cents_on_large_prices() -> None:
    result = compute_single_price(_params(Decimal("123456789012345678901234567.89"), "dynamic", 10, "increase"))
    assert result.new_price == Decimal("135802467913580246791358024.68")
    assert result.adjustment == Decimal("12345678901234567890123456.79")
