from __future__ import annotations

INVALID_BASE_PRICE = "InvalidBasePrice"
INVALID_ADJUSTMENT_VALUE = "InvalidAdjustmentValue"
PERCENTAGE_OUT_OF_RANGE = "PercentageOutOfRange"
FIXED_DECREASE_EXCEEDS_BASE = "FixedDecreaseExceedsBase"


class NonRetryableError(Exception):
    """Indicates a failure that should not be retried."""


class PriceValidationError(NonRetryableError, ValueError):
    """Raised when a price computation request fails validation."""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


class ConfigError(NonRetryableError, ValueError):
    """Raised when the service configuration cannot be used."""
