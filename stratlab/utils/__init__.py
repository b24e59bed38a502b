"""Utility helpers: calendars, decimal arithmetic, validation."""

from stratlab.utils.calendar import trading_days, trading_days_from, calendar_days_between
from stratlab.utils.numeric import (
    ENGINE_CONTEXT,
    to_decimal,
    shares_for,
    round_value,
    round_ratio,
)
from stratlab.utils.validation import (
    StratlabError,
    ValidationError,
    UnknownStrategyError,
    DataUnavailable,
    ArithmeticAnomaly,
    validate_price_frame,
)

__all__ = [
    "trading_days", "trading_days_from", "calendar_days_between",
    "ENGINE_CONTEXT", "to_decimal", "shares_for", "round_value", "round_ratio",
    "StratlabError", "ValidationError", "UnknownStrategyError",
    "DataUnavailable", "ArithmeticAnomaly", "validate_price_frame",
]
