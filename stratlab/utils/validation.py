"""Error taxonomy and input validation helpers.

Every public entry point calls these to produce clear, early error messages
rather than cryptic pandas or decimal exceptions downstream.

Errors
------
:class:`ValidationError`
    A request is malformed: unknown strategy, unparsable or out-of-range
    parameter, reversed date range, non-positive capital.
:class:`DataUnavailable`
    The price source cannot produce a series for the requested symbol and
    range, or the range holds zero trading days.
:class:`ArithmeticAnomaly`
    A guarded division hit a zero denominator.  Raised inside the metrics
    calculator only and always replaced by a documented default there.
"""

from __future__ import annotations

import warnings

import pandas as pd


class StratlabError(Exception):
    """Base class for all stratlab errors."""


class ValidationError(StratlabError, ValueError):
    """Raised when a request or its parameters violate expected invariants.

    Parameters
    ----------
    message : str
        Human-readable description.
    parameter : str, optional
        Name of the offending strategy parameter, when there is one.
    """

    def __init__(self, message: str, parameter: str | None = None) -> None:
        super().__init__(message)
        self.parameter = parameter


class UnknownStrategyError(ValidationError):
    """Raised when a strategy id is not present in the catalog."""


class DataUnavailable(StratlabError):
    """Raised when no price data exists for a symbol and date range."""


class ArithmeticAnomaly(StratlabError, ArithmeticError):
    """Raised by guarded metric formulas on a zero denominator."""


def validate_price_frame(frame: pd.DataFrame, column: str = "close") -> None:
    """Validate a single-symbol daily price frame.

    Expected shape: a DatetimeIndex (or a ``date`` column) and a numeric
    *column* of closing prices.

    Raises :class:`ValidationError` on any violation.
    """
    if not isinstance(frame, pd.DataFrame):
        raise ValidationError(
            f"prices must be a DataFrame; got {type(frame).__name__}."
        )
    if column not in frame.columns:
        raise ValidationError(
            f"prices DataFrame missing required column {column!r}; "
            f"got {sorted(map(str, frame.columns))}."
        )
    if not isinstance(frame.index, pd.DatetimeIndex) and "date" not in frame.columns:
        raise ValidationError(
            "prices must have a DatetimeIndex or a 'date' column."
        )
    if not pd.api.types.is_numeric_dtype(frame[column]):
        raise ValidationError(
            f"prices[{column!r}] dtype must be numeric; got {frame[column].dtype}."
        )
    close = frame[column].dropna()
    if (close < 0).any():
        n_bad = int((close < 0).sum())
        raise ValidationError(
            f"prices[{column!r}] contains {n_bad} negative value(s)."
        )
    n_missing = int(frame[column].isna().sum())
    if n_missing:
        warnings.warn(f"Data integrity: dropping {n_missing} row(s) with missing {column}")
