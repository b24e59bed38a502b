"""Decimal helpers shared by the simulator, strategies and metrics.

Accounting runs inside :data:`ENGINE_CONTEXT`, a 50-digit context entered
with :func:`decimal.localcontext` so that every worker thread gets its own
copy.  Share quantities are truncated to :data:`QUANTITY_STEP`, which keeps
``quantity * price`` exactly representable and never above the cash that
funded it.
"""

from __future__ import annotations

import math
from decimal import (
    ROUND_DOWN,
    ROUND_HALF_EVEN,
    ROUND_HALF_UP,
    Context,
    Decimal,
    DivisionByZero,
    InvalidOperation,
    Overflow,
    getcontext,
)

ENGINE_CONTEXT = Context(
    prec=50,
    rounding=ROUND_HALF_EVEN,
    traps=[InvalidOperation, DivisionByZero, Overflow],
)

ZERO = Decimal(0)
CENT = Decimal("0.01")
QUANTITY_STEP = Decimal("1e-10")
RATIO_STEP = Decimal("1e-6")


def to_decimal(value: object) -> Decimal:
    """Convert a price, amount or string to :class:`~decimal.Decimal`.

    Floats go through their shortest ``repr`` so that ``101.1`` becomes
    ``Decimal('101.1')`` rather than its binary expansion.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError(f"cannot convert non-finite value {value!r} to Decimal")
        return Decimal(repr(value))
    if isinstance(value, int):
        return Decimal(value)
    try:
        result = Decimal(str(value).strip())
    except InvalidOperation as e:
        raise ValueError(f"not a decimal number: {value!r}") from e
    if not result.is_finite():
        raise ValueError(f"not a finite decimal number: {value!r}")
    return result


def shares_for(amount: Decimal, price: Decimal) -> Decimal:
    """Largest quantity, truncated to :data:`QUANTITY_STEP`, that *amount* buys.

    Returns zero for a non-positive *amount* or *price*.
    """
    if amount <= 0 or price <= 0:
        return ZERO
    return (amount / price).quantize(QUANTITY_STEP, rounding=ROUND_DOWN)


def round_value(value: Decimal) -> Decimal:
    """Round a currency amount half-up to cents."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def round_ratio(value: Decimal) -> Decimal:
    """Round a ratio half-up to six decimal places.

    A ratio too large to carry six decimals within the active context's
    precision is rounded to that precision instead.
    """
    if value.is_finite() and value.adjusted() + 7 > getcontext().prec:
        return getcontext().plus(value)
    return value.quantize(RATIO_STEP, rounding=ROUND_HALF_UP)
