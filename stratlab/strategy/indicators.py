"""Moving-average indicators over decimal closes."""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

from stratlab.data.series import PriceHistory


def sma(closes: Sequence[Decimal], window: int) -> Decimal | None:
    """Simple moving average of the last *window* closes.

    Returns ``None`` when fewer than *window* closes are available.
    """
    if window <= 0:
        raise ValueError("window must be positive")
    if len(closes) < window:
        return None
    tail = closes[len(closes) - window:]
    return sum(tail, Decimal(0)) / window


def sma_spread(history: PriceHistory, short: int, long: int, offset: int = 0) -> Decimal | None:
    """``SMA(short) - SMA(long)`` ending *offset* days before the last day.

    ``None`` when the history cannot fill the long window at that point.
    """
    long_closes = history.closes(long, offset)
    if not long_closes:
        return None
    short_avg = sma(long_closes, short)
    long_avg = sma(long_closes, long)
    return short_avg - long_avg
