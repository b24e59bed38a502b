"""Provider serving pre-built series from memory."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date

from stratlab.data.base import PriceProvider
from stratlab.data.series import Instrument, PriceSeries
from stratlab.utils.validation import DataUnavailable


class InMemoryProvider(PriceProvider):
    """Serve slices of series held in memory, keyed by upper-case symbol.

    Handy for tests, notebooks, and callers that already hold their data.
    """

    def __init__(self, series: Iterable[PriceSeries] = ()) -> None:
        self._series: dict[str, PriceSeries] = {}
        for s in series:
            self.add(s)
        self.calls = 0

    def add(self, series: PriceSeries) -> None:
        self._series[series.symbol.upper()] = series

    def fetch(self, symbol: str, start: date, end: date) -> PriceSeries:
        self.calls += 1
        full = self._series.get(symbol.upper())
        if full is None:
            raise DataUnavailable(f"Unknown symbol: {symbol}")
        sliced = full.between(start, end)
        if len(sliced) == 0:
            raise DataUnavailable(
                f"No trading days for {symbol} in [{start}, {end}]."
            )
        return sliced

    def validate_symbol(self, symbol: str) -> Instrument | None:
        if symbol.upper() not in self._series:
            return None
        return Instrument(symbol=symbol.upper(), name=symbol.upper())
