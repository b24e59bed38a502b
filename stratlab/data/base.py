"""Abstract price provider interface."""

from __future__ import annotations

import abc
from datetime import date

from stratlab.data.series import Instrument, PriceSeries


class PriceProvider(abc.ABC):
    """Base class for all price providers.

    Subclasses must implement :meth:`fetch`, which returns the daily closes of
    one symbol as a :class:`~stratlab.data.series.PriceSeries`.
    """

    @abc.abstractmethod
    def fetch(self, symbol: str, start: date, end: date) -> PriceSeries:
        """Fetch daily closes for *symbol* between *start* and *end*.

        Parameters
        ----------
        symbol : str
            Equity symbol (e.g. ``'AAPL'``).
        start, end : date
            Inclusive date boundaries.

        Returns
        -------
        PriceSeries
            At least one point.

        Raises
        ------
        DataUnavailable
            If the symbol is unknown or the range has no trading days.
        """

    def validate_symbol(self, symbol: str) -> Instrument | None:
        """Return basic instrument info, or ``None`` if the symbol is unknown."""
        return None
