"""Daily price series for a single symbol.

A :class:`PriceSeries` is the read-only feed the simulator consumes: an
ordered, deduplicated tuple of :class:`PricePoint` with decimal closes.
Providers build one from a pandas frame with :meth:`PriceSeries.from_frame`.
"""

from __future__ import annotations

import bisect
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterator, overload

import pandas as pd

from stratlab.utils.numeric import to_decimal
from stratlab.utils.validation import ValidationError, validate_price_frame


@dataclass(frozen=True)
class PricePoint:
    """Closing price of one trading day."""

    date: date
    close: Decimal


@dataclass(frozen=True)
class Instrument:
    """Basic description of a tradeable symbol."""

    symbol: str
    name: str
    asset_type: str = "UNKNOWN"


@dataclass(frozen=True)
class PriceSeries:
    """Immutable, strictly date-ordered closes for one symbol.

    Parameters
    ----------
    symbol : str
        Ticker symbol.
    points : tuple of PricePoint
        Must be strictly increasing by date with non-negative closes.
    """

    symbol: str
    points: tuple[PricePoint, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "points", tuple(self.points))
        prev: date | None = None
        for p in self.points:
            if p.close < 0:
                raise ValidationError(
                    f"{self.symbol}: negative close {p.close} on {p.date}."
                )
            if prev is not None and p.date <= prev:
                raise ValidationError(
                    f"{self.symbol}: dates must be strictly increasing; "
                    f"{p.date} follows {prev}."
                )
            prev = p.date

    @classmethod
    def from_frame(
        cls,
        symbol: str,
        frame: pd.DataFrame,
        column: str = "close",
    ) -> "PriceSeries":
        """Build a series from a daily price frame.

        Rows are sorted by date, rows with a missing close are dropped, and
        for duplicated dates the last observation wins.

        Parameters
        ----------
        symbol : str
            Ticker symbol.
        frame : DataFrame
            DatetimeIndex (or a ``date`` column) and a *column* of closes.
        column : str
            Which column holds the close to use.
        """
        validate_price_frame(frame, column)
        if "date" in frame.columns:
            frame = frame.set_index("date")
        closes = frame[column].dropna()
        idx = pd.to_datetime(closes.index).normalize()
        closes = pd.Series(closes.to_numpy(), index=idx)
        closes = closes[~closes.index.duplicated(keep="last")].sort_index()
        points = tuple(
            PricePoint(date=ts.date(), close=to_decimal(float(v)))
            for ts, v in closes.items()
        )
        return cls(symbol=symbol, points=points)

    @classmethod
    def from_closes(
        cls,
        symbol: str,
        dates: Sequence[date],
        closes: Sequence[object],
    ) -> "PriceSeries":
        """Build a series from parallel sequences of dates and closes."""
        if len(dates) != len(closes):
            raise ValidationError(
                f"dates and closes differ in length ({len(dates)} vs {len(closes)})."
            )
        points = tuple(
            PricePoint(date=d, close=to_decimal(c)) for d, c in zip(dates, closes)
        )
        return cls(symbol=symbol, points=points)

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[PricePoint]:
        return iter(self.points)

    def __getitem__(self, i: int) -> PricePoint:
        return self.points[i]

    @property
    def dates(self) -> list[date]:
        return [p.date for p in self.points]

    @property
    def closes(self) -> list[Decimal]:
        return [p.close for p in self.points]

    @property
    def start_date(self) -> date | None:
        return self.points[0].date if self.points else None

    @property
    def end_date(self) -> date | None:
        return self.points[-1].date if self.points else None

    def between(self, start: date, end: date) -> "PriceSeries":
        """Sub-series with ``start <= date <= end`` (possibly empty)."""
        dates = self.dates
        lo = bisect.bisect_left(dates, start)
        hi = bisect.bisect_right(dates, end)
        return PriceSeries(symbol=self.symbol, points=self.points[lo:hi])

    def history(self, length: int) -> "PriceHistory":
        """Read-only view of the first *length* points."""
        return PriceHistory(self.points, length)

    def to_frame(self) -> pd.DataFrame:
        """DataFrame indexed by ``date`` with a float ``close`` column."""
        return pd.DataFrame(
            {"close": [float(p.close) for p in self.points]},
            index=pd.DatetimeIndex([pd.Timestamp(p.date) for p in self.points], name="date"),
        )


class PriceHistory(Sequence):
    """Prefix of a price series, up to and including the current day.

    Indexing and slicing behave like a tuple of the first *length* points, so
    ``history[-1]`` is today and ``history[-n:]`` the trailing window, without
    copying the whole prefix on every simulated day.
    """

    __slots__ = ("_points", "_length")

    def __init__(self, points: tuple[PricePoint, ...], length: int) -> None:
        if not 0 <= length <= len(points):
            raise IndexError(f"history length {length} out of range 0..{len(points)}")
        self._points = points
        self._length = length

    def __len__(self) -> int:
        return self._length

    @overload
    def __getitem__(self, i: int) -> PricePoint: ...

    @overload
    def __getitem__(self, i: slice) -> tuple[PricePoint, ...]: ...

    def __getitem__(self, i):
        if isinstance(i, slice):
            start, stop, step = i.indices(self._length)
            return self._points[start:stop:step]
        if i < 0:
            i += self._length
        if not 0 <= i < self._length:
            raise IndexError("history index out of range")
        return self._points[i]

    def closes(self, window: int, offset: int = 0) -> tuple[Decimal, ...]:
        """The *window* closes ending *offset* days before the last one."""
        stop = self._length - offset
        start = stop - window
        if start < 0 or stop > self._length:
            return ()
        return tuple(p.close for p in self._points[start:stop])
