"""Trading calendar utilities.

Uses the pandas *USFederalHolidayCalendar* combined with a custom business-day
offset to approximate the NYSE trading calendar.  It is used to lay out
synthetic price series; real series carry their own trading days.
"""

from __future__ import annotations

from datetime import date

import pandas as pd
from pandas.tseries.holiday import USFederalHolidayCalendar
from pandas.tseries.offsets import CustomBusinessDay

_US_BD = CustomBusinessDay(calendar=USFederalHolidayCalendar())


def trading_days(
    start: str | date | pd.Timestamp,
    end: str | date | pd.Timestamp,
) -> pd.DatetimeIndex:
    """Return a DatetimeIndex of approximate US equity trading days."""
    return pd.date_range(start=start, end=end, freq=_US_BD)


def trading_days_from(
    start: str | date | pd.Timestamp,
    periods: int,
) -> pd.DatetimeIndex:
    """Return the first *periods* approximate trading days on or after *start*."""
    return pd.date_range(start=start, periods=periods, freq=_US_BD)


def calendar_days_between(first: date, last: date) -> int:
    """Number of calendar days from *first* to *last* (may be zero)."""
    return (last - first).days
