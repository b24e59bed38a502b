"""Drawdown analysis of an equity curve."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

import numpy as np
import pandas as pd

if TYPE_CHECKING:
    from stratlab.backtest.models import EquityCurvePoint


def equity_values(curve: Sequence[EquityCurvePoint]) -> pd.Series:
    """Portfolio values as a float Series indexed by date."""
    return pd.Series(
        [float(p.portfolio_value) for p in curve],
        index=pd.DatetimeIndex([pd.Timestamp(p.date) for p in curve], name="date"),
        dtype=float,
    )


def drawdown_series(curve: Sequence[EquityCurvePoint]) -> pd.Series:
    """Compute the drawdown time-series of an equity curve.

    Returns
    -------
    Series
        Drawdown at each date (non-positive values; 0 at peaks and wherever
        the running peak is not positive).
    """
    values = equity_values(curve)
    running_max = values.cummax()
    dd = values / running_max.where(running_max > 0) - 1
    return dd.fillna(0.0)


def drawdown_details(curve: Sequence[EquityCurvePoint]) -> pd.DataFrame:
    """Identify individual drawdown episodes.

    Returns
    -------
    DataFrame
        Columns: ``start``, ``trough``, ``end``, ``depth``, ``days``,
        ``recovery_days``.  Rows are sorted by depth (worst first).  ``end``
        and ``recovery_days`` are missing for a drawdown still open on the
        last day.
    """
    columns = ["start", "trough", "end", "depth", "days", "recovery_days"]
    dd = drawdown_series(curve)

    episodes: list[dict] = []
    in_dd = False
    start = None
    trough_date = None
    trough_val = 0.0

    for date, val in dd.items():
        if val < 0 and not in_dd:
            in_dd = True
            start = date
            trough_date = date
            trough_val = val
        elif val < 0 and in_dd:
            if val < trough_val:
                trough_date = date
                trough_val = val
        elif val >= 0 and in_dd:
            in_dd = False
            episodes.append(
                {"start": start, "trough": trough_date, "end": date, "depth": trough_val}
            )

    # Drawdown still open at the end of the curve
    if in_dd:
        episodes.append(
            {"start": start, "trough": trough_date, "end": pd.NaT, "depth": trough_val}
        )

    if not episodes:
        return pd.DataFrame(columns=columns)

    df = pd.DataFrame(episodes)
    date_to_pos = {d: i for i, d in enumerate(dd.index)}
    last_pos = len(dd.index) - 1

    def _pos(d) -> int:
        return last_pos if pd.isna(d) else date_to_pos[d]

    df["days"] = [_pos(e) - _pos(s) for s, e in zip(df["start"], df["end"])]
    df["recovery_days"] = [
        np.nan if pd.isna(e) else _pos(e) - _pos(t)
        for t, e in zip(df["trough"], df["end"])
    ]
    return df[columns].sort_values("depth").reset_index(drop=True)
