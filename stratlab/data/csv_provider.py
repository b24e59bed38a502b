"""CSV-based price provider.

Reads per-symbol CSV files from a local directory.  Each file must contain
at least the columns ``Date`` and ``Close`` (case-insensitive).  An optional
``Adj Close`` column is preferred when present so that splits and dividends
do not show up as price jumps.

This module also exposes :func:`generate_synthetic`, which creates
realistic-looking random price data useful for unit tests and demos.
"""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path

import numpy as np
import pandas as pd

from stratlab.data.base import PriceProvider
from stratlab.data.series import Instrument, PriceSeries
from stratlab.utils.calendar import trading_days
from stratlab.utils.validation import DataUnavailable, ValidationError

logger = logging.getLogger(__name__)


class CsvProvider(PriceProvider):
    """Read daily closes from one CSV file per symbol.

    Parameters
    ----------
    directory : str or Path
        Folder containing ``<SYMBOL>.csv`` files.
    date_column : str
        Name of the date column in the CSV files (default ``'Date'``).
    """

    def __init__(self, directory: str | Path, date_column: str = "Date") -> None:
        self.directory = Path(directory)
        self.date_column = date_column
        if not self.directory.is_dir():
            raise ValidationError(
                f"CSV directory does not exist: {self.directory}"
            )

    def _path(self, symbol: str) -> Path:
        return self.directory / f"{symbol.upper()}.csv"

    def _read(self, symbol: str) -> pd.DataFrame:
        path = self._path(symbol)
        if not path.exists():
            raise DataUnavailable(f"CSV file not found for {symbol}: {path}")
        raw = pd.read_csv(path, parse_dates=[self.date_column])
        raw.columns = raw.columns.str.strip().str.lower().str.replace(" ", "_")
        date_col = self.date_column.strip().lower().replace(" ", "_")
        raw = raw.rename(columns={date_col: "date"})
        if "close" not in raw.columns and "adj_close" not in raw.columns:
            raise ValidationError(f"{path} has no 'Close' or 'Adj Close' column.")
        return raw

    def fetch(self, symbol: str, start: date, end: date) -> PriceSeries:
        raw = self._read(symbol)
        mask = (raw["date"] >= pd.Timestamp(start)) & (raw["date"] <= pd.Timestamp(end))
        raw = raw.loc[mask]
        column = "adj_close" if "adj_close" in raw.columns else "close"
        series = PriceSeries.from_frame(symbol.upper(), raw[["date", column]], column=column)
        if len(series) == 0:
            raise DataUnavailable(
                f"No trading days for {symbol} in [{start}, {end}]."
            )
        logger.debug("Read %d rows for %s from %s", len(series), symbol, self._path(symbol))
        return series

    def validate_symbol(self, symbol: str) -> Instrument | None:
        if not self._path(symbol).exists():
            return None
        return Instrument(symbol=symbol.upper(), name=symbol.upper(), asset_type="CSV")


def generate_synthetic(
    symbol: str = "SYNTH",
    start: str | date = "2015-01-02",
    end: str | date = "2023-12-29",
    seed: int = 42,
    start_price: float = 100.0,
) -> pd.DataFrame:
    """Generate a synthetic daily close series for testing.

    Prices follow geometric Brownian motion with drift and volatility drawn
    from realistic distributions, laid out on approximate US trading days.

    Parameters
    ----------
    symbol : str
        Ticker symbol, stored in a ``ticker`` column.
    start, end : str or date
        Date range boundaries.
    seed : int
        Random seed for reproducibility.
    start_price : float
        Level the walk starts from.

    Returns
    -------
    DataFrame
        Indexed by ``date`` with columns ``close`` and ``ticker``.
    """
    rng = np.random.default_rng(seed)
    dates = trading_days(start, end)
    n_days = len(dates)
    annual_drift = rng.uniform(0.02, 0.12)
    annual_vol = rng.uniform(0.15, 0.45)
    daily_drift = annual_drift / 252
    daily_vol = annual_vol / np.sqrt(252)
    log_returns = rng.normal(daily_drift, daily_vol, size=n_days)
    close = np.round(start_price * np.exp(np.cumsum(log_returns)), 4)
    return pd.DataFrame(
        {"close": close, "ticker": symbol},
        index=pd.DatetimeIndex(dates, name="date"),
    )


def write_synthetic_csv(
    directory: str | Path,
    symbols: list[str],
    start: str | date = "2015-01-02",
    end: str | date = "2023-12-29",
    seed: int = 42,
) -> list[Path]:
    """Write one synthetic ``<SYMBOL>.csv`` per symbol; returns the paths."""
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    paths: list[Path] = []
    for i, symbol in enumerate(symbols):
        df = generate_synthetic(symbol, start, end, seed=seed + i)
        out = df[["close"]].rename(columns={"close": "Close"})
        out.index.name = "Date"
        path = directory / f"{symbol.upper()}.csv"
        out.to_csv(path)
        paths.append(path)
    return paths
