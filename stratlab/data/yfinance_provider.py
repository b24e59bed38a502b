"""Yahoo Finance price provider via the ``yfinance`` package.

Install the optional dependency with::

    pip install "stratlab[yfinance]"

yfinance is well suited for US equities, ETFs, and indices.  Closes are
auto-adjusted for splits and dividends by default.

.. note::
   Yahoo Finance is a free, unofficial API.  Rate limits and data
   availability may change without notice.  For reproducible research,
   wrap this provider with :class:`~stratlab.data.cache.ParquetCache` so
   that fetched data is persisted locally.
"""

from __future__ import annotations

import logging
import time
from datetime import date, timedelta
from typing import Callable

import pandas as pd

from stratlab.data.base import PriceProvider
from stratlab.data.series import Instrument, PriceSeries
from stratlab.utils.validation import DataUnavailable, ValidationError

logger = logging.getLogger(__name__)


def _require_yfinance():
    try:
        import yfinance  # noqa: F401
        return yfinance
    except ImportError:
        raise ImportError(
            "yfinance is required for YFinanceProvider.  "
            "Install it with:  pip install 'stratlab[yfinance]'  "
            "or:  pip install yfinance"
        )


class YFinanceProvider(PriceProvider):
    """Fetch daily closes from Yahoo Finance.

    Parameters
    ----------
    auto_adjust : bool
        If True (default), closes are split- and dividend-adjusted.
    max_attempts : int
        Download attempts before giving up (default 3).
    backoff : float
        Base delay in seconds; attempt *n* waits ``backoff * 2**n``.
    sleep : callable
        Delay function, injectable for tests.

    Examples
    --------
    >>> from stratlab.data import YFinanceProvider, ParquetCache
    >>> provider = ParquetCache(YFinanceProvider(), cache_dir=".market_data")
    >>> series = provider.fetch("AAPL", date(2020, 1, 1), date(2023, 12, 31))
    """

    def __init__(
        self,
        auto_adjust: bool = True,
        max_attempts: int = 3,
        backoff: float = 0.5,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValidationError("max_attempts must be >= 1.")
        self.auto_adjust = auto_adjust
        self.max_attempts = max_attempts
        self.backoff = backoff
        self._sleep = sleep

    def _download(self, yf, symbol: str, start: date, end: date) -> pd.DataFrame:
        # yfinance treats ``end`` as exclusive.
        for attempt in range(1, self.max_attempts + 1):
            try:
                return yf.download(
                    tickers=symbol,
                    start=str(start),
                    end=str(end + timedelta(days=1)),
                    auto_adjust=self.auto_adjust,
                    progress=False,
                    threads=False,
                )
            except Exception as e:
                if attempt >= self.max_attempts:
                    raise DataUnavailable(
                        f"Failed to fetch data for {symbol} after "
                        f"{self.max_attempts} attempts: {e}"
                    ) from e
                delay = self.backoff * 2 ** attempt
                logger.warning(
                    "Attempt %d/%d failed for %s: %s. Retrying in %.1fs",
                    attempt, self.max_attempts, symbol, e, delay,
                )
                self._sleep(delay)
        raise AssertionError("unreachable")

    def fetch(self, symbol: str, start: date, end: date) -> PriceSeries:
        yf = _require_yfinance()
        symbol = symbol.strip().upper()
        if not symbol:
            raise ValidationError("symbol must be a non-empty string.")

        raw = self._download(yf, symbol, start, end)
        if raw is None or raw.empty:
            raise DataUnavailable(
                f"No data returned for symbol={symbol}, start={start}, end={end}. "
                "Verify the symbol exists on Yahoo Finance."
            )

        frame = self._normalize(raw, symbol)
        series = PriceSeries.from_frame(symbol, frame, column="close").between(start, end)
        if len(series) == 0:
            raise DataUnavailable(
                f"No trading days for {symbol} in [{start}, {end}]."
            )
        logger.info("Fetched %d daily closes for %s", len(series), symbol)
        return series

    def _normalize(self, raw: pd.DataFrame, symbol: str) -> pd.DataFrame:
        """Reduce a yfinance frame to a single ``close`` column."""
        df = raw.copy()
        # yfinance >=0.2.48 returns MultiIndex columns (field, ticker) even
        # for a single ticker.
        if isinstance(df.columns, pd.MultiIndex):
            lvl0 = set(df.columns.get_level_values(0).astype(str).str.upper())
            if symbol in lvl0:
                df = df[symbol]
            else:
                df.columns = df.columns.get_level_values(0)
        df.columns = df.columns.astype(str).str.strip().str.lower().str.replace(" ", "_")

        if "adj_close" in df.columns and not self.auto_adjust:
            column = "adj_close"
        elif "close" in df.columns:
            column = "close"
        else:
            raise DataUnavailable(
                f"yfinance data for {symbol} has no close column: {sorted(df.columns)}"
            )
        out = df[[column]].rename(columns={column: "close"})
        idx = pd.to_datetime(out.index)
        if idx.tz is not None:
            idx = idx.tz_localize(None)
        out.index = idx.normalize()
        out.index.name = "date"
        return out

    def validate_symbol(self, symbol: str) -> Instrument | None:
        yf = _require_yfinance()
        try:
            ticker = yf.Ticker(symbol)
            hist = ticker.history(period="7d")
            if hist is None or hist.empty:
                return None
            meta = getattr(ticker, "history_metadata", None) or {}
        except Exception as e:
            logger.warning("Failed to validate symbol %s: %s", symbol, e)
            return None
        resolved = str(meta.get("symbol", symbol)).upper()
        return Instrument(
            symbol=resolved,
            name=str(meta.get("shortName", resolved)),
            asset_type=str(meta.get("instrumentType", "UNKNOWN")),
        )
