"""Transparent parquet disk cache wrapping any PriceProvider."""

from __future__ import annotations

import hashlib
import logging
from datetime import date
from pathlib import Path

import pandas as pd

from stratlab.data.base import PriceProvider
from stratlab.data.series import Instrument, PriceSeries

logger = logging.getLogger(__name__)


class ParquetCache(PriceProvider):
    """Caching decorator for any :class:`PriceProvider`.

    On the first call for a given ``(symbol, start, end)`` triple the series
    is fetched from the underlying provider and persisted as a Parquet file.
    Subsequent calls with the same arguments return the cached copy.
    Failed fetches are not cached.

    Parameters
    ----------
    provider : PriceProvider
        The upstream data source.
    cache_dir : str or Path
        Directory for cached Parquet files (created if absent).
    """

    def __init__(
        self,
        provider: PriceProvider,
        cache_dir: str | Path = ".stratlab_cache",
    ) -> None:
        self.provider = provider
        self.cache_dir = Path(cache_dir)
        self.cache_dir.mkdir(parents=True, exist_ok=True)

    def _cache_key(self, symbol: str, start: date, end: date) -> str:
        raw = f"{symbol.upper()}|{start}|{end}|1d"
        return hashlib.sha256(raw.encode()).hexdigest()[:16]

    def _cache_path(self, key: str) -> Path:
        return self.cache_dir / f"{key}.parquet"

    def fetch(self, symbol: str, start: date, end: date) -> PriceSeries:
        key = self._cache_key(symbol, start, end)
        path = self._cache_path(key)
        if path.exists():
            logger.debug("Cache hit for %s [%s, %s]", symbol, start, end)
            df = pd.read_parquet(path)
            return PriceSeries.from_frame(symbol.upper(), df, column="close")
        logger.info("Cache miss for %s [%s, %s]", symbol, start, end)
        series = self.provider.fetch(symbol, start, end)
        series.to_frame().to_parquet(path)
        return series

    def validate_symbol(self, symbol: str) -> Instrument | None:
        return self.provider.validate_symbol(symbol)

    def clear(self) -> int:
        """Remove all cached files.  Returns the number of files deleted."""
        files = list(self.cache_dir.glob("*.parquet"))
        for f in files:
            f.unlink()
        return len(files)
