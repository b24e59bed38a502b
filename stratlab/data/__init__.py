"""Price series, providers, and caching."""

from stratlab.data.series import Instrument, PriceHistory, PricePoint, PriceSeries
from stratlab.data.base import PriceProvider
from stratlab.data.memory import InMemoryProvider
from stratlab.data.csv_provider import CsvProvider, generate_synthetic
from stratlab.data.cache import ParquetCache

__all__ = [
    "Instrument",
    "PriceHistory",
    "PricePoint",
    "PriceSeries",
    "PriceProvider",
    "InMemoryProvider",
    "CsvProvider",
    "generate_synthetic",
    "ParquetCache",
    "YFinanceProvider",
]


def __getattr__(name: str):
    """Lazy-import optional providers so missing deps don't break the package."""
    if name == "YFinanceProvider":
        from stratlab.data.yfinance_provider import YFinanceProvider
        return YFinanceProvider
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
