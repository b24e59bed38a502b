"""Backtest CLI configuration."""
from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class RunConfig:
    # Request
    symbol: str = "SPY"
    strategies: tuple[str, ...] = ("BUY_AND_HOLD", "DCA", "MA_CROSSOVER")
    start_date: str = "2020-01-01"
    end_date: str = "2024-12-31"
    initial_capital: str = "10000"
    strategy_params: dict[str, str] = field(default_factory=dict)

    # Data
    csv_dir: str | None = None      # None = download via yfinance
    cache_dir: str = ".stratlab_cache"
    use_cache: bool = True

    # Execution
    max_workers: int = 4
    risk_free_rate: float = 0.0

    # Output
    json_path: str | None = None

    def to_dict(self) -> dict:
        return {k: getattr(self, k) for k in self.__dataclass_fields__}
