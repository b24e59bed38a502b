"""Backtest configuration dataclass."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class BacktestConfig:
    """Immutable engine constants shared by every simulation.

    Parameters
    ----------
    trading_days_per_year : int
        Annualisation factor for daily-return statistics.
    calendar_days_per_year : Decimal
        Year length used to turn the curve's calendar span into years.
    risk_free_rate : float
        Annual risk-free rate subtracted in the Sharpe ratio.
    """

    trading_days_per_year: int = 252
    calendar_days_per_year: Decimal = Decimal("365.25")
    risk_free_rate: float = 0.0

    def to_dict(self) -> dict:
        return {k: getattr(self, k) for k in self.__dataclass_fields__}
