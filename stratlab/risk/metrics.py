"""Performance and risk metrics.

All functions operate on a finished equity curve: an ordered sequence of
:class:`~stratlab.backtest.models.EquityCurvePoint`.  Currency amounts and
ratios derived from them stay in :class:`~decimal.Decimal`; the statistical
aggregates (volatility, Sharpe) are plain floats computed with pandas.

Degenerate inputs never raise.  Each guarded formula signals a zero
denominator with :class:`ArithmeticAnomaly` and :func:`compute_metrics`
substitutes the documented default of zero.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal, Overflow, localcontext
from typing import TYPE_CHECKING, Callable, TypeVar

import numpy as np
import pandas as pd

from stratlab.utils.calendar import calendar_days_between
from stratlab.utils.numeric import ENGINE_CONTEXT, ZERO, round_ratio
from stratlab.utils.validation import ArithmeticAnomaly

if TYPE_CHECKING:
    from stratlab.backtest.models import EquityCurvePoint, Trade

logger = logging.getLogger(__name__)

T = TypeVar("T")

DAYS_PER_YEAR = Decimal("365.25")
TRADING_DAYS_PER_YEAR = 252


@dataclass(frozen=True)
class Metrics:
    """Summary statistics of one backtest.

    Attributes
    ----------
    final_value : Decimal
        Portfolio value on the last trading day.
    total_contributions : Decimal
        Initial capital plus every external cash injection.
    net_return : Decimal
        ``final_value / total_contributions - 1``.
    cagr : Decimal
        Compound annual growth rate against total contributions.
    max_drawdown : Decimal
        Worst peak-to-trough decline as a non-positive fraction.
    annualized_volatility : float
        Standard deviation of daily returns, annualised.
    sharpe_ratio : float
        Annualised mean daily return over annualised volatility (rf = 0).
    number_of_trades : int
        Entries in the trade ledger.
    """

    final_value: Decimal
    total_contributions: Decimal
    net_return: Decimal
    cagr: Decimal
    max_drawdown: Decimal
    annualized_volatility: float
    sharpe_ratio: float
    number_of_trades: int

    def to_dict(self) -> dict[str, object]:
        return {
            "finalValue": str(self.final_value),
            "totalContributions": str(self.total_contributions),
            "netReturn": str(self.net_return),
            "cagr": str(self.cagr),
            "maxDrawdown": str(self.max_drawdown),
            "annualizedVolatility": self.annualized_volatility,
            "sharpeRatio": self.sharpe_ratio,
            "numberOfTrades": self.number_of_trades,
        }


def _ratio(numerator: Decimal, denominator: Decimal) -> Decimal:
    if denominator == 0:
        raise ArithmeticAnomaly(f"division of {numerator} by zero")
    return numerator / denominator


def daily_returns(curve: Sequence[EquityCurvePoint]) -> pd.Series:
    """Day-over-day simple returns of the portfolio value.

    Returns following a non-positive value are undefined and skipped.
    """
    if len(curve) < 2:
        return pd.Series(dtype=float)
    values = pd.Series(
        [float(p.portfolio_value) for p in curve],
        index=pd.DatetimeIndex([pd.Timestamp(p.date) for p in curve]),
    )
    prev = values.shift(1)
    valid = prev > 0
    return ((values - prev) / prev)[valid]


def net_return(final_value: Decimal, total_contributions: Decimal) -> Decimal:
    """Total gain relative to contributed capital."""
    with localcontext(ENGINE_CONTEXT):
        return round_ratio(_ratio(final_value, total_contributions) - 1)


def cagr(
    curve: Sequence[EquityCurvePoint],
    total_contributions: Decimal,
    days_per_year: Decimal = DAYS_PER_YEAR,
) -> Decimal:
    """Compound annual growth rate.

    ``(final / total_contributions) ** (days_per_year / elapsed_days) - 1``
    where *elapsed_days* is the calendar span of the curve.
    """
    if not curve:
        return ZERO
    elapsed = calendar_days_between(curve[0].date, curve[-1].date)
    if elapsed <= 0:
        raise ArithmeticAnomaly("equity curve spans zero calendar days")
    with localcontext(ENGINE_CONTEXT):
        growth = _ratio(curve[-1].portfolio_value, total_contributions)
        if growth <= 0:
            return round_ratio(Decimal(-1))
        exponent = Decimal(days_per_year) / Decimal(elapsed)
        try:
            compounded = growth ** exponent
        except Overflow as e:
            raise ArithmeticAnomaly(
                f"growth of {growth} over {elapsed} days overflows when annualised"
            ) from e
        return round_ratio(compounded - 1)


def max_drawdown(curve: Sequence[EquityCurvePoint]) -> Decimal:
    """Maximum drawdown as a non-positive fraction (e.g. -0.25 = 25% drawdown)."""
    worst = ZERO
    peak: Decimal | None = None
    with localcontext(ENGINE_CONTEXT):
        for point in curve:
            value = point.portfolio_value
            if peak is None or value > peak:
                peak = value
            if peak <= 0:
                continue
            dd = (value - peak) / peak
            if dd < worst:
                worst = dd
        return round_ratio(worst)


def annualized_volatility(
    curve: Sequence[EquityCurvePoint],
    periods_per_year: int = 252,
) -> float:
    """Population standard deviation of daily returns, annualised."""
    returns = daily_returns(curve)
    if len(returns) < 2:
        return 0.0
    return float(returns.std(ddof=0) * np.sqrt(periods_per_year))


def sharpe_ratio(
    curve: Sequence[EquityCurvePoint],
    risk_free_rate: float = 0.0,
    periods_per_year: int = 252,
) -> float:
    """Annualised Sharpe ratio.

    Parameters
    ----------
    curve : sequence of EquityCurvePoint
        Finished equity curve.
    risk_free_rate : float
        Annual risk-free rate (default 0).
    periods_per_year : int
        Trading days per year.
    """
    ann_vol = annualized_volatility(curve, periods_per_year)
    if ann_vol == 0 or not math.isfinite(ann_vol):
        raise ArithmeticAnomaly("annualized volatility is zero")
    returns = daily_returns(curve)
    ann_ret = float(returns.mean()) * periods_per_year - risk_free_rate
    return float(ann_ret / ann_vol)


def _or_zero(name: str, fn: Callable[[], T], default: T) -> T:
    try:
        return fn()
    except ArithmeticAnomaly as e:
        logger.debug("%s defaults to %s: %s", name, default, e)
        return default


def compute_metrics(
    curve: Sequence[EquityCurvePoint],
    trades: Sequence[Trade],
    initial_capital: Decimal,
    contributions: Decimal = ZERO,
    periods_per_year: int = TRADING_DAYS_PER_YEAR,
    days_per_year: Decimal = DAYS_PER_YEAR,
    risk_free_rate: float = 0.0,
) -> Metrics:
    """Compute the full metric set for a finished simulation.

    Parameters
    ----------
    curve : sequence of EquityCurvePoint
        Equity curve in date order.  May be empty, in which case the final
        value is *initial_capital* and every ratio is zero.
    trades : sequence of Trade
        Recorded trades.
    initial_capital : Decimal
        Starting cash.
    contributions : Decimal
        Sum of external cash injections after day 0.
    periods_per_year, days_per_year, risk_free_rate
        Annualisation constants.
    """
    with localcontext(ENGINE_CONTEXT):
        total = initial_capital + contributions
    if not curve:
        return Metrics(
            final_value=initial_capital,
            total_contributions=total,
            net_return=ZERO,
            cagr=ZERO,
            max_drawdown=ZERO,
            annualized_volatility=0.0,
            sharpe_ratio=0.0,
            number_of_trades=len(trades),
        )
    final_value = curve[-1].portfolio_value
    return Metrics(
        final_value=final_value,
        total_contributions=total,
        net_return=_or_zero("net_return", lambda: net_return(final_value, total), ZERO),
        cagr=_or_zero("cagr", lambda: cagr(curve, total, days_per_year), ZERO),
        max_drawdown=max_drawdown(curve),
        annualized_volatility=annualized_volatility(curve, periods_per_year),
        sharpe_ratio=_or_zero(
            "sharpe_ratio",
            lambda: sharpe_ratio(curve, risk_free_rate, periods_per_year),
            0.0,
        ),
        number_of_trades=len(trades),
    )


def performance_summary(
    curve: Sequence[EquityCurvePoint],
    trades: Sequence[Trade] = (),
    initial_capital: Decimal | None = None,
    contributions: Decimal = ZERO,
) -> dict[str, object]:
    """Flat dictionary of all metrics, for printing and JSON output.

    *initial_capital* defaults to the first portfolio value of the curve.
    """
    if initial_capital is None:
        initial_capital = curve[0].portfolio_value if curve else ZERO
    return compute_metrics(curve, trades, initial_capital, contributions).to_dict()
