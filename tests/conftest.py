"""Shared test fixtures for stratlab."""

from __future__ import annotations

from decimal import Decimal

import numpy as np
import pytest

from stratlab.backtest.models import BacktestRequest
from stratlab.data.series import PriceSeries
from stratlab.utils.calendar import trading_days_from

MA_PRICES = [10, 10, 10, 10, 20, 20, 20, 20, 5, 5, 5, 5]


def make_series(closes, symbol: str = "TEST", start: str = "2021-01-04") -> PriceSeries:
    """Series of *closes* laid out on consecutive trading days from *start*."""
    dates = [ts.date() for ts in trading_days_from(start, len(closes))]
    return PriceSeries.from_closes(symbol, dates, [str(c) for c in closes])


def make_request(series: PriceSeries, strategy_id: str, capital="10000", **params) -> BacktestRequest:
    return BacktestRequest(
        symbol=series.symbol,
        strategy_id=strategy_id,
        start_date=series.start_date,
        end_date=series.end_date,
        initial_capital=Decimal(capital),
        strategy_params={k: str(v) for k, v in params.items()},
    )


@pytest.fixture()
def flat_series() -> PriceSeries:
    """252 trading days at a constant close of 50."""
    return make_series([50] * 252, symbol="FLAT")


@pytest.fixture()
def ma_series() -> PriceSeries:
    return make_series(MA_PRICES, symbol="CROSS")


@pytest.fixture()
def random_series() -> PriceSeries:
    """Deterministic random walk over 300 trading days."""
    rng = np.random.default_rng(0)
    n = 300
    close = np.round(100.0 * np.exp(np.cumsum(rng.normal(0.0003, 0.015, n))), 4)
    return make_series([repr(float(c)) for c in close], symbol="WALK", start="2020-01-02")


@pytest.fixture()
def rising_series() -> PriceSeries:
    """Strictly increasing closes over one calendar year."""
    return make_series([100 + i for i in range(252)], symbol="UP", start="2021-01-04")
