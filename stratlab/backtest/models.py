"""Backtest request and result models."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal, localcontext

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from stratlab.risk.metrics import Metrics
from stratlab.strategy.engine import Action
from stratlab.utils.numeric import ENGINE_CONTEXT


# ── Request ────────────────────────────────────────────────────────────

class BacktestRequest(BaseModel):
    """One backtest to run: a strategy over a symbol's history.

    Immutable.  Parameter values are kept as strings; they are typed against
    the strategy's schema when the request is resolved.
    """

    model_config = ConfigDict(
        frozen=True,
        coerce_numbers_to_str=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    symbol: str = Field(..., min_length=1, max_length=32)
    strategy_id: str = Field(..., min_length=1)
    start_date: date
    end_date: date
    initial_capital: Decimal = Field(..., gt=0)
    strategy_params: dict[str, str] = Field(default_factory=dict)

    @field_validator("symbol")
    @classmethod
    def _normalize_symbol(cls, v: str) -> str:
        v = v.strip().upper()
        if not v:
            raise ValueError("symbol must not be blank")
        return v

    @model_validator(mode="after")
    def _check_dates(self) -> "BacktestRequest":
        if self.start_date > self.end_date:
            raise ValueError(
                f"start_date {self.start_date} must be on or before end_date {self.end_date}"
            )
        return self


# ── Results ────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Trade:
    date: date
    action: Action
    quantity: Decimal
    price: Decimal
    reason: str

    @property
    def notional(self) -> Decimal:
        with localcontext(ENGINE_CONTEXT):
            return self.quantity * self.price


@dataclass(frozen=True)
class EquityCurvePoint:
    date: date
    portfolio_value: Decimal


@dataclass(frozen=True)
class BacktestResult:
    """Container for one finished backtest.

    Attributes
    ----------
    strategy_id : str
        Catalog id of the strategy that ran.
    symbol : str
        Instrument the strategy traded.
    equity_curve : tuple of EquityCurvePoint
        One point per trading day in range, in date order.
    trades : tuple of Trade
        Executed trades in date order.
    metrics : Metrics
        Summary statistics.
    """

    strategy_id: str
    symbol: str
    equity_curve: tuple[EquityCurvePoint, ...]
    trades: tuple[Trade, ...]
    metrics: Metrics

    def equity_frame(self) -> pd.DataFrame:
        """Equity curve as a DataFrame indexed by date (float values)."""
        return pd.DataFrame(
            {"portfolio_value": [float(p.portfolio_value) for p in self.equity_curve]},
            index=pd.DatetimeIndex(
                [pd.Timestamp(p.date) for p in self.equity_curve], name="date"
            ),
        )

    def trades_frame(self) -> pd.DataFrame:
        """Trade ledger as a DataFrame, one row per trade."""
        return pd.DataFrame(
            [
                {
                    "date": pd.Timestamp(t.date),
                    "action": t.action.value,
                    "quantity": float(t.quantity),
                    "price": float(t.price),
                    "reason": t.reason,
                }
                for t in self.trades
            ],
            columns=["date", "action", "quantity", "price", "reason"],
        )

    def to_dict(self) -> dict:
        return {
            "strategyId": self.strategy_id,
            "symbol": self.symbol,
            "equityCurve": [
                {"date": p.date.isoformat(), "portfolioValue": str(p.portfolio_value)}
                for p in self.equity_curve
            ],
            "trades": [
                {
                    "date": t.date.isoformat(),
                    "action": t.action.value,
                    "quantity": str(t.quantity),
                    "price": str(t.price),
                    "reason": t.reason,
                }
                for t in self.trades
            ],
            "metrics": self.metrics.to_dict(),
        }
