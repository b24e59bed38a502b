"""Per-day strategy decisions.

Each strategy is a pure function of the portfolio state, the price history up
to and including today, and its resolved parameters.  Strategies only
*propose* trades; the simulator clamps them to what cash and holdings allow.

Dispatch is a closed table keyed by :class:`StrategyKind`, so the simulator
has a single call site and every variant can be exercised in isolation.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Callable

from stratlab.data.series import PriceHistory, PricePoint
from stratlab.strategy.catalog import StrategyKind
from stratlab.strategy.indicators import sma_spread
from stratlab.strategy.params import StrategyParams
from stratlab.utils.numeric import ZERO, shares_for

if TYPE_CHECKING:
    from stratlab.backtest.engine import PortfolioState


class Action(str, Enum):
    HOLD = "HOLD"
    BUY = "BUY"
    SELL = "SELL"


@dataclass(frozen=True)
class Decision:
    action: Action
    quantity: Decimal = ZERO
    reason: str = ""


HOLD = Decision(Action.HOLD)


def _decide_buy_and_hold(
    state: PortfolioState,
    history: PriceHistory,
    today: PricePoint,
    params: StrategyParams,
) -> Decision:
    if len(history) != 1:
        return HOLD
    qty = shares_for(state.cash, today.close)
    return Decision(Action.BUY, qty, "Initial buy - all capital")


def _is_contribution_day(day_index: int, params: StrategyParams) -> bool:
    return day_index % params["frequencyDays"] == 0


def _decide_dca(
    state: PortfolioState,
    history: PriceHistory,
    today: PricePoint,
    params: StrategyParams,
) -> Decision:
    day_index = len(history) - 1
    if not _is_contribution_day(day_index, params):
        return HOLD
    if day_index == 0:
        qty = shares_for(state.cash, today.close)
        return Decision(Action.BUY, qty, f"Initial investment of {state.cash}")
    amount = params["contributionAmount"]
    qty = shares_for(amount, today.close)
    return Decision(Action.BUY, qty, f"DCA contribution of {amount}")


def _decide_ma_crossover(
    state: PortfolioState,
    history: PriceHistory,
    today: PricePoint,
    params: StrategyParams,
) -> Decision:
    short, long = params["shortWindow"], params["longWindow"]
    spread = sma_spread(history, short, long)
    prev_spread = sma_spread(history, short, long, offset=1)
    if spread is None or prev_spread is None:
        return HOLD

    if prev_spread <= 0 < spread and state.shares_held == 0:
        qty = shares_for(state.cash, today.close)
        return Decision(Action.BUY, qty, f"SMA({short}) crossed above SMA({long})")
    if prev_spread >= 0 > spread and state.shares_held > 0:
        return Decision(
            Action.SELL, state.shares_held, f"SMA({short}) crossed below SMA({long})"
        )
    return HOLD


_Decider = Callable[["PortfolioState", PriceHistory, PricePoint, StrategyParams], Decision]

_DECIDERS: dict[StrategyKind, _Decider] = {
    StrategyKind.BUY_AND_HOLD: _decide_buy_and_hold,
    StrategyKind.DCA: _decide_dca,
    StrategyKind.MA_CROSSOVER: _decide_ma_crossover,
}


def decide(
    kind: StrategyKind,
    state: PortfolioState,
    history: PriceHistory,
    today: PricePoint,
    params: StrategyParams,
) -> Decision:
    """Propose today's action for strategy *kind*.

    Parameters
    ----------
    kind : StrategyKind
        Which strategy to evaluate.
    state : PortfolioState
        Cash and holdings as of the end of the previous day, plus any cash
        injected before today's decision.
    history : PriceHistory
        Price points from the first simulated day up to and including today.
    today : PricePoint
        Today's close; equal to ``history[-1]``.
    params : StrategyParams
        Resolved parameters for *kind*.
    """
    return _DECIDERS[kind](state, history, today, params)


def contribution(kind: StrategyKind, day_index: int, params: StrategyParams) -> Decimal:
    """External cash injected before the decision on trading day *day_index*.

    Only DCA injects cash, on every contribution day after day 0; day 0 is
    funded by the initial capital.
    """
    if kind is StrategyKind.DCA and day_index > 0 and _is_contribution_day(day_index, params):
        return params["contributionAmount"]
    return ZERO
