"""Daily-bar portfolio simulator.

Day-stepping convention, for each trading day in ``[start, end]`` present in
the price series:
    1. Read the day's close.
    2. Add any external contribution (DCA) to cash.
    3. Ask the strategy for a decision, given the state as of the previous
       close plus today's contribution.
    4. Clamp the proposal: a BUY to what cash affords, a SELL to the shares
       held.  A clamped trade notes the proposed quantity in its reason.
    5. Apply the trade and record it if its quantity is positive.
    6. Mark the portfolio to the close and append an equity-curve point.

Days absent from the series are skipped; no point is fabricated for them.
The engine uses **share-level accounting** in :class:`~decimal.Decimal`
inside a dedicated 50-digit context, so ``quantity * price`` is exact and
cash can never be overdrawn by rounding.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal, localcontext

from stratlab.backtest.config import BacktestConfig
from stratlab.backtest.models import BacktestRequest, BacktestResult, EquityCurvePoint, Trade
from stratlab.data.series import PriceSeries
from stratlab.risk.metrics import compute_metrics
from stratlab.strategy.catalog import DEFAULT_CATALOG, StrategyCatalog, StrategyKind
from stratlab.strategy.engine import Action, Decision, contribution, decide
from stratlab.strategy.params import StrategyParams
from stratlab.utils.numeric import ENGINE_CONTEXT, ZERO, round_value, shares_for, to_decimal
from stratlab.utils.validation import DataUnavailable, ValidationError

logger = logging.getLogger(__name__)


@dataclass
class PortfolioState:
    """Cash and share position of one running simulation."""

    cash: Decimal
    shares_held: Decimal = ZERO
    last_contribution_day: date | None = None

    def value(self, price: Decimal) -> Decimal:
        return self.cash + self.shares_held * price


@dataclass(frozen=True)
class Simulation:
    """Raw output of :func:`simulate`, before metrics.

    Attributes
    ----------
    equity_curve : tuple of EquityCurvePoint
        One point per simulated day.
    trades : tuple of Trade
        Executed trades.
    contributions : Decimal
        External cash injected after day 0.
    final_state : PortfolioState
        Snapshot of the portfolio after the last day.
    """

    equity_curve: tuple[EquityCurvePoint, ...]
    trades: tuple[Trade, ...]
    contributions: Decimal
    final_state: PortfolioState


def _clamp(decision: Decision, state: PortfolioState, price: Decimal) -> tuple[Decimal, str]:
    """Executable quantity for *decision* and the reason to record."""
    proposed = decision.quantity
    if decision.action is Action.HOLD or proposed <= 0 or price <= 0:
        return ZERO, decision.reason
    if decision.action is Action.BUY:
        executed = min(proposed, shares_for(state.cash, price))
    else:
        executed = min(proposed, state.shares_held)
    if executed <= 0:
        return ZERO, decision.reason
    if executed != proposed:
        logger.debug(
            "%s clamped from %s to %s at %s", decision.action.value, proposed, executed, price
        )
        return executed, f"{decision.reason} (clamped from {proposed} to {executed})"
    return executed, decision.reason


def simulate(
    kind: StrategyKind,
    params: StrategyParams,
    series: PriceSeries,
    start: date,
    end: date,
    initial_capital: Decimal,
) -> Simulation:
    """Replay *series* between *start* and *end* under strategy *kind*.

    Parameters
    ----------
    kind : StrategyKind
        Strategy to run.
    params : StrategyParams
        Resolved parameters for *kind*.
    series : PriceSeries
        Daily closes; only days within ``[start, end]`` are simulated.
    start, end : date
        Inclusive range.
    initial_capital : Decimal
        Starting cash; must be positive.

    Returns
    -------
    Simulation

    Raises
    ------
    DataUnavailable
        If the series has no trading day in range.
    """
    initial_capital = to_decimal(initial_capital)
    if initial_capital <= 0:
        raise ValidationError(f"initial_capital must be positive; got {initial_capital}.")
    window = series.between(start, end)
    if len(window) == 0:
        raise DataUnavailable(
            f"No trading days for {series.symbol} in [{start}, {end}]."
        )

    state = PortfolioState(cash=initial_capital)
    curve: list[EquityCurvePoint] = []
    trades: list[Trade] = []
    injected = ZERO

    with localcontext(ENGINE_CONTEXT):
        for i, today in enumerate(window):
            price = today.close

            amount = contribution(kind, i, params)
            if amount > 0:
                state.cash += amount
                injected += amount
            # day 0 is DCA's first tranche, funded by the initial capital
            if amount > 0 or (i == 0 and kind is StrategyKind.DCA):
                state.last_contribution_day = today.date

            decision = decide(kind, state, window.history(i + 1), today, params)
            qty, reason = _clamp(decision, state, price)

            if qty > 0:
                notional = qty * price
                if decision.action is Action.BUY:
                    state.cash -= notional
                    state.shares_held += qty
                else:
                    state.cash += notional
                    state.shares_held -= qty
                trades.append(Trade(today.date, decision.action, qty, price, reason))

            curve.append(EquityCurvePoint(today.date, round_value(state.value(price))))

    return Simulation(
        equity_curve=tuple(curve),
        trades=tuple(trades),
        contributions=injected,
        final_state=replace(state),
    )


def run_backtest(
    request: BacktestRequest,
    series: PriceSeries,
    catalog: StrategyCatalog = DEFAULT_CATALOG,
    config: BacktestConfig | None = None,
) -> BacktestResult:
    """Run one backtest request against an in-memory price series.

    Parameters
    ----------
    request : BacktestRequest
        What to run.
    series : PriceSeries
        Daily closes for ``request.symbol``; may extend beyond the requested
        range.
    catalog : StrategyCatalog
        Where strategy ids and parameter schemas are looked up.
    config : BacktestConfig, optional
        Annualisation constants.  Uses defaults if not provided.

    Returns
    -------
    BacktestResult

    Raises
    ------
    ValidationError
        Unknown strategy or invalid parameter.
    DataUnavailable
        No trading day in range.
    """
    if config is None:
        config = BacktestConfig()
    kind, params = catalog.resolve(request.strategy_id, request.strategy_params)
    sim = simulate(
        kind,
        params,
        series,
        request.start_date,
        request.end_date,
        request.initial_capital,
    )
    metrics = compute_metrics(
        sim.equity_curve,
        sim.trades,
        request.initial_capital,
        sim.contributions,
        periods_per_year=config.trading_days_per_year,
        days_per_year=config.calendar_days_per_year,
        risk_free_rate=config.risk_free_rate,
    )
    return BacktestResult(
        strategy_id=kind.value,
        symbol=request.symbol,
        equity_curve=sim.equity_curve,
        trades=sim.trades,
        metrics=metrics,
    )
