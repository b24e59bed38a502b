"""Portfolio simulation and batch orchestration."""

from stratlab.backtest.config import BacktestConfig
from stratlab.backtest.models import BacktestRequest, BacktestResult, EquityCurvePoint, Trade
from stratlab.backtest.engine import PortfolioState, Simulation, simulate, run_backtest
from stratlab.backtest.orchestrator import BacktestOrchestrator, BacktestOutcome

__all__ = [
    "BacktestConfig",
    "BacktestRequest", "BacktestResult", "EquityCurvePoint", "Trade",
    "PortfolioState", "Simulation", "simulate", "run_backtest",
    "BacktestOrchestrator", "BacktestOutcome",
]
