"""Risk and performance analysis."""

from stratlab.risk.metrics import (
    Metrics,
    daily_returns,
    net_return,
    cagr,
    max_drawdown,
    annualized_volatility,
    sharpe_ratio,
    compute_metrics,
    performance_summary,
)
from stratlab.risk.drawdown import (
    equity_values,
    drawdown_series,
    drawdown_details,
)

__all__ = [
    "Metrics", "daily_returns", "net_return", "cagr", "max_drawdown",
    "annualized_volatility", "sharpe_ratio", "compute_metrics",
    "performance_summary",
    "equity_values", "drawdown_series", "drawdown_details",
]
