"""Strategy catalog, parameter resolution, and per-day decisions."""

from stratlab.strategy.params import ParameterSpec, ParamType, StrategyParams, resolve_params
from stratlab.strategy.catalog import (
    StrategyKind,
    StrategyInfo,
    StrategyCatalog,
    DEFAULT_CATALOG,
)
from stratlab.strategy.engine import Action, Decision, decide, contribution

__all__ = [
    "ParameterSpec", "ParamType", "StrategyParams", "resolve_params",
    "StrategyKind", "StrategyInfo", "StrategyCatalog", "DEFAULT_CATALOG",
    "Action", "Decision", "decide", "contribution",
]
