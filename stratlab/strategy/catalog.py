"""Strategy catalog: the closed set of strategies and their parameter schemas.

The catalog is built once at import time and never mutated; validators and
the orchestrator receive it by injection.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType

from stratlab.strategy.params import ParameterSpec, ParamType, StrategyParams, resolve_params
from stratlab.utils.validation import UnknownStrategyError, ValidationError


class StrategyKind(str, Enum):
    BUY_AND_HOLD = "BUY_AND_HOLD"
    DCA = "DCA"
    MA_CROSSOVER = "MA_CROSSOVER"


@dataclass(frozen=True)
class StrategyInfo:
    """Catalog entry: identity, help text and declared parameters."""

    kind: StrategyKind
    display_name: str
    description: str
    parameters: tuple[ParameterSpec, ...] = ()

    @property
    def id(self) -> str:
        return self.kind.value

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "displayName": self.display_name,
            "description": self.description,
            "parameters": [
                {
                    "name": p.name,
                    "type": p.type.value,
                    "default": p.default,
                    "description": p.description,
                }
                for p in self.parameters
            ],
        }


def _check_windows(params: StrategyParams) -> None:
    if params["shortWindow"] >= params["longWindow"]:
        raise ValidationError(
            "shortWindow must be less than longWindow: "
            f"{params['shortWindow']} >= {params['longWindow']}",
            parameter="shortWindow",
        )


# Cross-parameter checks that a single ParameterSpec cannot express.
_CROSS_CHECKS = {
    StrategyKind.MA_CROSSOVER: _check_windows,
}


class StrategyCatalog:
    """Immutable lookup of :class:`StrategyInfo` by strategy id."""

    def __init__(self, entries: tuple[StrategyInfo, ...]) -> None:
        self._entries: Mapping[str, StrategyInfo] = MappingProxyType(
            {e.id: e for e in entries}
        )

    def __contains__(self, strategy_id: object) -> bool:
        return isinstance(strategy_id, str) and strategy_id.strip().upper() in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, strategy_id: str) -> StrategyInfo:
        key = str(strategy_id).strip().upper()
        if key not in self._entries:
            raise UnknownStrategyError(
                f"Unknown strategy id {strategy_id!r}. Available: {list(self._entries)}"
            )
        return self._entries[key]

    def list_all(self) -> list[StrategyInfo]:
        return list(self._entries.values())

    def resolve(
        self,
        strategy_id: str,
        raw_params: Mapping[str, object] | None = None,
    ) -> tuple[StrategyKind, StrategyParams]:
        """Look up *strategy_id* and resolve its parameters.

        Raises
        ------
        UnknownStrategyError
            If the id is not in the catalog.
        ValidationError
            If a parameter is unparsable or out of range.
        """
        info = self.get(strategy_id)
        params = resolve_params(info.parameters, raw_params)
        check = _CROSS_CHECKS.get(info.kind)
        if check is not None:
            check(params)
        return info.kind, params


def _positive(v) -> bool:
    return v > 0


DEFAULT_CATALOG = StrategyCatalog((
    StrategyInfo(
        kind=StrategyKind.BUY_AND_HOLD,
        display_name="Buy & Hold",
        description=(
            "Invest all initial capital at the start date and hold until end. "
            "No additional contributions."
        ),
    ),
    StrategyInfo(
        kind=StrategyKind.DCA,
        display_name="Dollar Cost Averaging (DCA)",
        description=(
            "Buy a fixed dollar amount every N trading days. No selling. "
            "Fractional shares allowed."
        ),
        parameters=(
            ParameterSpec(
                "contributionAmount", ParamType.number, "500",
                "Dollar amount to invest each period",
                check=_positive, requirement="must be a positive number",
            ),
            ParameterSpec(
                "frequencyDays", ParamType.integer, "21",
                "Trading days between contributions (5=weekly, 21=monthly)",
                check=lambda v: v >= 1, requirement="must be an integer >= 1",
            ),
        ),
    ),
    StrategyInfo(
        kind=StrategyKind.MA_CROSSOVER,
        display_name="Moving Average Crossover",
        description=(
            "Buy on a golden cross of the short SMA over the long SMA; sell the "
            "whole position on the next death cross."
        ),
        parameters=(
            ParameterSpec(
                "shortWindow", ParamType.integer, "20",
                "Short SMA window (trading days)",
                check=_positive, requirement="must be a positive integer",
            ),
            ParameterSpec(
                "longWindow", ParamType.integer, "50",
                "Long SMA window (trading days)",
                check=_positive, requirement="must be a positive integer",
            ),
        ),
    ),
))
