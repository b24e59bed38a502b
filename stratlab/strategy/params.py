"""Strategy parameter schemas and resolution of raw string parameters."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Callable, Union

from stratlab.utils.numeric import to_decimal
from stratlab.utils.validation import ValidationError

ParamValue = Union[int, Decimal]


class ParamType(str, Enum):
    integer = "integer"
    number = "number"


@dataclass(frozen=True)
class ParameterSpec:
    """Declared parameter of a strategy.

    Attributes
    ----------
    name : str
        Key expected in the request's ``strategy_params``.
    type : ParamType
        ``integer`` or ``number``.
    default : str
        Default value, in the same string form a request would carry.
    description : str
        One-line help text for listings.
    check : callable, optional
        Range predicate on the parsed value.
    requirement : str
        Human-readable form of *check*, used in error messages.
    """

    name: str
    type: ParamType
    default: str
    description: str = ""
    check: Callable[[ParamValue], bool] | None = field(default=None, compare=False)
    requirement: str = ""

    def parse(self, raw: object) -> ParamValue:
        """Parse *raw* as this parameter's type and apply its range check."""
        text = str(raw).strip()
        if self.type is ParamType.integer:
            try:
                value: ParamValue = int(text)
            except ValueError:
                raise ValidationError(
                    f"{self.name} must be a valid integer: {raw!r}", parameter=self.name
                ) from None
        else:
            try:
                value = to_decimal(text)
            except ValueError:
                raise ValidationError(
                    f"{self.name} must be a valid number: {raw!r}", parameter=self.name
                ) from None
        if self.check is not None and not self.check(value):
            raise ValidationError(
                f"{self.name} {self.requirement or 'is out of range'}: {raw!r}",
                parameter=self.name,
            )
        return value


@dataclass(frozen=True)
class StrategyParams(Mapping):
    """Resolved, typed strategy parameters.  Read-only mapping."""

    values: Mapping[str, ParamValue] = field(default_factory=dict)

    def __getitem__(self, key: str) -> ParamValue:
        return self.values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self.values)

    def __len__(self) -> int:
        return len(self.values)

    def __hash__(self) -> int:
        return hash(tuple(sorted(self.values.items())))


def resolve_params(
    specs: tuple[ParameterSpec, ...],
    raw: Mapping[str, object] | None,
) -> StrategyParams:
    """Resolve raw request parameters against declared *specs*.

    Unknown keys are ignored, missing or blank keys take the declared
    default, and values that fail to parse raise :class:`ValidationError`
    naming the parameter.
    """
    raw = raw or {}
    values: dict[str, ParamValue] = {}
    for spec in specs:
        given = raw.get(spec.name)
        if given is None or str(given).strip() == "":
            given = spec.default
        values[spec.name] = spec.parse(given)
    return StrategyParams(values)
