"""Tests for stratlab.strategy: parameters, catalog, indicators, decisions."""

from decimal import Decimal

import pytest

from stratlab.backtest.engine import PortfolioState
from stratlab.strategy.catalog import DEFAULT_CATALOG, StrategyKind
from stratlab.strategy.engine import HOLD, Action, contribution, decide
from stratlab.strategy.indicators import sma, sma_spread
from stratlab.strategy.params import ParameterSpec, ParamType, StrategyParams, resolve_params
from stratlab.utils.validation import UnknownStrategyError, ValidationError

from conftest import make_series


def _params(strategy_id, **raw):
    return DEFAULT_CATALOG.resolve(strategy_id, {k: str(v) for k, v in raw.items()})[1]


def _run_decisions(kind, series, params, cash="10000"):
    """Call ``decide`` day by day, applying unclamped proposals to a state."""
    state = PortfolioState(cash=Decimal(cash))
    decisions = []
    for i, today in enumerate(series):
        state.cash += contribution(kind, i, params)
        d = decide(kind, state, series.history(i + 1), today, params)
        if d.action is Action.BUY:
            state.cash -= d.quantity * today.close
            state.shares_held += d.quantity
        elif d.action is Action.SELL:
            state.cash += d.quantity * today.close
            state.shares_held -= d.quantity
        decisions.append(d)
    return decisions


class TestParams:
    def test_integer_parse(self):
        spec = ParameterSpec("n", ParamType.integer, "5")
        assert spec.parse(" 12 ") == 12

    def test_number_parse(self):
        spec = ParameterSpec("x", ParamType.number, "1")
        assert spec.parse("250.75") == Decimal("250.75")

    def test_unparsable_names_parameter(self):
        spec = ParameterSpec("n", ParamType.integer, "5")
        with pytest.raises(ValidationError, match="valid integer") as exc:
            spec.parse("1.5")
        assert exc.value.parameter == "n"

    def test_range_check(self):
        spec = ParameterSpec("n", ParamType.integer, "5", check=lambda v: v >= 1, requirement="must be >= 1")
        with pytest.raises(ValidationError, match="must be >= 1"):
            spec.parse("0")

    def test_resolve_defaults_and_ignores_unknown(self):
        specs = (
            ParameterSpec("a", ParamType.integer, "3"),
            ParameterSpec("b", ParamType.number, "0.5"),
        )
        params = resolve_params(specs, {"a": "7", "b": "  ", "zzz": "junk"})
        assert dict(params) == {"a": 7, "b": Decimal("0.5")}

    def test_params_mapping_behaviour(self):
        params = StrategyParams({"a": 1})
        assert params["a"] == 1
        assert len(params) == 1
        assert hash(params) == hash(StrategyParams({"a": 1}))


class TestCatalog:
    def test_lists_three_strategies(self):
        ids = [info.id for info in DEFAULT_CATALOG.list_all()]
        assert ids == ["BUY_AND_HOLD", "DCA", "MA_CROSSOVER"]

    def test_lookup_is_case_insensitive(self):
        assert DEFAULT_CATALOG.get("dca").kind is StrategyKind.DCA
        assert "ma_crossover" in DEFAULT_CATALOG
        assert "NOPE" not in DEFAULT_CATALOG

    def test_unknown_strategy(self):
        with pytest.raises(UnknownStrategyError, match="Unknown strategy"):
            DEFAULT_CATALOG.get("MOMENTUM")

    def test_resolve_defaults(self):
        kind, params = DEFAULT_CATALOG.resolve("DCA", {})
        assert kind is StrategyKind.DCA
        assert params["contributionAmount"] == Decimal("500")
        assert params["frequencyDays"] == 21

    def test_ma_window_order(self):
        with pytest.raises(ValidationError, match="shortWindow must be less than longWindow") as exc:
            DEFAULT_CATALOG.resolve("MA_CROSSOVER", {"shortWindow": "50", "longWindow": "20"})
        assert exc.value.parameter == "shortWindow"

    @pytest.mark.parametrize(
        "strategy_id, raw, name",
        [
            ("DCA", {"contributionAmount": "0"}, "contributionAmount"),
            ("DCA", {"contributionAmount": "abc"}, "contributionAmount"),
            ("DCA", {"frequencyDays": "0"}, "frequencyDays"),
            ("MA_CROSSOVER", {"shortWindow": "-1"}, "shortWindow"),
            ("MA_CROSSOVER", {"longWindow": "ten"}, "longWindow"),
        ],
    )
    def test_invalid_parameters(self, strategy_id, raw, name):
        with pytest.raises(ValidationError) as exc:
            DEFAULT_CATALOG.resolve(strategy_id, raw)
        assert exc.value.parameter == name

    def test_to_dict(self):
        d = DEFAULT_CATALOG.get("MA_CROSSOVER").to_dict()
        assert d["id"] == "MA_CROSSOVER"
        assert d["displayName"] == "Moving Average Crossover"
        assert [p["name"] for p in d["parameters"]] == ["shortWindow", "longWindow"]
        assert d["parameters"][0]["type"] == "integer"


class TestIndicators:
    def test_sma(self):
        closes = [Decimal(c) for c in (1, 2, 3, 4)]
        assert sma(closes, 2) == Decimal("3.5")
        assert sma(closes, 5) is None

    def test_sma_rejects_bad_window(self):
        with pytest.raises(ValueError):
            sma([Decimal(1)], 0)

    def test_sma_spread_requires_long_window(self):
        h = make_series([1, 2, 3]).history(3)
        assert sma_spread(h, 2, 4) is None
        assert sma_spread(h, 1, 3) == Decimal(3) - Decimal(2)


class TestBuyAndHold:
    def test_buys_once_with_all_cash(self, flat_series):
        params = _params("BUY_AND_HOLD")
        decisions = _run_decisions(StrategyKind.BUY_AND_HOLD, flat_series, params)
        assert decisions[0].action is Action.BUY
        assert decisions[0].quantity == Decimal("200")
        assert decisions[0].reason == "Initial buy - all capital"
        assert all(d == HOLD for d in decisions[1:])


class TestDCA:
    def test_buys_on_contribution_days(self, flat_series):
        params = _params("DCA", contributionAmount=500, frequencyDays=21)
        decisions = _run_decisions(StrategyKind.DCA, flat_series, params)
        buy_days = [i for i, d in enumerate(decisions) if d.action is Action.BUY]
        assert buy_days == list(range(0, 252, 21))
        assert decisions[0].quantity == Decimal("200")
        assert decisions[21].quantity == Decimal("10")
        assert decisions[21].reason == "DCA contribution of 500"

    def test_contribution_schedule(self):
        params = _params("DCA", contributionAmount=250, frequencyDays=5)
        assert contribution(StrategyKind.DCA, 0, params) == 0
        assert contribution(StrategyKind.DCA, 5, params) == Decimal("250")
        assert contribution(StrategyKind.DCA, 6, params) == 0
        assert contribution(StrategyKind.BUY_AND_HOLD, 5, _params("BUY_AND_HOLD")) == 0


class TestMACrossover:
    def test_golden_then_death_cross(self, ma_series):
        params = _params("MA_CROSSOVER", shortWindow=2, longWindow=4)
        decisions = _run_decisions(StrategyKind.MA_CROSSOVER, ma_series, params)
        actions = [d.action for d in decisions]
        assert all(a is Action.HOLD for a in actions[:4])
        assert actions[4] is Action.BUY
        assert decisions[4].reason == "SMA(2) crossed above SMA(4)"
        assert actions[8] is Action.SELL
        assert decisions[8].reason == "SMA(2) crossed below SMA(4)"
        assert sum(a is not Action.HOLD for a in actions) == 2

    def test_no_buy_when_already_holding(self, ma_series):
        params = _params("MA_CROSSOVER", shortWindow=2, longWindow=4)
        state = PortfolioState(cash=Decimal("0"), shares_held=Decimal("5"))
        d = decide(StrategyKind.MA_CROSSOVER, state, ma_series.history(5), ma_series[4], params)
        assert d == HOLD

    def test_no_sell_when_flat(self, ma_series):
        params = _params("MA_CROSSOVER", shortWindow=2, longWindow=4)
        state = PortfolioState(cash=Decimal("100"))
        d = decide(StrategyKind.MA_CROSSOVER, state, ma_series.history(9), ma_series[8], params)
        assert d == HOLD

    def test_equal_averages_are_not_a_cross(self):
        series = make_series([10] * 8)
        params = _params("MA_CROSSOVER", shortWindow=2, longWindow=4)
        decisions = _run_decisions(StrategyKind.MA_CROSSOVER, series, params)
        assert all(d == HOLD for d in decisions)

    def test_no_cross_on_first_full_window(self):
        # Short SMA is above the long SMA as soon as both exist, but was never below it
        series = make_series(range(1, 11))
        params = _params("MA_CROSSOVER", shortWindow=2, longWindow=4)
        decisions = _run_decisions(StrategyKind.MA_CROSSOVER, series, params)
        assert all(d == HOLD for d in decisions)
