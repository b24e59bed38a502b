"""Tests for the backtest CLI."""

import json

import pytest

from app.config import RunConfig
from app.run_backtest import build_parser, build_provider, config_from_args, main, run
from stratlab.data import CsvProvider, InMemoryProvider, ParquetCache
from stratlab.data.csv_provider import write_synthetic_csv


@pytest.fixture()
def csv_dir(tmp_path):
    data = tmp_path / "data"
    write_synthetic_csv(data, ["SYN"], start="2021-01-01", end="2021-12-31")
    return data


class TestArgs:
    def test_defaults(self):
        config = config_from_args(build_parser().parse_args([]))
        assert config == RunConfig()

    def test_overrides(self):
        args = build_parser().parse_args([
            "--symbol", "QQQ", "--strategy", "DCA", "--strategy", "BUY_AND_HOLD",
            "--param", "contributionAmount=250", "--param", "frequencyDays = 5",
            "--no-cache", "--workers", "2",
        ])
        config = config_from_args(args)
        assert config.symbol == "QQQ"
        assert config.strategies == ("DCA", "BUY_AND_HOLD")
        assert config.strategy_params == {"contributionAmount": "250", "frequencyDays": "5"}
        assert config.use_cache is False
        assert config.max_workers == 2

    def test_bad_param(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--param", "novalue"])

    def test_to_dict(self):
        assert RunConfig().to_dict()["symbol"] == "SPY"


class TestProvider:
    def test_csv_with_cache(self, csv_dir, tmp_path):
        config = RunConfig(csv_dir=str(csv_dir), cache_dir=str(tmp_path / "cache"))
        provider = build_provider(config)
        assert isinstance(provider, ParquetCache)
        assert isinstance(provider.provider, CsvProvider)

    def test_csv_without_cache(self, csv_dir):
        provider = build_provider(RunConfig(csv_dir=str(csv_dir), use_cache=False))
        assert isinstance(provider, CsvProvider)


class TestRun:
    def test_run_with_injected_provider(self, ma_series):
        config = RunConfig(
            symbol="CROSS",
            start_date=str(ma_series.start_date),
            end_date=str(ma_series.end_date),
            initial_capital="1000",
            strategy_params={"shortWindow": "2", "longWindow": "4"},
        )
        outcomes = run(config, provider=InMemoryProvider([ma_series]))
        assert [o.result.strategy_id for o in outcomes] == ["BUY_AND_HOLD", "DCA", "MA_CROSSOVER"]
        assert outcomes[2].result.metrics.number_of_trades == 2

    def test_main_writes_json(self, csv_dir, tmp_path, capsys):
        out = tmp_path / "results.json"
        code = main([
            "--symbol", "SYN", "--csv-dir", str(csv_dir), "--no-cache",
            "--start-date", "2021-01-01", "--end-date", "2021-12-31",
            "--json", str(out),
        ])
        assert code == 0
        payload = json.loads(out.read_text())
        assert [r["strategyId"] for r in payload] == ["BUY_AND_HOLD", "DCA", "MA_CROSSOVER"]
        assert "BACKTEST SYN" in capsys.readouterr().out

    def test_main_reports_failures(self, csv_dir, capsys):
        code = main([
            "--symbol", "NOPE", "--csv-dir", str(csv_dir), "--no-cache",
            "--strategy", "BUY_AND_HOLD",
        ])
        assert code == 1
        assert "FAILED" in capsys.readouterr().out
