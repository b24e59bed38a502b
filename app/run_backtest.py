"""CLI entrypoint for single-symbol strategy backtests.

Usage:
    python -m app.run_backtest --symbol SPY
    python -m app.run_backtest --symbol AAPL --strategy DCA --param contributionAmount=250
    python -m app.run_backtest --csv-dir data/ --symbol SYNTH --strategy MA_CROSSOVER \
        --param shortWindow=10 --param longWindow=30 --json results.json
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

# Ensure project root on path
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.config import RunConfig
from stratlab.backtest import BacktestConfig, BacktestOrchestrator, BacktestOutcome
from stratlab.data import CsvProvider, ParquetCache, PriceProvider


def _parse_param(text: str) -> tuple[str, str]:
    key, sep, value = text.partition("=")
    if not sep or not key.strip():
        raise argparse.ArgumentTypeError(f"expected NAME=VALUE, got {text!r}")
    return key.strip(), value.strip()


def build_parser() -> argparse.ArgumentParser:
    defaults = RunConfig()
    parser = argparse.ArgumentParser(description="stratlab single-symbol strategy backtest")
    parser.add_argument("--symbol", default=defaults.symbol)
    parser.add_argument(
        "--strategy", action="append", dest="strategies",
        help="Strategy id to run (repeatable; default: all)",
    )
    parser.add_argument("--start-date", default=defaults.start_date)
    parser.add_argument("--end-date", default=defaults.end_date)
    parser.add_argument("--capital", default=defaults.initial_capital, help="Initial capital")
    parser.add_argument(
        "--param", action="append", type=_parse_param, default=[],
        help="Strategy parameter as NAME=VALUE (repeatable)",
    )
    parser.add_argument("--csv-dir", default=None, help="Read <SYMBOL>.csv files instead of yfinance")
    parser.add_argument("--cache-dir", default=defaults.cache_dir)
    parser.add_argument("--no-cache", action="store_true")
    parser.add_argument("--workers", type=int, default=defaults.max_workers)
    parser.add_argument("--risk-free-rate", type=float, default=defaults.risk_free_rate)
    parser.add_argument("--json", dest="json_path", default=None, help="Write results as JSON")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def config_from_args(args: argparse.Namespace) -> RunConfig:
    defaults = RunConfig()
    return RunConfig(
        symbol=args.symbol,
        strategies=tuple(args.strategies) if args.strategies else defaults.strategies,
        start_date=args.start_date,
        end_date=args.end_date,
        initial_capital=args.capital,
        strategy_params=dict(args.param),
        csv_dir=args.csv_dir,
        cache_dir=args.cache_dir,
        use_cache=not args.no_cache,
        max_workers=args.workers,
        risk_free_rate=args.risk_free_rate,
        json_path=args.json_path,
    )


def build_provider(config: RunConfig) -> PriceProvider:
    if config.csv_dir is not None:
        provider: PriceProvider = CsvProvider(config.csv_dir)
    else:
        from stratlab.data import YFinanceProvider
        provider = YFinanceProvider()
    if config.use_cache:
        provider = ParquetCache(provider, cache_dir=config.cache_dir)
    return provider


def run(config: RunConfig, provider: PriceProvider | None = None) -> list[BacktestOutcome]:
    if provider is None:
        provider = build_provider(config)
    orchestrator = BacktestOrchestrator(
        provider,
        max_workers=config.max_workers,
        config=BacktestConfig(risk_free_rate=config.risk_free_rate),
    )
    requests = [
        {
            "symbol": config.symbol,
            "strategy_id": strategy,
            "start_date": config.start_date,
            "end_date": config.end_date,
            "initial_capital": config.initial_capital,
            "strategy_params": config.strategy_params,
        }
        for strategy in config.strategies
    ]
    return orchestrator.run(requests)


def print_summary(config: RunConfig, outcomes: list[BacktestOutcome]) -> None:
    print("\n" + "=" * 78)
    print(f"BACKTEST {config.symbol}  {config.start_date} -> {config.end_date}  "
          f"capital={config.initial_capital}")
    print("=" * 78)
    print(f"  {'Strategy':<14s} {'Final':>14s} {'Contrib':>12s} {'CAGR':>9s} "
          f"{'MaxDD':>9s} {'Sharpe':>8s} {'Trades':>6s}")
    print("-" * 78)
    for outcome in outcomes:
        name = outcome.request.strategy_id if outcome.request else f"#{outcome.index}"
        if not outcome.ok:
            print(f"  {name:<14s} FAILED: {outcome.error}")
            continue
        m = outcome.result.metrics
        print(f"  {name:<14s} {float(m.final_value):>14,.2f} {float(m.total_contributions):>12,.2f} "
              f"{float(m.cagr):>9.2%} {float(m.max_drawdown):>9.2%} "
              f"{m.sharpe_ratio:>8.3f} {m.number_of_trades:>6d}")
    print("=" * 78)


def write_json(path: str, outcomes: list[BacktestOutcome]) -> None:
    payload = [
        o.result.to_dict() if o.ok else {"index": o.index, "error": str(o.error)}
        for o in outcomes
    ]
    Path(path).write_text(json.dumps(payload, indent=2))


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    config = config_from_args(args)
    outcomes = run(config)
    print_summary(config, outcomes)
    if config.json_path:
        write_json(config.json_path, outcomes)
        print(f"Results saved to: {config.json_path}")
    return 0 if all(o.ok for o in outcomes) else 1


if __name__ == "__main__":
    sys.exit(main())
