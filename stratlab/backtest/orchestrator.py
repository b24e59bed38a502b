"""Batch execution of backtest requests."""
from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from datetime import date

from pydantic import ValidationError as PydanticValidationError

from stratlab.backtest.config import BacktestConfig
from stratlab.backtest.engine import run_backtest
from stratlab.backtest.models import BacktestRequest, BacktestResult
from stratlab.data.base import PriceProvider
from stratlab.data.series import PriceSeries
from stratlab.strategy.catalog import DEFAULT_CATALOG, StrategyCatalog, StrategyInfo
from stratlab.utils.validation import DataUnavailable, StratlabError, ValidationError

logger = logging.getLogger(__name__)

_FetchKey = tuple[str, date, date]


@dataclass(frozen=True)
class BacktestOutcome:
    """Result or error for one request of a batch.

    Exactly one of ``result`` and ``error`` is set.  ``request`` is ``None``
    when the raw input could not be parsed into a request.
    """

    index: int
    request: BacktestRequest | None
    result: BacktestResult | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _to_request(raw: BacktestRequest | Mapping) -> BacktestRequest:
    if isinstance(raw, BacktestRequest):
        return raw
    try:
        return BacktestRequest.model_validate(dict(raw))
    except PydanticValidationError as e:
        first = e.errors()[0]
        loc = ".".join(str(part) for part in first["loc"])
        message = f"{loc}: {first['msg']}" if loc else first["msg"]
        raise ValidationError(message, parameter=loc or None) from e


class BacktestOrchestrator:
    """Validate, fetch and run a batch of backtests.

    Every request is handled independently: a failure in one is reported in
    its :class:`BacktestOutcome` and never aborts its siblings.  Price series
    are fetched once per distinct ``(symbol, start, end)`` and shared
    read-only between simulations, which run on a thread pool.

    Parameters
    ----------
    provider : PriceProvider
        Source of daily closes.
    catalog : StrategyCatalog
        Strategy lookup used to validate requests.
    max_workers : int
        Upper bound on concurrently running simulations.
    config : BacktestConfig, optional
        Annualisation constants passed to every simulation.
    """

    def __init__(
        self,
        provider: PriceProvider,
        catalog: StrategyCatalog = DEFAULT_CATALOG,
        max_workers: int = 4,
        config: BacktestConfig | None = None,
    ) -> None:
        if max_workers < 1:
            raise ValidationError(f"max_workers must be >= 1; got {max_workers}.")
        self.provider = provider
        self.catalog = catalog
        self.max_workers = max_workers
        self.config = config or BacktestConfig()

    def list_strategies(self) -> list[StrategyInfo]:
        return self.catalog.list_all()

    def run(self, requests: Iterable[BacktestRequest | Mapping]) -> list[BacktestOutcome]:
        """Run every request and return one outcome per request, in input order."""
        raw_requests = list(requests)
        outcomes: list[BacktestOutcome | None] = [None] * len(raw_requests)
        pending: list[tuple[int, BacktestRequest, PriceSeries]] = []
        fetched: dict[_FetchKey, PriceSeries | Exception] = {}

        for i, raw in enumerate(raw_requests):
            request = raw if isinstance(raw, BacktestRequest) else None
            try:
                request = _to_request(raw)
                self.catalog.resolve(request.strategy_id, request.strategy_params)
                series = self._fetch(request, fetched)
            except Exception as e:
                self._log_failure(i, e)
                outcomes[i] = BacktestOutcome(i, request, error=e)
                continue
            pending.append((i, request, series))

        if pending:
            workers = min(self.max_workers, len(pending))
            with ThreadPoolExecutor(max_workers=workers) as executor:
                futures: list[tuple[int, BacktestRequest, Future]] = [
                    (i, req, executor.submit(run_backtest, req, series, self.catalog, self.config))
                    for i, req, series in pending
                ]
                for i, req, future in futures:
                    try:
                        outcomes[i] = BacktestOutcome(i, req, result=future.result())
                    except Exception as e:
                        self._log_failure(i, e)
                        outcomes[i] = BacktestOutcome(i, req, error=e)

        n_ok = sum(1 for o in outcomes if o is not None and o.ok)
        logger.info("Batch finished: %d/%d requests succeeded", n_ok, len(outcomes))
        return [o for o in outcomes if o is not None]

    def _fetch(
        self,
        request: BacktestRequest,
        fetched: dict[_FetchKey, PriceSeries | Exception],
    ) -> PriceSeries:
        key = (request.symbol, request.start_date, request.end_date)
        if key not in fetched:
            try:
                fetched[key] = self.provider.fetch(*key)
            except Exception as e:
                if not isinstance(e, StratlabError):
                    logger.error("Fetch of %s [%s, %s] failed unexpectedly", *key, exc_info=e)
                fetched[key] = e
        entry = fetched[key]
        if isinstance(entry, Exception):
            raise DataUnavailable(str(entry) or repr(entry)) from entry
        return entry

    @staticmethod
    def _log_failure(index: int, error: Exception) -> None:
        if isinstance(error, StratlabError):
            logger.warning("Request %d failed: %s", index, error)
        else:
            logger.error("Request %d failed unexpectedly", index, exc_info=error)
