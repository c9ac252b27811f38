from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from concurrent.futures import ThreadPoolExecutor
from typing import Sequence

from tradestats.models.enums import TradeMode
from tradestats.schemas.analytics import (
    ComparisonCell,
    ComparisonResult,
    ComparisonSummary,
    PerformanceBreakdown,
    StrategyComparisonEntry,
    StrategyRead,
    StrategyOverview,
    TradeAnalytics,
)
from tradestats.services.errors import InsufficientInputError, NotFoundError
from tradestats.services.metrics import aggregate_trades
from tradestats.services.records import TradeRecord, select_mode

logger = logging.getLogger(__name__)

MIN_STRATEGIES = 2


def _aggregate_all(
    scoped_trades: list[list[TradeRecord]],
    max_workers: int,
) -> list[TradeAnalytics]:
    workers = min(max_workers, len(scoped_trades))
    if workers <= 1:
        return [aggregate_trades(trades) for trades in scoped_trades]
    # map() yields in submission order, so output matches the sequential path
    with ThreadPoolExecutor(max_workers=workers) as executor:
        return list(executor.map(aggregate_trades, scoped_trades))


def _matrix(
    entries: Sequence[StrategyComparisonEntry],
    keys: Sequence[str],
    breakdown: Callable[[TradeAnalytics], Mapping[str, PerformanceBreakdown]],
) -> dict[str, list[ComparisonCell]]:
    return {
        key: [
            ComparisonCell(
                strategy_id=entry.strategy.id,
                strategy_name=entry.strategy.name,
                performance=breakdown(entry.analytics).get(key, PerformanceBreakdown()),
            )
            for entry in entries
        ]
        for key in keys
    }


def _pick(
    entries: Sequence[StrategyComparisonEntry],
    metric: Callable[[StrategyOverview], float],
) -> StrategyRead:
    # max() keeps the first of equal candidates, so ties go to input order
    return max(entries, key=lambda entry: metric(entry.analytics.overview)).strategy


def compare_strategies(
    strategies: Sequence[StrategyRead],
    trades_by_strategy: Mapping[str, Sequence[TradeRecord]],
    *,
    mode: TradeMode,
    max_workers: int = 1,
) -> ComparisonResult:
    """Aggregate each strategy under the same mode and line the results up.

    Every strategy appears in every market and month row; strategies without
    activity there get an all-zero placeholder.
    """
    if len(strategies) < MIN_STRATEGIES:
        raise InsufficientInputError(len(strategies), MIN_STRATEGIES)
    missing = [strategy.id for strategy in strategies if strategy.id not in trades_by_strategy]
    if missing:
        raise NotFoundError(missing)

    scoped_trades = [select_mode(trades_by_strategy[strategy.id], mode) for strategy in strategies]
    logger.debug(
        "Comparing %d strategies in %s mode (%d trades)",
        len(strategies),
        mode.value,
        sum(len(trades) for trades in scoped_trades),
    )
    analytics = _aggregate_all(scoped_trades, max_workers)
    entries = [
        StrategyComparisonEntry(strategy=strategy, analytics=result)
        for strategy, result in zip(strategies, analytics)
    ]

    markets = sorted({market for result in analytics for market in result.market_performance})
    months = sorted({month for result in analytics for month in result.monthly_performance})

    return ComparisonResult(
        mode=mode,
        strategies=entries,
        summary=ComparisonSummary(
            best_performer=_pick(entries, lambda overview: overview.net_profit_loss),
            most_consistent=_pick(entries, lambda overview: overview.success_rate),
            most_active=_pick(entries, lambda overview: overview.total_trades),
            best_profit_factor=_pick(entries, lambda overview: overview.profit_factor),
        ),
        market_comparison=_matrix(entries, markets, lambda result: result.market_performance),
        time_comparison=_matrix(entries, months, lambda result: result.monthly_performance),
    )
