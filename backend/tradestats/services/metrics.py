from __future__ import annotations

import logging
import math
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from typing import Iterable, Sequence

from tradestats.models.enums import TradeMode, TradeType
from tradestats.schemas.analytics import (
    MarketRanking,
    PerformanceBreakdown,
    RecentTrade,
    StrategyOverview,
    TradeAnalytics,
    TradeTypePerformance,
)
from tradestats.schemas.stats import AccountStats
from tradestats.services.records import TradeRecord, chronological, select_mode

logger = logging.getLogger(__name__)

RECENT_WINDOW = 10
RANKING_SIZE = 5


@dataclass
class _Bucket:
    total_trades: int = 0
    closed_trades: int = 0
    profitable_trades: int = 0
    total_profit_loss: float = 0.0

    def add(self, trade: TradeRecord) -> None:
        self.total_trades += 1
        if not trade.is_closed:
            return
        self.closed_trades += 1
        if trade.profit_loss > 0:
            self.profitable_trades += 1
        self.total_profit_loss += trade.profit_loss

    def freeze(self) -> PerformanceBreakdown:
        return PerformanceBreakdown(
            total_trades=self.total_trades,
            profitable_trades=self.profitable_trades,
            total_profit_loss=self.total_profit_loss,
            success_rate=_rate(self.profitable_trades, self.closed_trades),
        )


def _rate(part: int, whole: int) -> float:
    return (part / whole) * 100 if whole else 0.0


def _group(
    trades: Iterable[TradeRecord],
    key: Callable[[TradeRecord], Hashable | None],
) -> dict[Hashable, PerformanceBreakdown]:
    buckets: dict[Hashable, _Bucket] = {}
    for trade in trades:
        group_key = key(trade)
        if group_key is None:
            continue
        buckets.setdefault(group_key, _Bucket()).add(trade)
    return {group_key: bucket.freeze() for group_key, bucket in buckets.items()}


def _profit_factor(total_profit: float, total_loss: float) -> float:
    if total_loss > 0:
        return total_profit / total_loss
    if total_profit > 0:
        return math.inf
    return 0.0


def _streaks(closed: Sequence[TradeRecord]) -> dict[str, int]:
    current_win = current_loss = max_win = max_loss = 0
    for trade in closed:
        if trade.profit_loss > 0:
            current_win += 1
            current_loss = 0
            max_win = max(max_win, current_win)
        elif trade.profit_loss < 0:
            current_loss += 1
            current_win = 0
            max_loss = max(max_loss, current_loss)
        # break-even trades leave both streaks as they are
    return {
        "current_win_streak": current_win,
        "current_loss_streak": current_loss,
        "max_win_streak": max_win,
        "max_loss_streak": max_loss,
    }


def build_overview(trades: Sequence[TradeRecord]) -> StrategyOverview:
    closed = chronological(trade for trade in trades if trade.is_closed)
    open_count = sum(1 for trade in trades if trade.is_open)
    if not closed:
        return StrategyOverview(open_trades=open_count)

    wins = [trade.profit_loss for trade in closed if trade.profit_loss > 0]
    losses = [trade.profit_loss for trade in closed if trade.profit_loss < 0]
    break_even = len(closed) - len(wins) - len(losses)

    total_profit = sum(wins)
    total_loss = abs(sum(losses))
    recent = closed[-RECENT_WINDOW:]

    return StrategyOverview(
        total_trades=len(closed),
        open_trades=open_count,
        profitable_trades=len(wins),
        losing_trades=len(losses),
        break_even_trades=break_even,
        success_rate=_rate(len(wins), len(closed)),
        net_profit_loss=total_profit - total_loss,
        total_profit=total_profit,
        total_loss=total_loss,
        average_win=total_profit / len(wins) if wins else 0.0,
        average_loss=total_loss / len(losses) if losses else 0.0,
        profit_factor=_profit_factor(total_profit, total_loss),
        recent_success_rate=_rate(sum(1 for trade in recent if trade.profit_loss > 0), len(recent)),
        **_streaks(closed),
    )


def market_breakdown(trades: Iterable[TradeRecord]) -> dict[str, PerformanceBreakdown]:
    """Group every trade by market; profit figures come from the closed ones only.

    A blank market counts as missing.
    """
    return _group(trades, lambda trade: trade.market or None)


def trade_type_breakdown(trades: Iterable[TradeRecord]) -> TradeTypePerformance:
    closed = [trade for trade in trades if trade.is_closed]
    grouped = _group(closed, lambda trade: trade.trade_type)
    return TradeTypePerformance(
        buy=grouped.get(TradeType.BUY, PerformanceBreakdown()),
        sell=grouped.get(TradeType.SELL, PerformanceBreakdown()),
    )


def monthly_breakdown(trades: Iterable[TradeRecord]) -> dict[str, PerformanceBreakdown]:
    closed = [trade for trade in trades if trade.is_closed]
    grouped = _group(closed, lambda trade: trade.month)
    return {month: grouped[month] for month in sorted(grouped)}


def rank_markets(
    markets: dict[str, PerformanceBreakdown],
    size: int = RANKING_SIZE,
) -> tuple[list[MarketRanking], list[MarketRanking]]:
    ranked = sorted(
        (MarketRanking(market=market, **data.model_dump()) for market, data in markets.items()),
        key=lambda item: item.total_profit_loss,
        reverse=True,
    )
    best = ranked[:size]
    worst = list(reversed(ranked[-size:]))
    return best, worst


def aggregate_trades(trades: Iterable[TradeRecord]) -> TradeAnalytics:
    """Compute the full analytics bundle for one strategy's trades.

    The trades must already be scoped to a single owner, strategy and mode;
    nothing is filtered out here. Records missing a market, trade type or date
    are left out of that grouping only.
    """
    trades = list(trades)
    logger.debug("Aggregating %d trades", len(trades))

    markets = market_breakdown(trades)
    best_markets, worst_markets = rank_markets(markets)
    closed = chronological(trade for trade in trades if trade.is_closed)

    return TradeAnalytics(
        overview=build_overview(trades),
        market_performance=markets,
        trade_type_performance=trade_type_breakdown(trades),
        monthly_performance=monthly_breakdown(trades),
        best_markets=best_markets,
        worst_markets=worst_markets,
        recent_trades=[
            RecentTrade(
                id=trade.id,
                market=trade.market,
                trade_type=trade.trade_type,
                profit_loss=trade.profit_loss,
                trade_date=trade.trade_date,
            )
            for trade in closed[-RECENT_WINDOW:]
        ],
    )


def summarize_account(trades: Iterable[TradeRecord], mode: TradeMode) -> AccountStats:
    scoped = select_mode(trades, mode)
    closed = [trade for trade in scoped if trade.is_closed]
    profitable = sum(1 for trade in closed if trade.profit_loss > 0)
    return AccountStats(
        mode=mode,
        total_trades=len(scoped),
        open_trades=sum(1 for trade in scoped if trade.is_open),
        closed_trades=len(closed),
        profitable_trades=profitable,
        total_profit_loss=sum(trade.profit_loss for trade in closed),
        win_rate=_rate(profitable, len(closed)),
    )
