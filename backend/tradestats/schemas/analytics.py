from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from tradestats.models.enums import TradeMode, TradeType


class AnalyticsModel(BaseModel):
    # profit_factor may be math.inf; JSON carries it as "Infinity".
    model_config = ConfigDict(ser_json_inf_nan="strings")


class StrategyRead(AnalyticsModel):
    model_config = ConfigDict(from_attributes=True)
    id: str
    name: str
    description: str | None = None
    category: str | None = None


class PerformanceBreakdown(AnalyticsModel):
    """Counts for one market, trade type or month. Defaults form the zero placeholder."""

    total_trades: int = 0
    profitable_trades: int = 0
    total_profit_loss: float = 0.0
    success_rate: float = 0.0


class MarketRanking(PerformanceBreakdown):
    market: str


class TradeTypePerformance(AnalyticsModel):
    buy: PerformanceBreakdown = Field(default_factory=PerformanceBreakdown)
    sell: PerformanceBreakdown = Field(default_factory=PerformanceBreakdown)


class RecentTrade(AnalyticsModel):
    id: str
    market: str | None
    trade_type: TradeType | None
    profit_loss: float
    trade_date: datetime | None


class StrategyOverview(AnalyticsModel):
    total_trades: int = 0  # closed trades only
    open_trades: int = 0
    profitable_trades: int = 0
    losing_trades: int = 0
    break_even_trades: int = 0
    success_rate: float = 0.0
    net_profit_loss: float = 0.0
    total_profit: float = 0.0
    total_loss: float = 0.0
    average_win: float = 0.0
    average_loss: float = 0.0
    profit_factor: float = 0.0
    recent_success_rate: float = 0.0
    current_win_streak: int = 0
    current_loss_streak: int = 0
    max_win_streak: int = 0
    max_loss_streak: int = 0


class TradeAnalytics(AnalyticsModel):
    overview: StrategyOverview
    market_performance: dict[str, PerformanceBreakdown]
    trade_type_performance: TradeTypePerformance
    monthly_performance: dict[str, PerformanceBreakdown]
    best_markets: list[MarketRanking]
    worst_markets: list[MarketRanking]
    recent_trades: list[RecentTrade]


class StrategyAnalytics(AnalyticsModel):
    strategy: StrategyRead
    mode: TradeMode
    analytics: TradeAnalytics


class StrategyComparisonEntry(AnalyticsModel):
    strategy: StrategyRead
    analytics: TradeAnalytics


class ComparisonCell(AnalyticsModel):
    strategy_id: str
    strategy_name: str
    performance: PerformanceBreakdown


class ComparisonSummary(AnalyticsModel):
    best_performer: StrategyRead
    most_consistent: StrategyRead
    most_active: StrategyRead
    best_profit_factor: StrategyRead


class ComparisonResult(AnalyticsModel):
    mode: TradeMode
    strategies: list[StrategyComparisonEntry]
    summary: ComparisonSummary
    market_comparison: dict[str, list[ComparisonCell]]
    time_comparison: dict[str, list[ComparisonCell]]


class CompareRequest(BaseModel):
    strategy_ids: list[str]
    user_id: str
    mode: TradeMode
