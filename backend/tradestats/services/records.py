from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable

from tradestats.models import Trade
from tradestats.models.enums import TradeMode, TradeStatus, TradeType


@dataclass(frozen=True)
class TradeRecord:
    id: str
    market: str | None
    trade_type: TradeType | None
    trade_date: datetime | None
    status: TradeStatus
    profit_loss: float | None = None
    strategy_id: str | None = None
    is_demo: bool = False

    @property
    def is_closed(self) -> bool:
        return self.status == TradeStatus.CLOSED and self.profit_loss is not None

    @property
    def is_open(self) -> bool:
        return self.status == TradeStatus.OPEN

    @property
    def trade_date_utc(self) -> datetime | None:
        if self.trade_date is None:
            return None
        if self.trade_date.tzinfo is None:
            return self.trade_date.replace(tzinfo=timezone.utc)
        return self.trade_date.astimezone(timezone.utc)

    @property
    def month(self) -> str | None:
        """``YYYY-MM`` of the trade date in UTC."""
        trade_date = self.trade_date_utc
        if trade_date is None:
            return None
        return trade_date.isoformat()[:7]

    @classmethod
    def from_model(cls, trade: Trade) -> TradeRecord:
        return cls(
            id=str(trade.id),
            market=trade.market or None,
            trade_type=TradeType(trade.trade_type) if trade.trade_type else None,
            trade_date=trade.trade_date,
            status=TradeStatus(trade.status),
            profit_loss=float(trade.profit_loss) if trade.profit_loss is not None else None,
            strategy_id=trade.strategy_id,
            is_demo=bool(trade.is_demo),
        )


def select_mode(trades: Iterable[TradeRecord], mode: TradeMode) -> list[TradeRecord]:
    return [trade for trade in trades if trade.is_demo == mode.is_demo]


def chronological(trades: Iterable[TradeRecord]) -> list[TradeRecord]:
    """Sort by trade date ascending; undated trades first, ties keep input order."""
    epoch = datetime.min.replace(tzinfo=timezone.utc)
    return sorted(
        trades,
        key=lambda trade: (trade.trade_date_utc is not None, trade.trade_date_utc or epoch),
    )
