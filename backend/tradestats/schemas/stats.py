from __future__ import annotations

from pydantic import BaseModel

from tradestats.models.enums import TradeMode


class AccountStats(BaseModel):
    mode: TradeMode
    total_trades: int
    open_trades: int
    closed_trades: int
    profitable_trades: int
    total_profit_loss: float
    win_rate: float
