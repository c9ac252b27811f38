from __future__ import annotations

from enum import Enum as PyEnum


class TradeType(str, PyEnum):
    BUY = "buy"
    SELL = "sell"


class TradeStatus(str, PyEnum):
    OPEN = "open"
    CLOSED = "closed"


class TradeMode(str, PyEnum):
    DEMO = "demo"
    LIVE = "live"

    @property
    def is_demo(self) -> bool:
        return self is TradeMode.DEMO
