from tradestats.models.enums import TradeMode, TradeStatus, TradeType
from tradestats.models.strategy import Strategy
from tradestats.models.trade import Trade

__all__ = [
    "Strategy",
    "Trade",
    "TradeMode",
    "TradeStatus",
    "TradeType",
]
