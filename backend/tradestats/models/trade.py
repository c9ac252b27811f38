from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tradestats.db.base import Base
from tradestats.models.enums import TradeStatus, TradeType
from tradestats.models.strategy import Strategy


class Trade(Base):
    __tablename__ = "trades"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id: Mapped[str] = mapped_column(String(36), index=True)
    strategy_id: Mapped[str | None] = mapped_column(ForeignKey("strategies.id", ondelete="SET NULL"), nullable=True)
    trade_date: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    market: Mapped[str] = mapped_column(String(50))
    trade_type: Mapped[TradeType] = mapped_column(Enum(TradeType, name="trade_type"))
    status: Mapped[TradeStatus] = mapped_column(Enum(TradeStatus, name="trade_status"), default=TradeStatus.OPEN)
    profit_loss: Mapped[float | None] = mapped_column(Numeric(15, 2), nullable=True)  # None until closed
    is_demo: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)

    strategy: Mapped[Strategy | None] = relationship(back_populates="trades")
