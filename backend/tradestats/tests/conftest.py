from __future__ import annotations

import itertools
from collections.abc import AsyncGenerator, Callable
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from tradestats.db.base import Base
from tradestats.models.enums import TradeStatus, TradeType
from tradestats.services.records import TradeRecord

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"

BASE_DATE = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture()
async def async_session() -> AsyncGenerator[AsyncSession, None]:
    engine = create_async_engine(TEST_DB_URL, future=True, poolclass=StaticPool)
    async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async with async_session() as session:
        yield session
    await engine.dispose()


@pytest.fixture()
def make_trade() -> Callable[..., TradeRecord]:
    """Build trade records one day apart unless a date is given."""
    counter = itertools.count()

    def _make(
        profit_loss: float | None = None,
        *,
        market: str | None = "EUR/USD",
        trade_type: TradeType | None = TradeType.BUY,
        status: TradeStatus | None = None,
        trade_date: datetime | None = None,
        strategy_id: str | None = None,
        is_demo: bool = False,
    ) -> TradeRecord:
        index = next(counter)
        if status is None:
            status = TradeStatus.OPEN if profit_loss is None else TradeStatus.CLOSED
        return TradeRecord(
            id=f"t{index}",
            market=market,
            trade_type=trade_type,
            trade_date=trade_date or BASE_DATE + timedelta(days=index),
            status=status,
            profit_loss=profit_loss,
            strategy_id=strategy_id,
            is_demo=is_demo,
        )

    return _make
