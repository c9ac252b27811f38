from __future__ import annotations

from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tradestats.models import Strategy, Trade
from tradestats.models.enums import TradeMode
from tradestats.services.errors import NotFoundError
from tradestats.services.records import TradeRecord


async def get_strategy(session: AsyncSession, strategy_id: str, user_id: str) -> Strategy:
    strategies = await get_strategies(session, [strategy_id], user_id)
    return strategies[0]


async def get_strategies(session: AsyncSession, strategy_ids: Sequence[str], user_id: str) -> list[Strategy]:
    """
    Load the requested strategies owned by ``user_id`` in the order they were asked for.
    Raises NotFoundError naming every id that is missing or belongs to another user.
    """
    if not strategy_ids:
        return []
    result = await session.execute(
        select(Strategy).where(Strategy.id.in_(strategy_ids), Strategy.user_id == user_id)
    )
    found = {strategy.id: strategy for strategy in result.scalars().all()}
    missing = [strategy_id for strategy_id in strategy_ids if strategy_id not in found]
    if missing:
        raise NotFoundError(missing)
    return [found[strategy_id] for strategy_id in strategy_ids]


async def load_trade_records(
    session: AsyncSession,
    strategy_ids: Sequence[str],
    user_id: str,
    mode: TradeMode,
) -> dict[str, list[TradeRecord]]:
    records: dict[str, list[TradeRecord]] = {strategy_id: [] for strategy_id in strategy_ids}
    if not records:
        return records
    stmt = (
        select(Trade)
        .where(
            Trade.strategy_id.in_(list(records)),
            Trade.user_id == user_id,
            Trade.is_demo == mode.is_demo,
        )
        .order_by(Trade.trade_date.asc())
    )
    result = await session.execute(stmt)
    for trade in result.scalars().all():
        records[trade.strategy_id].append(TradeRecord.from_model(trade))
    return records


async def load_account_records(session: AsyncSession, user_id: str, mode: TradeMode) -> list[TradeRecord]:
    stmt = (
        select(Trade)
        .where(Trade.user_id == user_id, Trade.is_demo == mode.is_demo)
        .order_by(Trade.trade_date.asc())
    )
    result = await session.execute(stmt)
    return [TradeRecord.from_model(trade) for trade in result.scalars().all()]
