from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from tradestats.api.deps import get_db
from tradestats.models.enums import TradeMode
from tradestats.schemas.stats import AccountStats
from tradestats.services.metrics import summarize_account
from tradestats.services.repository import load_account_records

router = APIRouter(prefix="/api/stats", tags=["stats"])


@router.get("/account", response_model=AccountStats)
async def account_stats(
    user_id: str = Query(...),
    mode: TradeMode = Query(...),
    db: AsyncSession = Depends(get_db),
) -> AccountStats:
    trades = await load_account_records(db, user_id, mode)
    return summarize_account(trades, mode)
