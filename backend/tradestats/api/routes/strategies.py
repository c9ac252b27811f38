from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from tradestats.api.deps import get_comparison_workers, get_db
from tradestats.models.enums import TradeMode
from tradestats.schemas.analytics import CompareRequest, ComparisonResult, StrategyAnalytics, StrategyRead
from tradestats.services.comparison import MIN_STRATEGIES, compare_strategies
from tradestats.services.errors import InsufficientInputError, NotFoundError
from tradestats.services.metrics import aggregate_trades
from tradestats.services.repository import get_strategies, get_strategy, load_trade_records

router = APIRouter(prefix="/api/strategies", tags=["strategies"])

logger = logging.getLogger(__name__)


@router.get("/{strategy_id}/analytics", response_model=StrategyAnalytics)
async def strategy_analytics(
    strategy_id: str,
    user_id: str = Query(...),
    mode: TradeMode = Query(...),
    db: AsyncSession = Depends(get_db),
) -> StrategyAnalytics:
    try:
        strategy = await get_strategy(db, strategy_id, user_id)
        trades = await load_trade_records(db, [strategy_id], user_id, mode)
    except NotFoundError as exc:
        logger.warning("Strategy %s not found for user %s", strategy_id, user_id)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Strategy not found") from exc
    except Exception as exc:  # noqa: BLE001
        logger.exception("Failed to load trades for strategy %s", strategy_id)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to fetch trade data") from exc

    return StrategyAnalytics(
        strategy=StrategyRead.model_validate(strategy),
        mode=mode,
        analytics=aggregate_trades(trades[strategy_id]),
    )


@router.post("/compare", response_model=ComparisonResult)
async def compare(
    payload: CompareRequest,
    db: AsyncSession = Depends(get_db),
    workers: int = Depends(get_comparison_workers),
) -> ComparisonResult:
    strategy_ids = list(dict.fromkeys(payload.strategy_ids))
    try:
        if len(strategy_ids) < MIN_STRATEGIES:
            raise InsufficientInputError(len(strategy_ids))
        strategies = await get_strategies(db, strategy_ids, payload.user_id)
        trades = await load_trade_records(db, strategy_ids, payload.user_id, payload.mode)
        return compare_strategies(
            [StrategyRead.model_validate(strategy) for strategy in strategies],
            trades,
            mode=payload.mode,
            max_workers=workers,
        )
    except InsufficientInputError as exc:
        logger.warning("Comparison rejected: %s", exc)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except NotFoundError as exc:
        logger.warning("Comparison for user %s failed: %s", payload.user_id, exc)
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"message": "Some strategies not found or not accessible", "missing": exc.strategy_ids},
        ) from exc
    except Exception as exc:  # noqa: BLE001
        logger.exception("Unexpected error comparing strategies %s", strategy_ids)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error") from exc
