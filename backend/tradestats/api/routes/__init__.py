from fastapi import APIRouter

from tradestats.api.routes import stats, strategies

api_router = APIRouter()
api_router.include_router(strategies.router)
api_router.include_router(stats.router)
