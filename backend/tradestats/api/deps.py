from __future__ import annotations

from collections.abc import AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tradestats.core.config import Settings, get_settings
from tradestats.db.session import get_session


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async for session in get_session():
        yield session


def get_comparison_workers(settings: Settings = Depends(get_settings)) -> int:
    return settings.comparison_workers
