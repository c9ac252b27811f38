from __future__ import annotations

from collections.abc import AsyncGenerator
from datetime import datetime, timezone

import pytest
from httpx import ASGITransport, AsyncClient
from pydantic import ValidationError

from tradestats.api.deps import get_comparison_workers, get_db
from tradestats.core.config import Settings
from tradestats.main import app, create_app
from tradestats.models import Strategy, Trade, TradeStatus, TradeType


@pytest.fixture()
async def client(async_session) -> AsyncGenerator[AsyncClient, None]:
    async def _override_db():
        yield async_session

    app.dependency_overrides[get_db] = _override_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture()
async def seeded(async_session) -> None:
    async_session.add_all(
        [
            Strategy(id="s1", user_id="u1", name="Breakout"),
            Strategy(id="s2", user_id="u1", name="Fade"),
        ]
    )
    rows = [
        ("s1", "EUR/USD", TradeType.BUY, TradeStatus.CLOSED, 20, 1, False),
        ("s1", "EUR/USD", TradeType.SELL, TradeStatus.CLOSED, -10, 2, False),
        ("s1", "GBP/USD", TradeType.BUY, TradeStatus.OPEN, None, 3, False),
        ("s1", "XAU/USD", TradeType.BUY, TradeStatus.CLOSED, 40, 4, True),
        ("s2", "US30", TradeType.SELL, TradeStatus.CLOSED, 15, 5, False),
        ("s2", "US30", TradeType.SELL, TradeStatus.CLOSED, -20, 6, False),
    ]
    async_session.add_all(
        [
            Trade(
                user_id="u1",
                strategy_id=strategy_id,
                market=market,
                trade_type=trade_type,
                status=status,
                profit_loss=profit_loss,
                trade_date=datetime(2024, 4, day, tzinfo=timezone.utc),
                is_demo=is_demo,
            )
            for strategy_id, market, trade_type, status, profit_loss, day, is_demo in rows
        ]
    )
    await async_session.commit()


@pytest.mark.asyncio
async def test_strategy_analytics(client, seeded) -> None:
    resp = await client.get("/api/strategies/s1/analytics", params={"user_id": "u1", "mode": "live"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["strategy"]["name"] == "Breakout"
    assert body["mode"] == "live"
    overview = body["analytics"]["overview"]
    assert overview["total_trades"] == 2
    assert overview["open_trades"] == 1
    assert overview["success_rate"] == 50
    assert overview["net_profit_loss"] == 10
    assert overview["profit_factor"] == 2.0
    assert set(body["analytics"]["market_performance"]) == {"EUR/USD", "GBP/USD"}
    assert list(body["analytics"]["monthly_performance"]) == ["2024-04"]


@pytest.mark.asyncio
async def test_strategy_analytics_requires_mode(client, seeded) -> None:
    resp = await client.get("/api/strategies/s1/analytics", params={"user_id": "u1"})

    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_strategy_analytics_unknown_strategy(client, seeded) -> None:
    resp = await client.get("/api/strategies/s1/analytics", params={"user_id": "intruder", "mode": "live"})

    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_compare(client, seeded) -> None:
    resp = await client.post(
        "/api/strategies/compare",
        json={"strategy_ids": ["s1", "s2"], "user_id": "u1", "mode": "live"},
    )

    assert resp.status_code == 200
    body = resp.json()
    assert [entry["strategy"]["id"] for entry in body["strategies"]] == ["s1", "s2"]
    assert body["summary"]["best_performer"]["id"] == "s1"
    assert body["summary"]["most_active"]["id"] == "s1"
    us30 = body["market_comparison"]["US30"]
    assert [cell["strategy_id"] for cell in us30] == ["s1", "s2"]
    assert us30[0]["performance"] == {
        "total_trades": 0,
        "profitable_trades": 0,
        "total_profit_loss": 0.0,
        "success_rate": 0.0,
    }
    assert "XAU/USD" not in body["market_comparison"]


@pytest.mark.asyncio
async def test_compare_needs_two_distinct_strategies(client, seeded) -> None:
    resp = await client.post(
        "/api/strategies/compare",
        json={"strategy_ids": ["s1", "s1"], "user_id": "u1", "mode": "live"},
    )

    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_compare_unknown_strategy(client, seeded) -> None:
    resp = await client.post(
        "/api/strategies/compare",
        json={"strategy_ids": ["s1", "nope"], "user_id": "u1", "mode": "live"},
    )

    assert resp.status_code == 404
    assert resp.json()["detail"]["missing"] == ["nope"]


@pytest.mark.asyncio
async def test_account_stats(client, seeded) -> None:
    resp = await client.get("/api/stats/account", params={"user_id": "u1", "mode": "demo"})

    assert resp.status_code == 200
    assert resp.json() == {
        "mode": "demo",
        "total_trades": 1,
        "open_trades": 0,
        "closed_trades": 1,
        "profitable_trades": 1,
        "total_profit_loss": 40.0,
        "win_rate": 100.0,
    }


@pytest.mark.asyncio
async def test_undefeated_strategy_reports_infinite_profit_factor(client, async_session, seeded) -> None:
    async_session.add(Strategy(id="s3", user_id="u1", name="Undefeated"))
    async_session.add_all(
        [
            Trade(
                user_id="u1",
                strategy_id="s3",
                market="EUR/USD",
                trade_type=TradeType.BUY,
                status=TradeStatus.CLOSED,
                profit_loss=profit_loss,
                trade_date=datetime(2024, 5, day, tzinfo=timezone.utc),
            )
            for day, profit_loss in ((1, 25), (2, 15))
        ]
    )
    await async_session.commit()

    single = await client.get("/api/strategies/s3/analytics", params={"user_id": "u1", "mode": "live"})
    compared = await client.post(
        "/api/strategies/compare",
        json={"strategy_ids": ["s1", "s3"], "user_id": "u1", "mode": "live"},
    )

    assert single.status_code == 200
    assert single.json()["analytics"]["overview"]["profit_factor"] == "Infinity"
    assert compared.status_code == 200
    body = compared.json()
    assert body["strategies"][1]["analytics"]["overview"]["profit_factor"] == "Infinity"
    assert body["summary"]["best_profit_factor"]["id"] == "s3"


@pytest.mark.asyncio
async def test_compare_with_worker_pool_matches_sequential(client, seeded) -> None:
    payload = {"strategy_ids": ["s1", "s2"], "user_id": "u1", "mode": "live"}
    sequential = await client.post("/api/strategies/compare", json=payload)

    app.dependency_overrides[get_comparison_workers] = lambda: 4
    pooled = await client.post("/api/strategies/compare", json=payload)

    assert pooled.status_code == 200
    assert pooled.json() == sequential.json()


def test_app_takes_title_from_settings() -> None:
    desk = create_app(Settings(app_name="Desk Stats"))
    paths = {route.path for route in desk.routes}

    assert desk.title == "Desk Stats API"
    assert {"/api/strategies/compare", "/api/stats/account"} <= paths


def test_comparison_workers_must_be_positive() -> None:
    with pytest.raises(ValidationError):
        Settings(comparison_workers=0)
