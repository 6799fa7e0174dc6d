from __future__ import annotations

from typing import Any

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from liftlog import actions
from liftlog.db import make_sessionmaker
from liftlog.init_db import init_db
from liftlog.repositories import UserRepo


@pytest_asyncio.fixture
async def sessions():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await init_db(engine)
    yield make_sessionmaker(engine)
    await engine.dispose()


async def _make_user(sessions, telegram_id: int, username: str) -> int:
    async with sessions() as db:
        user = await UserRepo(db).get_or_create(telegram_id, username)
        await db.commit()
        return user.id


@pytest_asyncio.fixture
async def owner_id(sessions) -> int:
    return await _make_user(sessions, 1001, "lifter")


@pytest_asyncio.fixture
async def stranger_id(sessions) -> int:
    return await _make_user(sessions, 2002, "stranger")


def ppl_draft(exercises_per_day: int = 1) -> dict[str, Any]:
    names = ["Bench Press", "Dips", "Face Pull"]
    return {
        "name": "Push Pull Legs",
        "days_per_week": 3,
        "days": [
            {
                "headline": headline,
                "exercises": [{"name": names[i], "sets": 5, "reps": "5"} for i in range(exercises_per_day)],
            }
            for headline in ("Push", "Pull", "Legs")
        ],
    }


@pytest.fixture
def make_plan(sessions, owner_id):
    async def _make(draft: dict[str, Any] | None = None):
        res = await actions.save_plan(owner_id, draft or ppl_draft(), sessions=sessions)
        assert res.ok, res.error
        ov = await actions.get_plan_overview(owner_id, res.data.id, sessions=sessions)
        assert ov.ok, ov.error
        return ov.data

    return _make


@pytest.fixture
def ppl():
    return ppl_draft
