"""Entry points for the presentation layer.

Each action is one unit of work: it opens a session, runs the operation in a
single transaction and reports either the payload or an error message.
Errors never escape as exceptions; the caller decides how to show them.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, TypeVar

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from liftlog import overview, plan_editor, tracker
from liftlog.db import SessionLocal
from liftlog.errors import LiftlogError
from liftlog.models import Exercise, Plan, Week
from liftlog.schemas import LogEntry, PlanDraft, validate_input

T = TypeVar("T")

Sessions = async_sessionmaker[AsyncSession]


@dataclass
class ActionResult(Generic[T]):
    data: T | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _store_message(e: SQLAlchemyError) -> str:
    orig = getattr(e, "orig", None)
    return str(orig) if orig is not None else str(e)


async def _run(name: str, sessions: Sessions, op: Callable[[AsyncSession], Awaitable[T]]) -> ActionResult[T]:
    async with sessions() as db:
        try:
            async with db.begin():
                data = await op(db)
        except LiftlogError as e:
            logger.warning(f"{name} rejected: {e.message}")
            return ActionResult(error=e.message)
        except SQLAlchemyError as e:
            logger.exception(f"{name} failed in the store")
            return ActionResult(error=_store_message(e))
    return ActionResult(data=data)


async def create_week(
    owner_id: int,
    plan_id: int,
    start_date: dt.datetime | dt.date | None = None,
    *,
    sessions: Sessions = SessionLocal,
) -> ActionResult[Week]:
    return await _run(
        "create_week",
        sessions,
        lambda db: tracker.start_week(db, owner_id=owner_id, plan_id=plan_id, start_date=start_date),
    )


async def lock_week(owner_id: int, week_id: int, *, sessions: Sessions = SessionLocal) -> ActionResult[Week]:
    return await _run("lock_week", sessions, lambda db: tracker.lock_week(db, owner_id=owner_id, week_id=week_id))


async def save_log(
    owner_id: int,
    week_id: int,
    exercise_id: int,
    day_number: int,
    entry: LogEntry | dict[str, Any],
    *,
    sessions: Sessions = SessionLocal,
) -> ActionResult[bool]:
    async def op(db: AsyncSession) -> bool:
        record = entry if isinstance(entry, LogEntry) else validate_input(LogEntry, entry)
        await tracker.save_log(
            db,
            owner_id=owner_id,
            week_id=week_id,
            exercise_id=exercise_id,
            day_number=day_number,
            entry=record,
        )
        return True

    return await _run("save_log", sessions, op)


async def add_ad_hoc_exercise(
    owner_id: int,
    plan_id: int,
    day_id: int,
    name: str,
    sets: int | None = None,
    reps: str | None = None,
    *,
    sessions: Sessions = SessionLocal,
) -> ActionResult[Exercise]:
    return await _run(
        "add_ad_hoc_exercise",
        sessions,
        lambda db: tracker.add_ad_hoc_exercise(
            db, owner_id=owner_id, plan_id=plan_id, day_id=day_id, name=name, sets=sets, reps=reps
        ),
    )


async def save_plan(
    owner_id: int,
    draft: PlanDraft | dict[str, Any],
    plan_id: int | None = None,
    *,
    delete_removed: bool | None = None,
    sessions: Sessions = SessionLocal,
) -> ActionResult[Plan]:
    async def op(db: AsyncSession) -> Plan:
        # re-run the submit checks: drafts built with model_construct skip them
        checked = validate_input(PlanDraft, draft.model_dump() if isinstance(draft, PlanDraft) else draft)
        return await plan_editor.save_plan(
            db, owner_id=owner_id, draft=checked, plan_id=plan_id, delete_removed=delete_removed
        )

    return await _run("save_plan", sessions, op)


async def list_plans(owner_id: int, *, sessions: Sessions = SessionLocal) -> ActionResult[list[Plan]]:
    return await _run("list_plans", sessions, lambda db: overview.list_plans(db, owner_id=owner_id))


async def get_plan_overview(
    owner_id: int, plan_id: int, *, sessions: Sessions = SessionLocal
) -> ActionResult[overview.PlanOverview]:
    return await _run(
        "get_plan_overview",
        sessions,
        lambda db: overview.load_plan_overview(db, owner_id=owner_id, plan_id=plan_id),
    )
