from __future__ import annotations

import datetime as dt
from typing import Any, Sequence

from sqlalchemy import Select, delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from liftlog.jsonutil import dumps, loads
from liftlog.models import Exercise, Log, Plan, PlanDay, User, Week


class UserRepo:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_or_create(self, telegram_id: int, username: str | None) -> User:
        q: Select[tuple[User]] = select(User).where(User.telegram_id == telegram_id)
        res = await self.db.execute(q)
        u = res.scalar_one_or_none()
        if u:
            if username and u.username != username:
                u.username = username
            return u
        u = User(telegram_id=telegram_id, username=username)
        self.db.add(u)
        await self.db.flush()
        return u

    async def set_dialog(self, user: User, state: str | None, step: int | None, data: Any | None) -> None:
        user.dialog_state = state
        user.dialog_step = step
        user.dialog_data_json = dumps(data) if data is not None else None

    async def get_dialog_data(self, user: User) -> Any:
        return loads(user.dialog_data_json)


class PlanRepo:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_owned(self, plan_id: int, owner_id: int) -> Plan | None:
        q: Select[tuple[Plan]] = select(Plan).where(Plan.id == plan_id).where(Plan.user_id == owner_id)
        res = await self.db.execute(q)
        return res.scalar_one_or_none()

    async def list_for_owner(self, owner_id: int) -> list[Plan]:
        q = select(Plan).where(Plan.user_id == owner_id).order_by(Plan.created_at.desc(), Plan.id.desc())
        res = await self.db.execute(q)
        return list(res.scalars().all())

    async def add(self, *, owner_id: int, name: str, days_per_week: int) -> Plan:
        p = Plan(user_id=owner_id, name=name, days_per_week=days_per_week)
        self.db.add(p)
        await self.db.flush()
        return p


class PlanDayRepo:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_in_plan(self, day_id: int, plan_id: int) -> PlanDay | None:
        q: Select[tuple[PlanDay]] = select(PlanDay).where(PlanDay.id == day_id).where(PlanDay.plan_id == plan_id)
        res = await self.db.execute(q)
        return res.scalar_one_or_none()

    async def for_plan(self, plan_id: int) -> list[PlanDay]:
        q = select(PlanDay).where(PlanDay.plan_id == plan_id).order_by(PlanDay.day_order.asc(), PlanDay.id.asc())
        res = await self.db.execute(q)
        return list(res.scalars().all())

    async def add(self, *, plan_id: int, day_order: int, headline: str) -> PlanDay:
        d = PlanDay(plan_id=plan_id, day_order=day_order, headline=headline)
        self.db.add(d)
        await self.db.flush()
        return d

    async def delete_except(self, plan_id: int, keep_ids: set[int]) -> list[int]:
        q = select(PlanDay.id).where(PlanDay.plan_id == plan_id)
        if keep_ids:
            q = q.where(PlanDay.id.not_in(keep_ids))
        res = await self.db.execute(q)
        doomed = list(res.scalars().all())
        if doomed:
            await self.db.execute(delete(PlanDay).where(PlanDay.id.in_(doomed)))
        return doomed


class ExerciseRepo:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_in_plan(self, exercise_id: int, plan_id: int) -> Exercise | None:
        q: Select[tuple[Exercise]] = (
            select(Exercise)
            .join(PlanDay, PlanDay.id == Exercise.day_id)
            .where(Exercise.id == exercise_id)
            .where(PlanDay.plan_id == plan_id)
        )
        res = await self.db.execute(q)
        return res.scalar_one_or_none()

    async def for_days(self, day_ids: Sequence[int]) -> list[Exercise]:
        if not day_ids:
            return []
        q = (
            select(Exercise)
            .where(Exercise.day_id.in_(day_ids))
            .order_by(Exercise.created_at.asc(), Exercise.id.asc())
        )
        res = await self.db.execute(q)
        return list(res.scalars().all())

    async def add(self, *, day_id: int, name: str, sets: int, reps: str) -> Exercise:
        e = Exercise(day_id=day_id, name=name, sets=sets, reps=reps)
        self.db.add(e)
        await self.db.flush()
        return e

    async def delete_except(self, plan_id: int, keep_ids: set[int]) -> list[int]:
        """Delete the plan's exercises not in ``keep_ids`` along with their logs."""
        q = select(Exercise.id).join(PlanDay, PlanDay.id == Exercise.day_id).where(PlanDay.plan_id == plan_id)
        if keep_ids:
            q = q.where(Exercise.id.not_in(keep_ids))
        res = await self.db.execute(q)
        doomed = list(res.scalars().all())
        if doomed:
            await self.db.execute(delete(Log).where(Log.exercise_id.in_(doomed)))
            await self.db.execute(delete(Exercise).where(Exercise.id.in_(doomed)))
        return doomed


class WeekRepo:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_owned(self, week_id: int, owner_id: int) -> Week | None:
        q: Select[tuple[Week]] = (
            select(Week)
            .join(Plan, Plan.id == Week.plan_id)
            .where(Week.id == week_id)
            .where(Plan.user_id == owner_id)
            .execution_options(populate_existing=True)
        )
        res = await self.db.execute(q)
        return res.scalar_one_or_none()

    async def for_plan(self, plan_id: int) -> list[Week]:
        q = select(Week).where(Week.plan_id == plan_id).order_by(Week.start_date.desc(), Week.id.desc())
        res = await self.db.execute(q)
        return list(res.scalars().all())

    async def add(self, *, plan_id: int, start_date: dt.datetime) -> Week:
        w = Week(plan_id=plan_id, start_date=start_date, is_locked=False)
        self.db.add(w)
        await self.db.flush()
        return w


class LogRepo:
    def __init__(self, db: AsyncSession):
        self.db = db

    # logs are written with core upserts, so always refresh what the identity map holds

    async def get(self, week_id: int, exercise_id: int, day_number: int) -> Log | None:
        q: Select[tuple[Log]] = (
            select(Log)
            .where(Log.week_id == week_id)
            .where(Log.exercise_id == exercise_id)
            .where(Log.day_number == day_number)
            .execution_options(populate_existing=True)
        )
        res = await self.db.execute(q)
        return res.scalar_one_or_none()

    async def for_weeks(self, week_ids: Sequence[int]) -> list[Log]:
        if not week_ids:
            return []
        q = select(Log).where(Log.week_id.in_(week_ids)).execution_options(populate_existing=True)
        res = await self.db.execute(q)
        return list(res.scalars().all())

    async def for_week(self, week_id: int) -> list[Log]:
        return await self.for_weeks([week_id])
