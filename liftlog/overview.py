from __future__ import annotations

from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession

from liftlog.errors import StoreError
from liftlog.models import Exercise, Log, Plan, PlanDay, Week
from liftlog.repositories import ExerciseRepo, LogRepo, PlanDayRepo, PlanRepo, WeekRepo
from liftlog.schemas import DayDraft, ExerciseDraft, PlanDraft, resize_days

LogKey = tuple[int, int, int]  # (week_id, exercise_id, day_number)


@dataclass
class DayView:
    day: PlanDay
    exercises: list[Exercise] = field(default_factory=list)


@dataclass
class PlanOverview:
    """Everything the plan screen shows: days with exercises, weeks newest first, and their logs."""

    plan: Plan
    days: list[DayView]
    weeks: list[Week]
    logs: dict[LogKey, Log]

    @property
    def current_week(self) -> Week | None:
        return self.weeks[0] if self.weeks else None

    def week(self, week_id: int) -> Week | None:
        return next((w for w in self.weeks if w.id == week_id), None)

    def log_for(self, week_id: int, exercise_id: int, day_number: int) -> Log | None:
        return self.logs.get((week_id, exercise_id, day_number))


async def list_plans(db: AsyncSession, *, owner_id: int) -> list[Plan]:
    return await PlanRepo(db).list_for_owner(owner_id)


async def load_plan_overview(db: AsyncSession, *, owner_id: int, plan_id: int) -> PlanOverview:
    plan = await PlanRepo(db).get_owned(plan_id, owner_id)
    if plan is None:
        raise StoreError("Plan not found")

    days = await PlanDayRepo(db).for_plan(plan.id)
    by_day: dict[int, DayView] = {d.id: DayView(day=d) for d in days}
    for ex in await ExerciseRepo(db).for_days(list(by_day)):
        by_day[ex.day_id].exercises.append(ex)

    weeks = await WeekRepo(db).for_plan(plan.id)
    logs = await LogRepo(db).for_weeks([w.id for w in weeks])
    return PlanOverview(
        plan=plan,
        days=[by_day[d.id] for d in days],
        weeks=weeks,
        logs={(lg.week_id, lg.exercise_id, lg.day_number): lg for lg in logs},
    )


def plan_to_draft(overview: PlanOverview) -> PlanDraft:
    """The editable form of a stored plan, ids included so an edit updates rows in place."""
    days = [
        DayDraft(
            id=dv.day.id,
            headline=dv.day.headline,
            exercises=[ExerciseDraft(id=ex.id, name=ex.name, sets=ex.sets, reps=ex.reps) for ex in dv.exercises],
        )
        for dv in overview.days
    ]
    # days beyond days_per_week (kept from earlier edits) are dropped, missing ones padded
    days = resize_days(days, overview.plan.days_per_week)
    # model_construct: padded days are blank until the user fills them in
    return PlanDraft.model_construct(name=overview.plan.name, days_per_week=overview.plan.days_per_week, days=days)
