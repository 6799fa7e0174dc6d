"""Apply an edited plan (ordered days, each with ordered exercises) to the stored rows.

Row identity is preserved: a day or exercise that carries an id is updated in
place, because logs point at exercise ids. ``day_order`` is always rewritten
from the submitted position. Nothing here commits; the caller owns the
transaction, so a failure part way leaves no partial plan behind.
"""

from __future__ import annotations

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from liftlog.config import settings
from liftlog.errors import StoreError
from liftlog.models import Exercise, Plan, PlanDay
from liftlog.repositories import ExerciseRepo, PlanDayRepo, PlanRepo
from liftlog.schemas import DayDraft, ExerciseDraft, PlanDraft


async def _upsert_day(db: AsyncSession, plan: Plan, draft: DayDraft, day_order: int) -> PlanDay:
    days = PlanDayRepo(db)
    if draft.id is None:
        return await days.add(plan_id=plan.id, day_order=day_order, headline=draft.headline)

    day = await days.get_in_plan(draft.id, plan.id)
    if day is None:
        raise StoreError(f"Day {draft.id} does not belong to this plan")
    day.day_order = day_order
    day.headline = draft.headline
    return day


async def _upsert_exercise(db: AsyncSession, plan: Plan, day: PlanDay, draft: ExerciseDraft) -> Exercise:
    exercises = ExerciseRepo(db)
    if draft.id is None:
        return await exercises.add(day_id=day.id, name=draft.name, sets=draft.sets, reps=draft.reps)

    ex = await exercises.get_in_plan(draft.id, plan.id)
    if ex is None:
        raise StoreError(f"Exercise {draft.id} does not belong to this plan")
    # may move between days of the same plan
    ex.day_id = day.id
    ex.name = draft.name
    ex.sets = draft.sets
    ex.reps = draft.reps
    return ex


async def save_plan(
    db: AsyncSession,
    *,
    owner_id: int,
    draft: PlanDraft,
    plan_id: int | None = None,
    delete_removed: bool | None = None,
) -> Plan:
    """Create a plan (``plan_id`` is None) or reconcile an existing one with ``draft``.

    Days and exercises left out of ``draft`` stay in the database unless
    ``delete_removed`` is set (defaults to ``settings.delete_removed_on_edit``);
    deleting an exercise also deletes its logs. Kept days that were left out
    are renumbered after the submitted ones, so ``plan_to_draft`` drops them.
    """
    plans = PlanRepo(db)
    if plan_id is None:
        plan = await plans.add(owner_id=owner_id, name=draft.name, days_per_week=draft.days_per_week)
        logger.info(f"Created plan {plan.id} ({plan.name}) for user {owner_id}")
    else:
        found = await plans.get_owned(plan_id, owner_id)
        if found is None:
            raise StoreError("Plan not found")
        plan = found
        plan.name = draft.name
        plan.days_per_week = draft.days_per_week

    kept_days: set[int] = set()
    kept_exercises: set[int] = set()
    for i, day_draft in enumerate(draft.days):
        day = await _upsert_day(db, plan, day_draft, day_order=i + 1)
        kept_days.add(day.id)
        for ex_draft in day_draft.exercises:
            ex = await _upsert_exercise(db, plan, day, ex_draft)
            kept_exercises.add(ex.id)
    await db.flush()

    if delete_removed is None:
        delete_removed = settings.delete_removed_on_edit
    if plan_id is not None and delete_removed:
        gone_ex = await ExerciseRepo(db).delete_except(plan.id, kept_exercises)
        gone_days = await PlanDayRepo(db).delete_except(plan.id, kept_days)
        if gone_ex or gone_days:
            logger.info(f"Plan {plan.id}: deleted days {gone_days} and exercises {gone_ex}")
    elif plan_id is not None:
        # kept days that were left out sort after the submitted ones
        orphans = [d for d in await PlanDayRepo(db).for_plan(plan.id) if d.id not in kept_days]
        for order, day in enumerate(orphans, start=len(draft.days) + 1):
            day.day_order = order
        if orphans:
            await db.flush()

    logger.info(f"Saved plan {plan.id}: {len(kept_days)} days, {len(kept_exercises)} exercises")
    return plan
