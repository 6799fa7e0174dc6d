"""Weekly tracking: starting and locking weeks, logging performance within them.

A week is either active or locked. Locking is one-way, and once a week is
locked no log row under it may be created or changed. Logs are keyed by
(week_id, exercise_id, day_number) and every save replaces the full row.
"""

from __future__ import annotations

import datetime as dt
from typing import Any, Callable

from loguru import logger
from sqlalchemy import Integer, String, Text, literal, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from liftlog.config import settings
from liftlog.errors import LockedWeekError, StoreError, ValidationError
from liftlog.models import Exercise, Log, Plan, PlanDay, Week, utcnow_naive
from liftlog.repositories import ExerciseRepo, PlanDayRepo, PlanRepo, WeekRepo
from liftlog.schemas import LogEntry

_LOG_KEY = ("week_id", "exercise_id", "day_number")
_LOG_FIELDS = ("weight_lifted", "sets", "reps", "notes", "difficulty")


def _as_naive_utc(value: dt.datetime | dt.date) -> dt.datetime:
    if not isinstance(value, dt.datetime):
        return dt.datetime.combine(value, dt.time())
    if value.tzinfo is not None:
        return value.astimezone(dt.timezone.utc).replace(tzinfo=None)
    return value


def _insert_for(db: AsyncSession) -> Callable[..., Any]:
    dialect = db.get_bind().dialect.name
    if dialect == "sqlite":
        return sqlite.insert
    if dialect == "postgresql":
        return postgresql.insert
    raise StoreError(f"Log upserts are not supported on {dialect}")


async def start_week(
    db: AsyncSession,
    *,
    owner_id: int,
    plan_id: int,
    start_date: dt.datetime | dt.date | None = None,
) -> Week:
    """Open a new tracking week. Overlapping or identical start dates are allowed (backfill)."""
    plan = await PlanRepo(db).get_owned(plan_id, owner_id)
    if plan is None:
        raise StoreError("Plan not found")

    start = _as_naive_utc(start_date) if start_date is not None else utcnow_naive()
    week = await WeekRepo(db).add(plan_id=plan.id, start_date=start)
    logger.info(f"Started week {week.id} for plan {plan.id} at {start.isoformat()}")
    return week


async def lock_week(db: AsyncSession, *, owner_id: int, week_id: int) -> Week:
    """Lock a week for good. Locking an already locked week succeeds without change."""
    week = await WeekRepo(db).get_owned(week_id, owner_id)
    if week is None:
        raise StoreError("Week not found")
    if not week.is_locked:
        week.is_locked = True
        await db.flush()
        logger.info(f"Locked week {week.id}")
    return week


async def save_log(
    db: AsyncSession,
    *,
    owner_id: int,
    week_id: int,
    exercise_id: int,
    day_number: int,
    entry: LogEntry,
) -> None:
    """Write the full log row for (week, exercise, day), replacing any previous one.

    The lock check and the write are the same statement: rows are only
    selected for insertion while the owned week is unlocked and the exercise
    belongs to the week's plan, so a concurrent lock cannot be overtaken.
    """
    if day_number < 1:
        raise ValidationError("Day number must be 1 or greater")

    difficulty = entry.difficulty.value if entry.difficulty is not None else None
    source = (
        select(
            literal(week_id, Integer),
            literal(exercise_id, Integer),
            literal(day_number, Integer),
            literal(entry.weight_lifted, String),
            literal(entry.sets, Integer),
            literal(entry.reps, String),
            literal(entry.notes, Text),
            literal(difficulty, String),
        )
        .select_from(Week)
        .join(Plan, Plan.id == Week.plan_id)
        .join(PlanDay, PlanDay.plan_id == Week.plan_id)
        .join(Exercise, Exercise.day_id == PlanDay.id)
        .where(Week.id == week_id)
        .where(Plan.user_id == owner_id)
        .where(Exercise.id == exercise_id)
        .where(Week.is_locked == False)  # noqa: E712
    )
    stmt = _insert_for(db)(Log).from_select([*_LOG_KEY, *_LOG_FIELDS], source)
    stmt = stmt.on_conflict_do_update(
        index_elements=list(_LOG_KEY),
        set_={name: stmt.excluded[name] for name in _LOG_FIELDS},
    )
    res = await db.execute(stmt)
    if res.rowcount:
        logger.debug(f"Saved log week={week_id} exercise={exercise_id} day={day_number}")
        return

    # nothing written: work out why
    week = await WeekRepo(db).get_owned(week_id, owner_id)
    if week is None:
        raise StoreError("Week not found")
    if week.is_locked:
        logger.warning(f"Rejected log for locked week {week_id}")
        raise LockedWeekError()
    raise StoreError("Exercise not found in this plan")


async def add_ad_hoc_exercise(
    db: AsyncSession,
    *,
    owner_id: int,
    plan_id: int,
    day_id: int,
    name: str,
    sets: int | None = None,
    reps: str | None = None,
) -> Exercise:
    """Add a permanent exercise to a plan day, even mid-cycle. Existing logs are left alone."""
    name = (name or "").strip()
    if not name:
        raise ValidationError("Please enter an exercise name")
    sets = settings.default_sets if sets is None else sets
    if sets < 0:
        raise ValidationError("Sets must be 0 or greater")
    reps = (reps or "").strip() or settings.default_reps
    if "|" in name or "|" in reps:
        raise ValidationError("Exercise names and reps cannot contain '|'")

    plan = await PlanRepo(db).get_owned(plan_id, owner_id)
    if plan is None:
        raise StoreError("Plan not found")
    day = await PlanDayRepo(db).get_in_plan(day_id, plan.id)
    if day is None:
        raise StoreError("Day not found in this plan")

    ex = await ExerciseRepo(db).add(day_id=day.id, name=name, sets=sets, reps=reps)
    logger.info(f"Added exercise {ex.id} ({name}) to day {day.id} of plan {plan.id}")
    return ex
