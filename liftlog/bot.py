from __future__ import annotations

import asyncio
import datetime as dt
import re
from html import escape
from typing import Any

from aiogram import Bot, Dispatcher, F, Router
from aiogram.client.default import DefaultBotProperties
from aiogram.filters import Command
from aiogram.types import Message
from loguru import logger

from liftlog import actions
from liftlog.config import settings
from liftlog.db import SessionLocal
from liftlog.errors import ValidationError
from liftlog.init_db import init_db
from liftlog.keyboards import (
    BTN_CANCEL,
    BTN_CONFIRM_LOCK,
    BTN_HELP,
    BTN_NEW_PLAN,
    BTN_PLANS,
    cancel_kb,
    days_per_week_kb,
    lock_confirm_kb,
    main_menu_kb,
)
from liftlog.logger import setup_logger
from liftlog.models import User
from liftlog.overview import plan_to_draft
from liftlog.plan_text import format_plan, parse_day_text, parse_plan_text
from liftlog.render import plan_overview, plans_list, week_label
from liftlog.repositories import UserRepo
from liftlog.schemas import MAX_DAYS_PER_WEEK, DayDraft, Difficulty, LogEntry


router = Router()

HELP_TEXT = (
    "Commands:\n"
    "- /plans — your workout plans\n"
    "- /newplan — create a plan step by step\n"
    "- /plan 3 [week] — plan 3 with the latest (or given) week's logs\n"
    "- /editplan 3 — get plan 3 as text, edit it and send it back\n"
    "- /startweek 3 [2026-10-12] — start a week (past dates allowed for backfill)\n"
    "- /log week exercise day weight sets reps [Easy|Medium|Difficult] [notes]\n"
    "  e.g. <code>/log 7 12 1 100 5 5 Medium felt good</code>\n"
    "- /addex 3 9 Lunges | 3 | 8-12 — add an exercise to day 9 of plan 3\n"
    "- /lock 7 — finish week 7 (no more edits after that)\n"
    "- /cancel — stop the current dialog"
)


def _args(message: Message) -> list[str]:
    parts = (message.text or "").strip().split()
    return parts[1:]


def _int(s: str | None) -> int | None:
    if s is None or not re.fullmatch(r"\d+", s.strip()):
        return None
    return int(s)


def _parse_date(s: str) -> dt.date | None:
    try:
        return dt.date.fromisoformat(s.strip())
    except ValueError:
        return None


def _parse_difficulty(s: str) -> Difficulty | None:
    for d in Difficulty:
        if d.value.lower() == s.lower():
            return d
    return None


async def _get_user(db: Any, message: Message) -> User:
    repo = UserRepo(db)
    user = await repo.get_or_create(message.from_user.id, message.from_user.username)
    # release the write before actions open their own transaction
    await db.commit()
    return user


async def _send_error(message: Message, error: str | None) -> None:
    await message.answer(f"⚠️ {escape(error or 'Something went wrong')}", reply_markup=main_menu_kb())


@router.message(Command("start"))
async def cmd_start(message: Message) -> None:
    if not message.from_user:
        return
    async with SessionLocal() as db:
        repo = UserRepo(db)
        user = await repo.get_or_create(message.from_user.id, message.from_user.username)
        await repo.set_dialog(user, state=None, step=None, data=None)
        await db.commit()
    await message.answer(
        "🏋️ Track your workout plans week by week.\n\n" + HELP_TEXT,
        reply_markup=main_menu_kb(),
    )


@router.message(Command("help"))
@router.message(F.text == BTN_HELP)
async def cmd_help(message: Message) -> None:
    await message.answer(HELP_TEXT, reply_markup=main_menu_kb())


@router.message(Command("cancel"))
@router.message(F.text == BTN_CANCEL)
async def cmd_cancel(message: Message) -> None:
    if not message.from_user:
        return
    async with SessionLocal() as db:
        repo = UserRepo(db)
        user = await repo.get_or_create(message.from_user.id, message.from_user.username)
        await repo.set_dialog(user, state=None, step=None, data=None)
        await db.commit()
    await message.answer("Ok, cancelled.", reply_markup=main_menu_kb())


@router.message(Command("plans"))
@router.message(F.text == BTN_PLANS)
async def cmd_plans(message: Message) -> None:
    if not message.from_user:
        return
    async with SessionLocal() as db:
        user = await _get_user(db, message)
    res = await actions.list_plans(user.id)
    if not res.ok:
        await _send_error(message, res.error)
        return
    await message.answer(plans_list(res.data or []), reply_markup=main_menu_kb())


@router.message(Command("newplan"))
@router.message(F.text == BTN_NEW_PLAN)
async def cmd_newplan(message: Message) -> None:
    if not message.from_user:
        return
    async with SessionLocal() as db:
        repo = UserRepo(db)
        user = await repo.get_or_create(message.from_user.id, message.from_user.username)
        await repo.set_dialog(user, state="plan_wizard", step=1, data={})
        await db.commit()
    await message.answer("Plan name? (e.g. <i>Push Pull Legs</i>)", reply_markup=cancel_kb())


@router.message(Command("plan"))
async def cmd_plan(message: Message) -> None:
    if not message.from_user:
        return
    args = _args(message)
    plan_id = _int(args[0]) if args else None
    week_id = _int(args[1]) if len(args) > 1 else None
    if plan_id is None:
        await message.answer("Format: /plan 3 [week_id]")
        return
    async with SessionLocal() as db:
        user = await _get_user(db, message)
    res = await actions.get_plan_overview(user.id, plan_id)
    if not res.ok or res.data is None:
        await _send_error(message, res.error)
        return
    ov = res.data
    week = ov.week(week_id) if week_id is not None else None
    if week_id is not None and week is None:
        await _send_error(message, "Week not found in this plan")
        return
    await message.answer(plan_overview(ov, week)[:3900], reply_markup=main_menu_kb())


@router.message(Command("editplan"))
async def cmd_editplan(message: Message) -> None:
    if not message.from_user:
        return
    args = _args(message)
    plan_id = _int(args[0]) if args else None
    if plan_id is None:
        await message.answer("Format: /editplan 3")
        return
    async with SessionLocal() as db:
        repo = UserRepo(db)
        user = await _get_user(db, message)
        res = await actions.get_plan_overview(user.id, plan_id)
        if not res.ok or res.data is None:
            await _send_error(message, res.error)
            return
        await repo.set_dialog(user, state="plan_edit", step=None, data={"plan_id": plan_id})
        await db.commit()
    text = format_plan(plan_to_draft(res.data))
    await message.answer(
        "✏️ Copy, edit and send back. Keep the <code>#id</code> markers on rows you keep "
        "(logs are attached to them); lines without one are added as new.\n\n"
        f"<pre>{escape(text)}</pre>",
        reply_markup=cancel_kb(),
    )


@router.message(Command("startweek"))
async def cmd_startweek(message: Message) -> None:
    if not message.from_user:
        return
    args = _args(message)
    plan_id = _int(args[0]) if args else None
    start: dt.date | None = None
    if len(args) > 1:
        start = _parse_date(args[1])
        if start is None:
            await message.answer("Date format: YYYY-MM-DD")
            return
    if plan_id is None:
        await message.answer("Format: /startweek 3 [2026-10-12]")
        return
    async with SessionLocal() as db:
        user = await _get_user(db, message)
    res = await actions.create_week(user.id, plan_id, start)
    if not res.ok or res.data is None:
        await _send_error(message, res.error)
        return
    await message.answer(f"🚀 New week started! {week_label(res.data)}", reply_markup=main_menu_kb())


@router.message(Command("log"))
async def cmd_log(message: Message) -> None:
    if not message.from_user:
        return
    args = _args(message)
    ids = [_int(a) for a in args[:5]]
    if len(args) < 6 or None in ids[:3] or _int(args[4]) is None:
        await message.answer("Format: /log week exercise day weight sets reps [Easy|Medium|Difficult] [notes]")
        return
    week_id, exercise_id, day_number = ids[0], ids[1], ids[2]
    rest = args[6:]
    difficulty = _parse_difficulty(rest[0]) if rest else None
    if difficulty is not None:
        rest = rest[1:]
    entry = LogEntry(
        weight_lifted=args[3],
        sets=int(args[4]),
        reps=args[5],
        notes=" ".join(rest),
        difficulty=difficulty,
    )
    async with SessionLocal() as db:
        user = await _get_user(db, message)
    res = await actions.save_log(user.id, week_id, exercise_id, day_number, entry)
    if not res.ok:
        await _send_error(message, res.error)
        return
    await message.answer("✅ Saved", reply_markup=main_menu_kb())


@router.message(Command("addex"))
async def cmd_addex(message: Message) -> None:
    if not message.from_user:
        return
    args = _args(message)
    plan_id = _int(args[0]) if args else None
    day_id = _int(args[1]) if len(args) > 1 else None
    if plan_id is None or day_id is None or len(args) < 3:
        await message.answer("Format: /addex plan day Name | sets | reps")
        return
    parts = [p.strip() for p in " ".join(args[2:]).split("|")]
    sets = _int(parts[1]) if len(parts) > 1 and parts[1] else None
    if len(parts) > 1 and parts[1] and sets is None:
        await message.answer("Sets must be a whole number")
        return
    reps = parts[2] if len(parts) > 2 else None
    async with SessionLocal() as db:
        user = await _get_user(db, message)
    res = await actions.add_ad_hoc_exercise(user.id, plan_id, day_id, parts[0], sets, reps)
    if not res.ok or res.data is None:
        await _send_error(message, res.error)
        return
    ex = res.data
    await message.answer(f"➕ Exercise added to plan: #{ex.id} {escape(ex.name)} {ex.sets}x{escape(ex.reps)}")


@router.message(Command("lock"))
async def cmd_lock(message: Message) -> None:
    if not message.from_user:
        return
    args = _args(message)
    week_id = _int(args[0]) if args else None
    if week_id is None:
        await message.answer("Format: /lock 7")
        return
    async with SessionLocal() as db:
        repo = UserRepo(db)
        user = await repo.get_or_create(message.from_user.id, message.from_user.username)
        await repo.set_dialog(user, state="lock_confirm", step=None, data={"week_id": week_id})
        await db.commit()
    await message.answer(
        f"Are you sure you want to finish week #{week_id}? You won't be able to edit it anymore.",
        reply_markup=lock_confirm_kb(),
    )


async def _handle_plan_wizard(message: Message, repo: UserRepo, user: User) -> bool:
    if user.dialog_state != "plan_wizard":
        return False
    text = (message.text or "").strip()
    data: dict[str, Any] = (await repo.get_dialog_data(user)) or {}
    step = user.dialog_step or 1

    if step == 1:
        if not text:
            await message.answer("Please fill in all fields: plan name?")
            return True
        data["name"] = text
        await repo.set_dialog(user, state="plan_wizard", step=2, data=data)
        await message.answer("How many days per week?", reply_markup=days_per_week_kb())
        return True

    if step == 2:
        n = _int(text)
        if n is None or not 1 <= n <= MAX_DAYS_PER_WEEK:
            await message.answer(f"Pick a number from 1 to {MAX_DAYS_PER_WEEK}", reply_markup=days_per_week_kb())
            return True
        data["days_per_week"] = n
        data["days"] = []
        await repo.set_dialog(user, state="plan_wizard", step=3, data=data)
        await message.answer(
            "Day 1: first line is the headline, then one exercise per line as "
            "<code>Name | sets | reps</code>, e.g.\n<pre>Push\nBench Press | 5 | 5\nDips | 3 | 8-12</pre>",
            reply_markup=cancel_kb(),
        )
        return True

    try:
        day = parse_day_text(text)
        if not day.exercises:
            raise ValidationError(f"Please add at least one exercise for Day {len(data['days']) + 1}")
    except ValidationError as e:
        await message.answer(f"⚠️ {escape(e.message)}")
        return True

    days = [DayDraft.model_validate(d) for d in data.get("days") or []]
    days.append(day)
    data["days"] = days
    if len(days) < int(data["days_per_week"]):
        await repo.set_dialog(user, state="plan_wizard", step=3, data=data)
        await message.answer(f"Day {len(days) + 1}: headline, then exercises.")
        return True

    # release the write lock held for the user row before the plan transaction
    await repo.set_dialog(user, state=None, step=None, data=None)
    await repo.db.commit()
    res = await actions.save_plan(user.id, {"name": data["name"], "days_per_week": data["days_per_week"], "days": days})
    if not res.ok or res.data is None:
        await _send_error(message, res.error)
        return True
    await message.answer(f"🎉 Plan created successfully! Open it: /plan {res.data.id}", reply_markup=main_menu_kb())
    return True


async def _handle_plan_edit(message: Message, repo: UserRepo, user: User) -> bool:
    if user.dialog_state != "plan_edit":
        return False
    data: dict[str, Any] = (await repo.get_dialog_data(user)) or {}
    try:
        draft = parse_plan_text(message.text or "")
    except ValidationError as e:
        await message.answer(f"⚠️ {escape(e.message)}\nFix it and send again, or /cancel.")
        return True

    await repo.set_dialog(user, state=None, step=None, data=None)
    await repo.db.commit()
    res = await actions.save_plan(user.id, draft, plan_id=int(data["plan_id"]))
    if not res.ok or res.data is None:
        await _send_error(message, res.error)
        return True
    await message.answer(f"✅ Plan updated successfully! /plan {res.data.id}", reply_markup=main_menu_kb())
    return True


async def _handle_lock_confirm(message: Message, repo: UserRepo, user: User) -> bool:
    if user.dialog_state != "lock_confirm":
        return False
    data: dict[str, Any] = (await repo.get_dialog_data(user)) or {}
    await repo.set_dialog(user, state=None, step=None, data=None)
    await repo.db.commit()

    text = (message.text or "").strip().lower()
    if text not in {BTN_CONFIRM_LOCK.lower(), "yes", "y"}:
        await message.answer("Ok, the week stays open.", reply_markup=main_menu_kb())
        return True
    res = await actions.lock_week(user.id, int(data["week_id"]))
    if not res.ok or res.data is None:
        await _send_error(message, res.error)
        return True
    await message.answer(f"🔒 Week completed! {week_label(res.data)}", reply_markup=main_menu_kb())
    return True


@router.message()
async def any_text(message: Message) -> None:
    if not message.from_user:
        return

    async with SessionLocal() as db:
        user_repo = UserRepo(db)
        user = await user_repo.get_or_create(message.from_user.id, message.from_user.username)

        for handler in (_handle_plan_wizard, _handle_plan_edit, _handle_lock_confirm):
            if await handler(message, user_repo, user):
                await db.commit()
                return

        await db.commit()
    await message.answer("Not sure what to do with that. /help", reply_markup=main_menu_kb())


async def main() -> None:
    setup_logger(settings)
    if not settings.bot_token:
        raise SystemExit("BOT_TOKEN is not set")
    await init_db()
    bot = Bot(settings.bot_token, default=DefaultBotProperties(parse_mode="HTML"))
    dp = Dispatcher()
    dp.include_router(router)
    logger.info("Starting liftlog bot polling")
    await dp.start_polling(bot)


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
