from __future__ import annotations

from aiogram.types import KeyboardButton, ReplyKeyboardMarkup

from liftlog.schemas import MAX_DAYS_PER_WEEK


BTN_PLANS = "📋 My plans"
BTN_NEW_PLAN = "➕ New plan"
BTN_HELP = "❓ Help"
BTN_CANCEL = "❌ Cancel"
BTN_CONFIRM_LOCK = "✅ Yes, finish the week"


MAIN_BUTTONS: list[list[str]] = [
    [BTN_PLANS, BTN_NEW_PLAN],
    [BTN_HELP],
]


def main_menu_kb() -> ReplyKeyboardMarkup:
    return ReplyKeyboardMarkup(
        keyboard=[[KeyboardButton(text=t) for t in row] for row in MAIN_BUTTONS],
        resize_keyboard=True,
        input_field_placeholder="Pick an action or type a command",
    )


def cancel_kb() -> ReplyKeyboardMarkup:
    return ReplyKeyboardMarkup(
        keyboard=[[KeyboardButton(text=BTN_CANCEL)]],
        resize_keyboard=True,
    )


def days_per_week_kb() -> ReplyKeyboardMarkup:
    nums = [str(n) for n in range(1, MAX_DAYS_PER_WEEK + 1)]
    return ReplyKeyboardMarkup(
        keyboard=[
            [KeyboardButton(text=t) for t in nums[:4]],
            [KeyboardButton(text=t) for t in nums[4:]],
            [KeyboardButton(text=BTN_CANCEL)],
        ],
        resize_keyboard=True,
        one_time_keyboard=True,
        input_field_placeholder="Days per week",
    )


def lock_confirm_kb() -> ReplyKeyboardMarkup:
    return ReplyKeyboardMarkup(
        keyboard=[[KeyboardButton(text=BTN_CONFIRM_LOCK)], [KeyboardButton(text=BTN_CANCEL)]],
        resize_keyboard=True,
        one_time_keyboard=True,
    )
