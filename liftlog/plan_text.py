"""Plain-text form of a plan, used by the bot to create and edit plans.

    Plan: Push Pull Legs
    Day: Push
    - Bench Press | 5 | 5
    Day #12: Pull
    - #40 Barbell Row | 4 | 8-12

``#id`` markers tie a day or exercise to its stored row. Sets and reps are
optional and fall back to the configured defaults.
"""

from __future__ import annotations

import re
from typing import Any

from liftlog.config import settings
from liftlog.errors import ValidationError
from liftlog.schemas import DayDraft, PlanDraft, validate_input

_PLAN_RE = re.compile(r"^plan\s*:\s*(?P<name>.*?)\s*(?:\((?P<days>\d+)\s*days?\))?\s*$", re.I)
_DAY_RE = re.compile(r"^day(?:\s*#(?P<id>\d+))?\s*:\s*(?P<headline>.*)$", re.I)
_ID_RE = re.compile(r"^#(?P<id>\d+)\s+(?P<rest>.*)$")
_BULLETS = ("-", "*", "•")


def _parse_exercise(body: str, lineno: int) -> dict[str, Any]:
    ex_id: int | None = None
    m = _ID_RE.match(body)
    if m:
        ex_id = int(m.group("id"))
        body = m.group("rest")

    parts = [p.strip() for p in body.split("|")]
    if len(parts) > 3:
        raise ValidationError(f"Line {lineno}: use 'name | sets | reps'")
    name = parts[0]
    sets = settings.default_sets
    if len(parts) > 1 and parts[1]:
        if not parts[1].isdigit():
            raise ValidationError(f"Line {lineno}: sets must be a whole number")
        sets = int(parts[1])
    reps = parts[2] if len(parts) > 2 and parts[2] else settings.default_reps
    return {"id": ex_id, "name": name, "sets": sets, "reps": reps}


def _strip_bullet(line: str) -> str | None:
    for b in _BULLETS:
        if line.startswith(b):
            return line[len(b) :].strip()
    return None


def parse_plan_text(text: str) -> PlanDraft:
    name: str | None = None
    days_per_week: int | None = None
    days: list[dict[str, Any]] = []

    for lineno, raw in enumerate((text or "").splitlines(), start=1):
        line = raw.strip()
        if not line:
            continue
        if name is None:
            m = _PLAN_RE.match(line)
            if not m:
                raise ValidationError(f"Line {lineno}: the first line must be 'Plan: <name>'")
            name = m.group("name")
            if m.group("days"):
                days_per_week = int(m.group("days"))
            continue

        m = _DAY_RE.match(line)
        if m:
            day_id = int(m.group("id")) if m.group("id") else None
            days.append({"id": day_id, "headline": m.group("headline"), "exercises": []})
            continue

        body = _strip_bullet(line)
        if body is None:
            raise ValidationError(f"Line {lineno}: expected 'Day: <headline>' or '- <exercise>'")
        if not days:
            raise ValidationError(f"Line {lineno}: exercise listed before any 'Day:' line")
        days[-1]["exercises"].append(_parse_exercise(body, lineno))

    if name is None:
        raise ValidationError("Please fill in all fields")
    return validate_input(
        PlanDraft,
        {"name": name, "days_per_week": days_per_week if days_per_week is not None else len(days), "days": days},
    )


def parse_day_text(text: str) -> DayDraft:
    """One wizard step: a headline line followed by one exercise per line (bullets optional)."""
    lines = [ln.strip() for ln in (text or "").splitlines() if ln.strip()]
    if not lines:
        raise ValidationError("Please add a headline for this day")
    exercises = []
    for lineno, line in enumerate(lines[1:], start=2):
        exercises.append(_parse_exercise(_strip_bullet(line) or line, lineno))
    return validate_input(DayDraft, {"headline": lines[0], "exercises": exercises})


def format_plan(draft: PlanDraft) -> str:
    out = [f"Plan: {draft.name} ({draft.days_per_week} days)"]
    for day in draft.days:
        marker = f" #{day.id}" if day.id is not None else ""
        out.append(f"Day{marker}: {day.headline}")
        for ex in day.exercises:
            ex_marker = f"#{ex.id} " if ex.id is not None else ""
            out.append(f"- {ex_marker}{ex.name} | {ex.sets} | {ex.reps}")
    return "\n".join(out)
