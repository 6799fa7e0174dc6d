from __future__ import annotations

from html import escape

from tabulate import tabulate

from liftlog.models import Plan, Week
from liftlog.overview import DayView, PlanOverview


def week_label(week: Week) -> str:
    status = "Completed" if week.is_locked else "Active"
    return f"#{week.id} Week of {week.start_date.date().isoformat()} ({status})"


def plans_list(plans: list[Plan]) -> str:
    if not plans:
        return "No plans found. You haven't created any workout plans yet: /newplan"
    lines = ["🏋️ <b>Your Workout Plans</b>"]
    for p in plans:
        lines.append(
            f"- <b>{escape(p.name)}</b> — {p.days_per_week} days / week "
            f"(created {p.created_at.date().isoformat()}) — /plan {p.id}"
        )
    return "\n".join(lines)


def day_table(ov: PlanOverview, dv: DayView, week: Week | None) -> str:
    rows = []
    for ex in dv.exercises:
        log = ov.log_for(week.id, ex.id, dv.day.day_order) if week else None
        rows.append(
            [
                ex.id,
                ex.name,
                f"{ex.sets}x{ex.reps}",
                log.weight_lifted if log else "",
                log.sets if log else "",
                log.reps if log else "",
                (log.difficulty or "") if log else "",
                log.notes if log else "",
            ]
        )
    return tabulate(
        rows,
        headers=["id", "Exercise", "Target", "Weight", "Sets", "Reps", "Difficulty", "Notes"],
        tablefmt="github",
    )


def plan_overview(ov: PlanOverview, week: Week | None = None) -> str:
    week = week or ov.current_week
    parts = [f"📋 <b>{escape(ov.plan.name)}</b> — {ov.plan.days_per_week} Days / Week (plan #{ov.plan.id})"]
    if ov.weeks:
        parts.append("Weeks: " + ", ".join(week_label(w) for w in ov.weeks))
    else:
        parts.append(f"No weeks yet: /startweek {ov.plan.id}")
    if week:
        parts.append(f"\n📅 <b>{week_label(week)}</b>")

    for dv in ov.days:
        parts.append(f"\n<b>Day {dv.day.day_order}: {escape(dv.day.headline)}</b> (day #{dv.day.id})")
        if dv.exercises:
            parts.append(f"<pre>{escape(day_table(ov, dv, week))}</pre>")
        else:
            parts.append("—")
    return "\n".join(parts)
