from __future__ import annotations

import pytest

from liftlog import actions
from liftlog.config import settings
from liftlog.overview import plan_to_draft
from liftlog.repositories import LogRepo
from liftlog.schemas import ExerciseDraft


async def _overview(sessions, owner_id: int, plan_id: int):
    res = await actions.get_plan_overview(owner_id, plan_id, sessions=sessions)
    assert res.ok, res.error
    return res.data


def _exercise_ids(ov) -> list[list[int]]:
    return [[ex.id for ex in dv.exercises] for dv in ov.days]


@pytest.mark.asyncio
async def test_create_push_pull_legs(sessions, owner_id, make_plan) -> None:
    ov = await make_plan()

    assert ov.plan.name == "Push Pull Legs"
    assert ov.plan.days_per_week == 3
    assert [dv.day.day_order for dv in ov.days] == [1, 2, 3]
    assert [dv.day.headline for dv in ov.days] == ["Push", "Pull", "Legs"]
    exercises = [ex for dv in ov.days for ex in dv.exercises]
    assert len(exercises) == 3
    assert {(ex.name, ex.sets, ex.reps) for ex in exercises} == {("Bench Press", 5, "5")}


@pytest.mark.asyncio
async def test_noop_edit_keeps_ids(sessions, owner_id, make_plan, ppl) -> None:
    ov = await make_plan(ppl(exercises_per_day=2))

    res = await actions.save_plan(owner_id, plan_to_draft(ov), plan_id=ov.plan.id, sessions=sessions)
    assert res.ok, res.error
    assert res.data.id == ov.plan.id

    after = await _overview(sessions, owner_id, ov.plan.id)
    assert [dv.day.id for dv in after.days] == [dv.day.id for dv in ov.days]
    assert _exercise_ids(after) == _exercise_ids(ov)


@pytest.mark.asyncio
async def test_day_order_follows_submission(sessions, owner_id, make_plan) -> None:
    ov = await make_plan()
    draft = plan_to_draft(ov)
    draft.days = list(reversed(draft.days))

    res = await actions.save_plan(owner_id, draft, plan_id=ov.plan.id, sessions=sessions)
    assert res.ok, res.error

    after = await _overview(sessions, owner_id, ov.plan.id)
    assert [dv.day.day_order for dv in after.days] == [1, 2, 3]
    assert [dv.day.headline for dv in after.days] == ["Legs", "Pull", "Push"]
    assert [dv.day.id for dv in after.days] == [dv.day.id for dv in reversed(ov.days)]


@pytest.mark.asyncio
async def test_edit_updates_in_place_and_inserts_new_rows(sessions, owner_id, make_plan) -> None:
    ov = await make_plan()
    bench_id = ov.days[0].exercises[0].id
    draft = plan_to_draft(ov)
    draft.name = "PPL v2"
    draft.days[0].headline = "Push (heavy)"
    draft.days[0].exercises[0].sets = 4
    draft.days[0].exercises.append(ExerciseDraft(name="Overhead Press", sets=3, reps="6-8"))

    res = await actions.save_plan(owner_id, draft, plan_id=ov.plan.id, sessions=sessions)
    assert res.ok, res.error

    after = await _overview(sessions, owner_id, ov.plan.id)
    assert after.plan.name == "PPL v2"
    push = after.days[0]
    assert push.day.headline == "Push (heavy)"
    assert [(ex.id == bench_id, ex.name, ex.sets) for ex in push.exercises] == [
        (True, "Bench Press", 4),
        (False, "Overhead Press", 3),
    ]


@pytest.mark.asyncio
async def test_exercise_can_move_between_days(sessions, owner_id, make_plan, ppl) -> None:
    ov = await make_plan(ppl(exercises_per_day=2))
    draft = plan_to_draft(ov)
    moved = draft.days[0].exercises.pop()
    draft.days[1].exercises.append(moved)

    res = await actions.save_plan(owner_id, draft, plan_id=ov.plan.id, sessions=sessions)
    assert res.ok, res.error

    after = await _overview(sessions, owner_id, ov.plan.id)
    assert moved.id in [ex.id for ex in after.days[1].exercises]
    assert moved.id not in [ex.id for ex in after.days[0].exercises]


@pytest.mark.asyncio
async def test_removed_rows_are_kept_by_default(sessions, owner_id, make_plan, ppl) -> None:
    ov = await make_plan(ppl(exercises_per_day=2))
    draft = plan_to_draft(ov)
    dropped = draft.days[0].exercises.pop()

    res = await actions.save_plan(owner_id, draft, plan_id=ov.plan.id, sessions=sessions)
    assert res.ok, res.error

    after = await _overview(sessions, owner_id, ov.plan.id)
    assert dropped.id in [ex.id for ex in after.days[0].exercises]


@pytest.mark.asyncio
async def test_dropped_days_sort_after_submitted_ones(sessions, owner_id, make_plan) -> None:
    ov = await make_plan()
    push, pull, legs = (dv.day.id for dv in ov.days)
    draft = plan_to_draft(ov)
    draft.days = draft.days[1:]  # leave out Push
    draft.days_per_week = 2

    res = await actions.save_plan(owner_id, draft, plan_id=ov.plan.id, sessions=sessions)
    assert res.ok, res.error

    after = await _overview(sessions, owner_id, ov.plan.id)
    assert [(dv.day.id, dv.day.day_order) for dv in after.days] == [(pull, 1), (legs, 2), (push, 3)]
    assert [d.id for d in plan_to_draft(after).days] == [pull, legs]


@pytest.mark.asyncio
async def test_delete_removed_drops_rows_and_their_logs(sessions, owner_id, make_plan, ppl) -> None:
    ov = await make_plan(ppl(exercises_per_day=2))
    week = (await actions.create_week(owner_id, ov.plan.id, sessions=sessions)).data
    kept = ov.days[0].exercises[0]
    dropped = ov.days[0].exercises[1]
    for ex in (kept, dropped):
        res = await actions.save_log(owner_id, week.id, ex.id, 1, {"weight_lifted": "50"}, sessions=sessions)
        assert res.ok, res.error

    draft = plan_to_draft(ov)
    draft.days[0].exercises.pop()
    draft.days.pop()  # Legs
    draft.days_per_week = 2

    res = await actions.save_plan(owner_id, draft, plan_id=ov.plan.id, delete_removed=True, sessions=sessions)
    assert res.ok, res.error

    after = await _overview(sessions, owner_id, ov.plan.id)
    assert [dv.day.headline for dv in after.days] == ["Push", "Pull"]
    assert [ex.id for ex in after.days[0].exercises] == [kept.id]
    async with sessions() as db:
        logs = await LogRepo(db).for_week(week.id)
    assert [lg.exercise_id for lg in logs] == [kept.id]


@pytest.mark.asyncio
async def test_delete_removed_follows_settings(sessions, owner_id, make_plan, ppl, monkeypatch) -> None:
    monkeypatch.setattr(settings, "delete_removed_on_edit", True)
    ov = await make_plan(ppl(exercises_per_day=2))
    week = (await actions.create_week(owner_id, ov.plan.id, sessions=sessions)).data
    dropped = ov.days[0].exercises[1]
    await actions.save_log(owner_id, week.id, dropped.id, 1, {"weight_lifted": "20"}, sessions=sessions)

    draft = plan_to_draft(ov)
    draft.days[0].exercises.pop()
    res = await actions.save_plan(owner_id, draft, plan_id=ov.plan.id, sessions=sessions)
    assert res.ok, res.error

    after = await _overview(sessions, owner_id, ov.plan.id)
    assert dropped.id not in [ex.id for dv in after.days for ex in dv.exercises]
    assert after.logs == {}


@pytest.mark.asyncio
async def test_repeated_ids_are_rejected(sessions, owner_id, make_plan, ppl) -> None:
    ov = await make_plan(ppl(exercises_per_day=2))

    draft = plan_to_draft(ov)
    draft.days[2] = draft.days[0].model_copy(deep=True)
    res = await actions.save_plan(owner_id, draft, plan_id=ov.plan.id, sessions=sessions)
    assert res.error == f"Day 3 repeats day #{ov.days[0].day.id}"

    draft = plan_to_draft(ov)
    moved = draft.days[0].exercises[0]
    draft.days[1].exercises.append(moved.model_copy())
    res = await actions.save_plan(owner_id, draft, plan_id=ov.plan.id, sessions=sessions)
    assert res.error == f"Day 2 repeats exercise #{moved.id}"

    after = await _overview(sessions, owner_id, ov.plan.id)
    assert [dv.day.day_order for dv in after.days] == [1, 2, 3]
    assert _exercise_ids(after) == _exercise_ids(ov)


@pytest.mark.asyncio
async def test_pipe_in_exercise_name_is_rejected(sessions, owner_id, make_plan, ppl) -> None:
    draft = ppl()
    draft["days"][0]["exercises"][0]["name"] = "Row | cable"
    res = await actions.save_plan(owner_id, draft, sessions=sessions)
    assert res.error == "Exercise names and reps cannot contain '|'"

    ov = await make_plan()
    added = await actions.add_ad_hoc_exercise(owner_id, ov.plan.id, ov.days[0].day.id, "Row | cable", sessions=sessions)
    assert added.error == "Exercise names and reps cannot contain '|'"


@pytest.mark.asyncio
async def test_failed_edit_rolls_back_everything(sessions, owner_id, make_plan) -> None:
    ov = await make_plan()
    draft = plan_to_draft(ov)
    draft.name = "Renamed"
    draft.days[0].headline = "Changed"
    draft.days[0].exercises.append(ExerciseDraft(name="Flyes"))
    draft.days[1].exercises[0].id = 99999

    res = await actions.save_plan(owner_id, draft, plan_id=ov.plan.id, sessions=sessions)
    assert not res.ok
    assert res.error == "Exercise 99999 does not belong to this plan"

    after = await _overview(sessions, owner_id, ov.plan.id)
    assert after.plan.name == "Push Pull Legs"
    assert after.days[0].day.headline == "Push"
    assert _exercise_ids(after) == _exercise_ids(ov)


@pytest.mark.asyncio
async def test_ids_from_another_plan_are_rejected(sessions, owner_id, make_plan) -> None:
    first = await make_plan()
    second = await make_plan()
    draft = plan_to_draft(first)
    draft.days[0].id = second.days[0].day.id

    res = await actions.save_plan(owner_id, draft, plan_id=first.plan.id, sessions=sessions)
    assert res.error == f"Day {second.days[0].day.id} does not belong to this plan"


@pytest.mark.asyncio
async def test_only_the_owner_can_edit(sessions, owner_id, stranger_id, make_plan) -> None:
    ov = await make_plan()

    res = await actions.save_plan(stranger_id, plan_to_draft(ov), plan_id=ov.plan.id, sessions=sessions)
    assert res.error == "Plan not found"

    assert (await actions.get_plan_overview(stranger_id, ov.plan.id, sessions=sessions)).error == "Plan not found"
    assert (await actions.list_plans(stranger_id, sessions=sessions)).data == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "patch, message",
    [
        ({"name": "  "}, "Please fill in all fields"),
        ({"days_per_week": 8}, "Days per week must be between 1 and 7"),
        ({"days_per_week": 2}, "Expected 2 days, got 3"),
    ],
)
async def test_invalid_plan_is_rejected_before_writing(sessions, owner_id, ppl, patch, message) -> None:
    res = await actions.save_plan(owner_id, {**ppl(), **patch}, sessions=sessions)
    assert res.error == message
    assert (await actions.list_plans(owner_id, sessions=sessions)).data == []


@pytest.mark.asyncio
async def test_day_checks_name_the_day(sessions, owner_id, ppl) -> None:
    draft = ppl()
    draft["days"][1]["headline"] = ""
    res = await actions.save_plan(owner_id, draft, sessions=sessions)
    assert res.error == "Please add a headline for Day 2"

    draft = ppl()
    draft["days"][2]["exercises"] = []
    res = await actions.save_plan(owner_id, draft, sessions=sessions)
    assert res.error == "Please add at least one exercise for Day 3"

    draft = ppl()
    draft["days"][0]["exercises"][0]["name"] = " "
    res = await actions.save_plan(owner_id, draft, sessions=sessions)
    assert res.error == "Please provide a name for all exercises in Day 1"


@pytest.mark.asyncio
async def test_plans_listed_newest_first(sessions, owner_id, make_plan, ppl) -> None:
    first = await make_plan()
    second = await make_plan({**ppl(), "name": "Upper Lower"})

    res = await actions.list_plans(owner_id, sessions=sessions)
    assert [p.id for p in res.data] == [second.plan.id, first.plan.id]
