from __future__ import annotations

import pytest

from liftlog.errors import ValidationError
from liftlog.schemas import DayDraft, Difficulty, ExerciseDraft, LogEntry, PlanDraft, resize_days, validate_input


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Easy", Difficulty.EASY),
        ("medium", Difficulty.MEDIUM),
        (" DIFFICULT ", Difficulty.DIFFICULT),
        ("", None),
        (None, None),
    ],
)
def test_difficulty_input(raw, expected) -> None:
    assert LogEntry(difficulty=raw).difficulty == expected


def test_log_entry_defaults_are_an_empty_record() -> None:
    entry = LogEntry()
    assert entry.model_dump() == {"weight_lifted": "", "sets": 0, "reps": "", "notes": "", "difficulty": None}


def test_validate_input_reports_field_errors() -> None:
    with pytest.raises(ValidationError) as ei:
        validate_input(LogEntry, {"sets": "lots"})
    assert ei.value.message.startswith("sets:")


def test_validate_input_keeps_plan_messages() -> None:
    with pytest.raises(ValidationError) as ei:
        validate_input(PlanDraft, {"name": "PPL", "days_per_week": 0, "days": []})
    assert ei.value.message == "Please fill in all fields"


def test_resize_days() -> None:
    days = [DayDraft(headline="A"), DayDraft(headline="B"), DayDraft(headline="C")]

    assert [d.headline for d in resize_days(days, 2)] == ["A", "B"]
    grown = resize_days(days, 5)
    assert [d.headline for d in grown] == ["A", "B", "C", "", ""]
    assert grown[3] is not grown[4]
    assert len(days) == 3


def test_exercise_text_cannot_hold_the_field_separator() -> None:
    with pytest.raises(ValidationError) as ei:
        validate_input(ExerciseDraft, {"name": "Row | cable"})
    assert ei.value.message == "Exercise names and reps cannot contain '|'"
    with pytest.raises(ValidationError):
        validate_input(ExerciseDraft, {"name": "Row", "reps": "8|10"})
