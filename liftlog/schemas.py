from __future__ import annotations

from enum import Enum
from typing import Any, TypeVar

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from liftlog.errors import ValidationError

MAX_DAYS_PER_WEEK = 7

M = TypeVar("M", bound=BaseModel)


class Difficulty(str, Enum):
    EASY = "Easy"
    MEDIUM = "Medium"
    DIFFICULT = "Difficult"


class ExerciseDraft(BaseModel):
    id: int | None = None
    name: str = ""
    sets: int = Field(default=3, ge=0)
    reps: str = "8-12"

    @field_validator("name", "reps")
    @classmethod
    def _strip(cls, v: str) -> str:
        v = v.strip()
        # '|' separates name, sets and reps in the plan text format
        if "|" in v:
            raise ValueError("Exercise names and reps cannot contain '|'")
        return v


class DayDraft(BaseModel):
    id: int | None = None
    headline: str = ""
    exercises: list[ExerciseDraft] = Field(default_factory=list)

    @field_validator("headline")
    @classmethod
    def _strip(cls, v: str) -> str:
        return v.strip()


class PlanDraft(BaseModel):
    """An edited plan as submitted: ordered days, each with ordered exercises.

    Rows carrying an ``id`` are updated in place, the rest are inserted.
    The completeness checks live here (not on the day/exercise models) so the
    bot can keep half-filled days in its wizard state.
    """

    name: str
    days_per_week: int
    days: list[DayDraft] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def _strip(cls, v: str) -> str:
        return v.strip()

    @model_validator(mode="after")
    def _complete(self) -> "PlanDraft":
        if not self.name or not self.days_per_week:
            raise ValueError("Please fill in all fields")
        if not 1 <= self.days_per_week <= MAX_DAYS_PER_WEEK:
            raise ValueError(f"Days per week must be between 1 and {MAX_DAYS_PER_WEEK}")
        if len(self.days) != self.days_per_week:
            raise ValueError(f"Expected {self.days_per_week} days, got {len(self.days)}")
        seen_days: set[int] = set()
        seen_exercises: set[int] = set()
        for i, day in enumerate(self.days, start=1):
            if day.id is not None:
                if day.id in seen_days:
                    raise ValueError(f"Day {i} repeats day #{day.id}")
                seen_days.add(day.id)
            for ex in day.exercises:
                if ex.id is not None:
                    if ex.id in seen_exercises:
                        raise ValueError(f"Day {i} repeats exercise #{ex.id}")
                    seen_exercises.add(ex.id)
            if not day.headline:
                raise ValueError(f"Please add a headline for Day {i}")
            if not day.exercises:
                raise ValueError(f"Please add at least one exercise for Day {i}")
            if any(not ex.name for ex in day.exercises):
                raise ValueError(f"Please provide a name for all exercises in Day {i}")
        return self


class LogEntry(BaseModel):
    """The full performance record for one exercise on one day of a week.

    Saving always replaces every field, so callers send the whole record.
    """

    weight_lifted: str = ""
    sets: int = Field(default=0, ge=0)
    reps: str = ""
    notes: str = ""
    difficulty: Difficulty | None = None

    @field_validator("difficulty", mode="before")
    @classmethod
    def _difficulty(cls, v: Any) -> Any:
        if v is None or isinstance(v, Difficulty):
            return v
        s = str(v).strip()
        if not s:
            return None
        for d in Difficulty:
            if d.value.lower() == s.lower():
                return d
        return s


def validate_input(model: type[M], data: Any) -> M:
    """Build ``model`` from raw input, reporting the first problem as a ValidationError."""
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        err = e.errors()[0]
        ctx = err.get("ctx") or {}
        if isinstance(ctx.get("error"), ValueError):
            raise ValidationError(str(ctx["error"])) from e
        field = ".".join(str(p) for p in err.get("loc") or ())
        msg = err.get("msg") or "invalid value"
        raise ValidationError(f"{field}: {msg}" if field else msg) from e


def resize_days(days: list[DayDraft], count: int) -> list[DayDraft]:
    """Pad with empty days or drop trailing ones so there are exactly ``count``."""
    if count <= len(days):
        return list(days[:count])
    return list(days) + [DayDraft() for _ in range(count - len(days))]
