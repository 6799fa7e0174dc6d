from __future__ import annotations

import datetime as dt

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def utcnow_naive() -> dt.datetime:
    # stored as naive UTC for SQLite
    return dt.datetime.now(dt.timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    pass


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    telegram_id: Mapped[int] = mapped_column(Integer, unique=True, index=True)
    username: Mapped[str | None] = mapped_column(String(64), nullable=True)

    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow_naive)

    # bot conversation memory (plan wizard, lock confirmation)
    dialog_state: Mapped[str | None] = mapped_column(String(64), nullable=True)
    dialog_step: Mapped[int | None] = mapped_column(Integer, nullable=True)
    dialog_data_json: Mapped[str | None] = mapped_column(Text, nullable=True)

    plans: Mapped[list["Plan"]] = relationship(back_populates="user")


class Plan(Base):
    __tablename__ = "plans"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), index=True)

    name: Mapped[str] = mapped_column(String(128))
    days_per_week: Mapped[int] = mapped_column(Integer)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow_naive)

    user: Mapped[User] = relationship(back_populates="plans")


class PlanDay(Base):
    __tablename__ = "plan_days"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    plan_id: Mapped[int] = mapped_column(Integer, ForeignKey("plans.id"), index=True)

    # 1..days_per_week; not a unique constraint because orphaned days keep their old order
    day_order: Mapped[int] = mapped_column(Integer)
    headline: Mapped[str] = mapped_column(String(128))


class Exercise(Base):
    __tablename__ = "exercises"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    day_id: Mapped[int] = mapped_column(Integer, ForeignKey("plan_days.id"), index=True)

    name: Mapped[str] = mapped_column(String(128))
    sets: Mapped[int] = mapped_column(Integer, default=3)
    reps: Mapped[str] = mapped_column(String(32), default="8-12")  # free-form: "5", "8-12", "AMRAP"

    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow_naive)


class Week(Base):
    __tablename__ = "weeks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    plan_id: Mapped[int] = mapped_column(Integer, ForeignKey("plans.id"), index=True)

    start_date: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow_naive)
    is_locked: Mapped[bool] = mapped_column(Boolean, default=False)


class Log(Base):
    __tablename__ = "logs"

    week_id: Mapped[int] = mapped_column(Integer, ForeignKey("weeks.id"), primary_key=True)
    exercise_id: Mapped[int] = mapped_column(Integer, ForeignKey("exercises.id"), primary_key=True)
    day_number: Mapped[int] = mapped_column(Integer, primary_key=True)

    weight_lifted: Mapped[str] = mapped_column(String(32), default="")
    sets: Mapped[int] = mapped_column(Integer, default=0)
    reps: Mapped[str] = mapped_column(String(32), default="")
    notes: Mapped[str] = mapped_column(Text, default="")
    difficulty: Mapped[str | None] = mapped_column(String(16), nullable=True)  # Easy/Medium/Difficult


Index("ix_plan_days_plan_order", PlanDay.plan_id, PlanDay.day_order)
Index("ix_weeks_plan_start", Week.plan_id, Week.start_date)
