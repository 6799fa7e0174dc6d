"""initial schema: users, plans, plan days, exercises, weeks, logs

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-17
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("telegram_id", sa.Integer(), nullable=False),
        sa.Column("username", sa.String(length=64), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("dialog_state", sa.String(length=64), nullable=True),
        sa.Column("dialog_step", sa.Integer(), nullable=True),
        sa.Column("dialog_data_json", sa.Text(), nullable=True),
    )
    op.create_index("ix_users_telegram_id", "users", ["telegram_id"], unique=True)

    op.create_table(
        "plans",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=128), nullable=False),
        sa.Column("days_per_week", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
    )
    op.create_index("ix_plans_user_id", "plans", ["user_id"], unique=False)

    op.create_table(
        "plan_days",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("plan_id", sa.Integer(), nullable=False),
        sa.Column("day_order", sa.Integer(), nullable=False),
        sa.Column("headline", sa.String(length=128), nullable=False),
        sa.ForeignKeyConstraint(["plan_id"], ["plans.id"]),
    )
    op.create_index("ix_plan_days_plan_id", "plan_days", ["plan_id"], unique=False)
    op.create_index("ix_plan_days_plan_order", "plan_days", ["plan_id", "day_order"], unique=False)

    op.create_table(
        "exercises",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("day_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=128), nullable=False),
        sa.Column("sets", sa.Integer(), nullable=False, server_default="3"),
        sa.Column("reps", sa.String(length=32), nullable=False, server_default="8-12"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["day_id"], ["plan_days.id"]),
    )
    op.create_index("ix_exercises_day_id", "exercises", ["day_id"], unique=False)

    op.create_table(
        "weeks",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("plan_id", sa.Integer(), nullable=False),
        sa.Column("start_date", sa.DateTime(), nullable=False),
        sa.Column("is_locked", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.ForeignKeyConstraint(["plan_id"], ["plans.id"]),
    )
    op.create_index("ix_weeks_plan_id", "weeks", ["plan_id"], unique=False)
    op.create_index("ix_weeks_plan_start", "weeks", ["plan_id", "start_date"], unique=False)

    op.create_table(
        "logs",
        sa.Column("week_id", sa.Integer(), nullable=False),
        sa.Column("exercise_id", sa.Integer(), nullable=False),
        sa.Column("day_number", sa.Integer(), nullable=False),
        sa.Column("weight_lifted", sa.String(length=32), nullable=False, server_default=""),
        sa.Column("sets", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("reps", sa.String(length=32), nullable=False, server_default=""),
        sa.Column("notes", sa.Text(), nullable=False, server_default=""),
        sa.Column("difficulty", sa.String(length=16), nullable=True),
        sa.ForeignKeyConstraint(["week_id"], ["weeks.id"]),
        sa.ForeignKeyConstraint(["exercise_id"], ["exercises.id"]),
        sa.PrimaryKeyConstraint("week_id", "exercise_id", "day_number"),
    )


def downgrade() -> None:
    op.drop_table("logs")

    op.drop_index("ix_weeks_plan_start", table_name="weeks")
    op.drop_index("ix_weeks_plan_id", table_name="weeks")
    op.drop_table("weeks")

    op.drop_index("ix_exercises_day_id", table_name="exercises")
    op.drop_table("exercises")

    op.drop_index("ix_plan_days_plan_order", table_name="plan_days")
    op.drop_index("ix_plan_days_plan_id", table_name="plan_days")
    op.drop_table("plan_days")

    op.drop_index("ix_plans_user_id", table_name="plans")
    op.drop_table("plans")

    op.drop_index("ix_users_telegram_id", table_name="users")
    op.drop_table("users")
