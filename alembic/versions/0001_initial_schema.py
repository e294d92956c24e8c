"""initial schema: users, categories, ledgers, budgets, goals

Revision ID: 0001_initial
Revises:
Create Date: 2025-12-01 09:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
import sqlmodel

revision: str = "0001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# Enums are stored by member name, matching how SQLModel maps str Enums
currency = sa.Enum("HKD", "USD", "EUR", "GBP", "JPY", "CNY", "BDT", name="currency")
category_kind = sa.Enum("income", "expense", name="categorykind")
budget_period = sa.Enum("daily", "weekly", "monthly", name="budgetperiod")
frequency = sa.Enum("daily", "weekly", "monthly", "yearly", name="frequency")


def _owner_column() -> sa.Column:
    return sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False)


def _ledger_table(name: str, text_column: str) -> None:
    op.create_table(
        name,
        sa.Column("id", sa.Integer(), primary_key=True),
        _owner_column(),
        sa.Column("category_id", sa.Integer(), sa.ForeignKey("category.id"), nullable=False),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("date", sa.DateTime(), nullable=False),
        sa.Column(text_column, sqlmodel.sql.sqltypes.AutoString(length=500), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    for column in ("user_id", "category_id", "date"):
        op.create_index(f"ix_{name}_{column}", name, [column])


def upgrade() -> None:
    op.create_table(
        "user",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sqlmodel.sql.sqltypes.AutoString(length=100), nullable=False),
        sa.Column("email", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("hashed_password", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("currency", currency, nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("email", name="uq_user_email"),
    )
    op.create_index("ix_user_email", "user", ["email"])

    op.create_table(
        "category",
        sa.Column("id", sa.Integer(), primary_key=True),
        _owner_column(),
        sa.Column("name", sqlmodel.sql.sqltypes.AutoString(length=50), nullable=False),
        sa.Column("kind", category_kind, nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("user_id", "name", "kind", name="uq_category_owner_name_kind"),
    )
    op.create_index("ix_category_user_id", "category", ["user_id"])
    op.create_index("ix_category_kind", "category", ["kind"])

    _ledger_table("expense", "note")
    _ledger_table("income", "description")

    op.create_table(
        "budget",
        sa.Column("id", sa.Integer(), primary_key=True),
        _owner_column(),
        sa.Column("category_id", sa.Integer(), sa.ForeignKey("category.id"), nullable=False),
        sa.Column("limit_amount", sa.Float(), nullable=False),
        sa.Column("period", budget_period, nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint(
            "user_id", "category_id", "period", name="uq_budget_owner_category_period"
        ),
    )
    for column in ("user_id", "category_id", "period"):
        op.create_index(f"ix_budget_{column}", "budget", [column])

    op.create_table(
        "goal",
        sa.Column("id", sa.Integer(), primary_key=True),
        _owner_column(),
        sa.Column("name", sqlmodel.sql.sqltypes.AutoString(length=100), nullable=False),
        sa.Column("target_amount", sa.Float(), nullable=False),
        sa.Column("current_amount", sa.Float(), nullable=False),
        sa.Column("target_date", sa.Date(), nullable=False),
        sa.Column("is_completed", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_goal_user_id", "goal", ["user_id"])
    op.create_index("ix_goal_is_completed", "goal", ["is_completed"])

    op.create_table(
        "recurring_expense",
        sa.Column("id", sa.Integer(), primary_key=True),
        _owner_column(),
        sa.Column("category_id", sa.Integer(), sa.ForeignKey("category.id"), nullable=False),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("frequency", frequency, nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("description", sqlmodel.sql.sqltypes.AutoString(length=500), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_recurring_expense_user_id", "recurring_expense", ["user_id"])
    op.create_index("ix_recurring_expense_is_active", "recurring_expense", ["is_active"])


def downgrade() -> None:
    # children first; dropping a table drops its indexes
    for table in ("recurring_expense", "goal", "budget", "income", "expense", "category", "user"):
        op.drop_table(table)
    bind = op.get_bind()
    for enum in (frequency, budget_period, category_kind, currency):
        enum.drop(bind, checkfirst=True)
