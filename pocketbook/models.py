# pocketbook/models.py
from datetime import date, datetime
from enum import Enum  # small enums for clarity
from typing import Optional  # nullable fields

from sqlmodel import UniqueConstraint  # per-owner uniqueness keys
from sqlmodel import Field, SQLModel


class Currency(str, Enum):
    HKD = "HKD"
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"
    JPY = "JPY"
    CNY = "CNY"
    BDT = "BDT"


class CategoryKind(str, Enum):
    income = "income"  # stored as TEXT
    expense = "expense"


class BudgetPeriod(str, Enum):
    daily = "daily"
    weekly = "weekly"
    monthly = "monthly"


class Frequency(str, Enum):
    daily = "daily"
    weekly = "weekly"
    monthly = "monthly"
    yearly = "yearly"


class User(SQLModel, table=True):
    __tablename__ = "user"
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=100)
    email: str = Field(index=True)
    hashed_password: str  # never plain text
    currency: Currency = Field(default=Currency.HKD)
    created_at: datetime = Field(default_factory=datetime.now)

    __table_args__ = (UniqueConstraint("email", name="uq_user_email"),)


class Category(SQLModel, table=True):
    __tablename__ = "category"
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(index=True, foreign_key="user.id")  # owner
    name: str = Field(max_length=50)  # case-sensitive as stored
    kind: CategoryKind = Field(index=True)
    created_at: datetime = Field(default_factory=datetime.now)

    __table_args__ = (
        UniqueConstraint("user_id", "name", "kind", name="uq_category_owner_name_kind"),
    )


class Expense(SQLModel, table=True):
    __tablename__ = "expense"
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(index=True, foreign_key="user.id")
    category_id: int = Field(index=True, foreign_key="category.id")
    amount: float  # > 0, checked by the service
    date: datetime = Field(default_factory=datetime.now, index=True)
    note: Optional[str] = Field(default=None, max_length=500)
    created_at: datetime = Field(default_factory=datetime.now)


class Income(SQLModel, table=True):
    __tablename__ = "income"
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(index=True, foreign_key="user.id")
    category_id: int = Field(index=True, foreign_key="category.id")
    amount: float  # >= 0
    date: datetime = Field(default_factory=datetime.now, index=True)
    description: Optional[str] = Field(default=None, max_length=500)
    created_at: datetime = Field(default_factory=datetime.now)


class Budget(SQLModel, table=True):
    """
    A spending cap on one category over a recurring cadence.
    ``spent`` is never stored; it is recomputed from expenses on every read.
    """

    __tablename__ = "budget"
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(index=True, foreign_key="user.id")
    category_id: int = Field(index=True, foreign_key="category.id")
    limit_amount: float
    period: BudgetPeriod = Field(default=BudgetPeriod.monthly, index=True)
    created_at: datetime = Field(default_factory=datetime.now)

    __table_args__ = (
        UniqueConstraint(
            "user_id", "category_id", "period", name="uq_budget_owner_category_period"
        ),
    )


class Goal(SQLModel, table=True):
    __tablename__ = "goal"
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(index=True, foreign_key="user.id")
    name: str = Field(max_length=100)
    target_amount: float  # >= 1
    current_amount: float = Field(default=0)  # >= 0
    target_date: date
    is_completed: bool = Field(default=False, index=True)
    created_at: datetime = Field(default_factory=datetime.now)


class RecurringExpense(SQLModel, table=True):
    """
    Template for an expense that repeats.
    Nothing expands these into Expense rows yet; they are stored and seeded only.
    """

    __tablename__ = "recurring_expense"
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(index=True, foreign_key="user.id")
    category_id: int = Field(foreign_key="category.id")
    amount: float
    frequency: Frequency
    start_date: date
    end_date: date
    description: Optional[str] = Field(default=None, max_length=500)
    is_active: bool = Field(default=True, index=True)
    created_at: datetime = Field(default_factory=datetime.now)
