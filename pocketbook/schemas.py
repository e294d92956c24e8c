# pocketbook/schemas.py
"""
Request bodies.

Fields are Optional on purpose: required-field checks live in the services so
that the error message names the missing field the way the API documents it.
Type errors (e.g. "abc" for an amount) are still rejected by pydantic and
surface as 400 envelopes through the RequestValidationError handler.
Money fields also reject Infinity and NaN, which the JSON parser lets through.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field

from pocketbook.models import BudgetPeriod, CategoryKind, Currency


def _money_field():
    return Field(default=None, allow_inf_nan=False)


class RegisterIn(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    currency: Optional[Currency] = None


class LoginIn(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class ProfileUpdate(BaseModel):
    name: Optional[str] = None
    currency: Optional[Currency] = None


class CategoryIn(BaseModel):
    name: Optional[str] = None
    kind: Optional[CategoryKind] = None


class ExpenseIn(BaseModel):
    category_id: Optional[int] = None
    amount: Optional[float] = _money_field()
    date: Optional[datetime] = None
    note: Optional[str] = None


class IncomeIn(BaseModel):
    category_id: Optional[int] = None
    amount: Optional[float] = _money_field()
    date: Optional[datetime] = None
    description: Optional[str] = None


class BudgetIn(BaseModel):
    category_id: Optional[int] = None
    limit_amount: Optional[float] = _money_field()
    period: Optional[BudgetPeriod] = None


class GoalIn(BaseModel):
    name: Optional[str] = None
    target_amount: Optional[float] = _money_field()
    current_amount: Optional[float] = _money_field()
    target_date: Optional[date] = None
    is_completed: Optional[bool] = None


class ProgressIn(BaseModel):
    amount: Optional[float] = _money_field()
