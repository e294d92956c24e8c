# pocketbook/services/budgets.py
"""
Budgets: one spending cap per (owner, category, cadence).

``spent`` and everything derived from it is recomputed from expenses on every
read; nothing about a budget's health is stored.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlmodel import Session

from pocketbook.errors import ConflictError, ValidationError
from pocketbook.models import Budget, BudgetPeriod, Category, Expense
from pocketbook.periods import budget_window
from pocketbook.repository import OwnerScopedRepository
from pocketbook.responses import money
from pocketbook.services.categories import ensure_category

logger = logging.getLogger("pb.budgets")

ALERT_LEVELS = ("exceeded", "danger", "warning", "safe")


def repo(session: Session, user_id: int) -> OwnerScopedRepository[Budget]:
    return OwnerScopedRepository(session, Budget, user_id, "budget")


# ---------- classification ----------


def budget_percentage(spent: float, limit: float) -> float:
    if limit <= 0:
        return 0.0
    return spent / limit * 100


def alert_level(spent: float, limit: float) -> str:
    """
    exceeded (>= 100%), danger (>= 80%), warning (>= 50%), else safe.
    Compared as spent vs a fraction of limit so exact boundaries stay exact.
    """
    if limit <= 0:
        return "exceeded" if spent > 0 else "safe"
    if spent >= limit:
        return "exceeded"
    if spent >= limit * 0.8:
        return "danger"
    if spent >= limit * 0.5:
        return "warning"
    return "safe"


# ---------- spend ----------


def spent_in_window(
    session: Session, user_id: int, category_id: int, start: datetime, end: datetime
) -> float:
    stmt = (
        OwnerScopedRepository(session, Expense, user_id)
        .select(func.coalesce(func.sum(Expense.amount), 0.0))
        .where(
            Expense.category_id == category_id,
            Expense.date >= start,
            Expense.date <= end,
        )
    )
    return float(session.exec(stmt).one())


def budget_status(session: Session, budget: Budget, now: datetime) -> Dict[str, Any]:
    """Spend and health of one budget over the window containing now."""
    start, end = budget_window(budget.period, now)
    spent = spent_in_window(session, budget.user_id, budget.category_id, start, end)
    return {
        "spent": spent,
        "remaining": budget.limit_amount - spent,
        "percentage": budget_percentage(spent, budget.limit_amount),
        "alert_level": alert_level(spent, budget.limit_amount),
        "window": {"start": start, "end": end},
    }


def serialize_budget(
    session: Session, budget: Budget, now: datetime, category_name: Optional[str] = None
) -> Dict[str, Any]:
    if category_name is None:
        category = session.get(Category, budget.category_id)
        category_name = category.name if category else None
    status = budget_status(session, budget, now)
    data = budget.model_dump()
    data.update(
        category_name=category_name,
        spent=money(status["spent"]),
        remaining=money(status["remaining"]),
        percentage=money(status["percentage"]),
        alert_level=status["alert_level"],
        window=status["window"],
    )
    return data


# ---------- CRUD ----------


def _ensure_unique(
    budgets: OwnerScopedRepository[Budget],
    category_id: int,
    period: BudgetPeriod,
    exclude_id: Optional[int] = None,
) -> None:
    where = [Budget.category_id == category_id, Budget.period == period]
    if exclude_id is not None:
        where.append(Budget.id != exclude_id)
    if budgets.first(*where) is not None:
        raise ConflictError("Budget already exists for this period")


def _check_limit(limit: Optional[float]) -> float:
    if limit is None or limit <= 0:
        raise ValidationError("Budget limit must be greater than 0")
    return float(limit)


def list_budgets(
    session: Session, user_id: int, period: Optional[BudgetPeriod] = None
) -> List[Budget]:
    where = [Budget.period == period] if period is not None else []
    return repo(session, user_id).list(
        *where, order_by=(Budget.created_at.desc(), Budget.id.desc())
    )


def get_budget(session: Session, user_id: int, budget_id: int) -> Budget:
    return repo(session, user_id).get(budget_id)


def create_budget(session: Session, user_id: int, body: Dict[str, Any], *, now: datetime) -> Budget:
    if body.get("category_id") is None or body.get("limit_amount") is None or not body.get("period"):
        raise ValidationError("Please provide category, limit amount and period")
    limit = _check_limit(body["limit_amount"])
    period = BudgetPeriod(body["period"])
    category = ensure_category(session, user_id, body["category_id"])

    budgets = repo(session, user_id)
    _ensure_unique(budgets, category.id, period)
    budget = budgets.add(
        Budget(
            user_id=user_id,
            category_id=category.id,
            limit_amount=limit,
            period=period,
            created_at=now,
        )
    )
    logger.info("budget created id=%s user=%s period=%s", budget.id, user_id, period.value)
    return budget


def update_budget(
    session: Session, user_id: int, budget_id: int, changes: Dict[str, Any]
) -> Budget:
    budgets = repo(session, user_id)
    budget = budgets.get(budget_id, action="update")

    category_id = budget.category_id
    if changes.get("category_id") is not None:
        category_id = ensure_category(session, user_id, changes["category_id"]).id
    period = BudgetPeriod(changes["period"]) if changes.get("period") else budget.period
    if changes.get("limit_amount") is not None:
        budget.limit_amount = _check_limit(changes["limit_amount"])

    if (category_id, period) != (budget.category_id, budget.period):
        _ensure_unique(budgets, category_id, period, exclude_id=budget.id)
    budget.category_id = category_id
    budget.period = period
    return budgets.save(budget)


def delete_budget(session: Session, user_id: int, budget_id: int) -> None:
    budgets = repo(session, user_id)
    budgets.delete(budgets.get(budget_id, action="delete"))


# ---------- roll-ups ----------


def current_status(session: Session, user_id: int, now: datetime) -> Dict[str, Any]:
    """Every budget with its live spend, plus totals and alert counts."""
    items = [serialize_budget(session, b, now) for b in list_budgets(session, user_id)]
    alerts = alert_counts(item["alert_level"] for item in items)
    return {
        "budget_status": items,
        "total_limit": money(sum(i["limit_amount"] for i in items)),
        "total_spent": money(sum(i["spent"] for i in items)),
        "over_budget": sum(1 for i in items if i["spent"] > i["limit_amount"]),
        "alerts": alerts,
    }


def alert_counts(levels) -> Dict[str, int]:
    counts = {level: 0 for level in ALERT_LEVELS}
    for level in levels:
        counts[level] += 1
    return counts
