# pocketbook/services/analytics.py
"""
Dashboard analytics: summary, burn rate, trends, recent feed, health score.

Every entry point takes ``(session, user_id, now)`` and derives its calendar
windows from ``now``. Reads are independent queries with no transaction
around them, so a write landing mid-request can show up in one part of a
composite and not another.

The arithmetic lives in small pure functions (``savings_rate``,
``percent_change``, ``burn_rate_figures``, ``score_health``...) so it can be
checked without a database. None of them return NaN or infinity: every
zero-denominator case has an explicit answer.
"""

from __future__ import annotations

import math
from collections import defaultdict
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence

from sqlmodel import Session

from pocketbook.models import Budget, Category, Expense, Goal, Income
from pocketbook.periods import (
    days_in_month,
    month_label,
    month_window,
    previous_month_window,
    six_month_lookback,
    year_start,
)
from pocketbook.repository import OwnerScopedRepository
from pocketbook.responses import money
from pocketbook.services import budgets as budget_service
from pocketbook.services.goals import progress_percentage
from pocketbook.services.transactions import (
    EXPENSES,
    INCOMES,
    category_breakdown,
    list_records,
    sum_amount,
)

UNLIMITED = "Unlimited"
TOP_CATEGORY_COUNT = 3

# (factor, max points)
SAVINGS_MAX = 30
BUDGET_MAX = 25
GOAL_MAX = 20
TRACKING_MAX = 15
EMERGENCY_MAX = 10
EMERGENCY_POINTS_PER_MONTH = 3.33

OVERALL_BANDS = (
    (80, "Excellent", "Great job! Keep up the excellent financial habits."),
    (60, "Good", "You're doing well! Focus on improving savings rate and goal progress."),
    (
        40,
        "Fair",
        "Room for improvement. Consider setting budgets and tracking expenses more consistently.",
    ),
    (
        0,
        "Needs Improvement",
        "Focus on basic financial habits: track expenses daily, set budgets, and start saving.",
    ),
)


# ---------- pure helpers ----------


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(value, high))


def savings_rate(total_income: float, total_expenses: float) -> float:
    """(income - expenses) / income * 100, or 0 when there is no income."""
    if total_income <= 0:
        return 0.0
    return (total_income - total_expenses) / total_income * 100


def share(part: float, whole: float) -> float:
    return part / whole * 100 if whole else 0.0


def percent_change(current: float, previous: float) -> float:
    """Change relative to previous, 0 when previous is 0."""
    if previous == 0:
        return 0.0
    return (current - previous) / previous * 100


def trend_label(change: float) -> str:
    if change > 0:
        return "increasing"
    if change < 0:
        return "decreasing"
    return "stable"


def _status(value: float, excellent: float, good: float) -> str:
    if value >= excellent:
        return "excellent"
    if value >= good:
        return "good"
    return "needs improvement"


def burn_rate_figures(total_spent: float, total_income: float, now: datetime) -> Dict[str, Any]:
    days_elapsed = now.day
    total_days = days_in_month(now)
    daily = total_spent / days_elapsed if days_elapsed > 0 else 0.0
    remaining_balance = total_income - total_spent

    if daily > 0:
        runway_days: Optional[int] = math.floor(remaining_balance / daily)
        runway = f"{runway_days} days"
    else:
        runway_days = None
        runway = UNLIMITED

    return {
        "days_elapsed": days_elapsed,
        "days_remaining": total_days - days_elapsed,
        "total_days": total_days,
        "daily": daily,
        "weekly": daily * 7,
        "monthly": total_spent,
        "projected_monthly_spend": daily * total_days,
        "remaining_balance": remaining_balance,
        "runway_days": runway_days,
        "runway": runway,
    }


def daily_series(expenses: Iterable[Expense], days_elapsed: int) -> List[Dict[str, Any]]:
    """One point per day 1..days_elapsed; days without expenses are 0."""
    per_day: Dict[int, float] = defaultdict(float)
    for expense in expenses:
        per_day[expense.date.day] += expense.amount
    return [{"day": day, "amount": money(per_day.get(day, 0.0))} for day in range(1, days_elapsed + 1)]


def score_health(
    *,
    total_income: float,
    total_expenses: float,
    budgets_within: int,
    budgets_total: int,
    goal_progress: Sequence[float],
    days_with_expenses: int,
    days_elapsed: int,
) -> Dict[str, Any]:
    """
    Five factors, each clamped to [0, max] before summing, so the total stays
    within 0..100 whatever the inputs.
    """
    factors: List[Dict[str, Any]] = []

    # 1. savings rate, one point per percent up to 30
    rate = savings_rate(total_income, total_expenses)
    savings_points = clamp(rate, 0, SAVINGS_MAX)
    factors.append(
        _factor("Savings Rate", f"{rate:.2f}%", savings_points, SAVINGS_MAX, _status(rate, 20, 10))
    )

    # 2. budget adherence
    if budgets_total > 0:
        adherence = budgets_within / budgets_total * 100
        budget_points = clamp(adherence / 100 * BUDGET_MAX, 0, BUDGET_MAX)
        factors.append(
            _factor(
                "Budget Adherence",
                f"{adherence:.2f}%",
                budget_points,
                BUDGET_MAX,
                _status(adherence, 80, 60),
            )
        )
    else:
        budget_points = 0.0
        factors.append(
            _factor("Budget Adherence", "No budgets set", 0, BUDGET_MAX, "needs improvement")
        )

    # 3. goal progress across active goals
    if goal_progress:
        mean_progress = sum(goal_progress) / len(goal_progress)
        goal_points = clamp(mean_progress / 100 * GOAL_MAX, 0, GOAL_MAX)
        factors.append(
            _factor(
                "Goal Progress",
                f"{mean_progress:.2f}%",
                goal_points,
                GOAL_MAX,
                _status(mean_progress, 50, 25),
            )
        )
    else:
        goal_points = 0.0
        factors.append(_factor("Goal Progress", "No active goals", 0, GOAL_MAX, "needs improvement"))

    # 4. tracking consistency: share of elapsed days with at least one expense
    consistency = days_with_expenses / days_elapsed * 100 if days_elapsed > 0 else 0.0
    tracking_points = clamp(consistency / 100 * TRACKING_MAX, 0, TRACKING_MAX)
    factors.append(
        _factor(
            "Tracking Consistency",
            f"{consistency:.2f}%",
            tracking_points,
            TRACKING_MAX,
            _status(consistency, 70, 50),
        )
    )

    # 5. emergency buffer: surplus measured in months of expenses
    months = (total_income - total_expenses) / total_expenses if total_expenses > 0 else 0.0
    emergency_points = clamp(months * EMERGENCY_POINTS_PER_MONTH, 0, EMERGENCY_MAX)
    factors.append(
        _factor(
            "Emergency Fund",
            f"{months:.2f} months",
            emergency_points,
            EMERGENCY_MAX,
            _status(months, 3, 1),
        )
    )

    score = savings_points + budget_points + goal_points + tracking_points + emergency_points
    status, recommendation = overall_status(score)
    return {
        "score": money(score),
        "max_score": 100,
        "percentage": money(score),
        "status": status,
        "recommendation": recommendation,
        "factors": factors,
    }


def _factor(name: str, value: str, points: float, max_points: int, status: str) -> Dict[str, Any]:
    return {
        "factor": name,
        "value": value,
        "points": money(points),
        "max_points": max_points,
        "status": status,
    }


def overall_status(score: float):
    for floor, label, advice in OVERALL_BANDS:
        if score >= floor:
            return label, advice
    return OVERALL_BANDS[-1][1], OVERALL_BANDS[-1][2]


# ---------- data access ----------


def _in_window(session: Session, user_id: int, model, start: datetime, end: datetime, **kw):
    return OwnerScopedRepository(session, model, user_id).list(
        model.date >= start, model.date <= end, **kw
    )


def _active_goals(session: Session, user_id: int) -> List[Goal]:
    return OwnerScopedRepository(session, Goal, user_id).list(Goal.is_completed == False)  # noqa: E712


def _budget_statuses(session: Session, user_id: int, now: datetime) -> List[Dict[str, Any]]:
    budgets = OwnerScopedRepository(session, Budget, user_id).list()
    return [budget_service.budget_status(session, b, now) for b in budgets]


# ---------- endpoints ----------


def dashboard_summary(session: Session, user_id: int, now: datetime) -> Dict[str, Any]:
    start, end = month_window(now)

    expenses = _in_window(session, user_id, Expense, start, end)
    incomes = _in_window(session, user_id, Income, start, end)
    total_expenses = sum_amount(expenses)
    total_income = sum_amount(incomes)
    savings = total_income - total_expenses

    top = category_breakdown(session, user_id, EXPENSES, start, end)[:TOP_CATEGORY_COUNT]
    top_categories = [
        {
            "category_id": row["category_id"],
            "category_name": row["category_name"],
            "total": money(row["total"]),
            "count": row["count"],
            "percentage": money(share(row["total"], total_expenses)),
        }
        for row in top
    ]

    goals = _active_goals(session, user_id)
    progress = [progress_percentage(g) for g in goals]
    goals_summary = {
        "total": len(goals),
        "total_target_amount": money(sum(g.target_amount for g in goals)),
        "total_current_amount": money(sum(g.current_amount for g in goals)),
        "average_progress": money(sum(progress) / len(progress)) if progress else 0,
    }

    ytd_start = year_start(now)
    ytd_expenses = sum_amount(_in_window(session, user_id, Expense, ytd_start, end))
    ytd_income = sum_amount(_in_window(session, user_id, Income, ytd_start, end))

    statuses = _budget_statuses(session, user_id, now)
    return {
        "period": {"start": start, "end": end},
        "overview": {
            "total_income": money(total_income),
            "total_expenses": money(total_expenses),
            "savings": money(savings),
            "savings_rate": money(savings_rate(total_income, total_expenses)),
            "transaction_count": len(expenses) + len(incomes),
        },
        "expenses": {
            "total": money(total_expenses),
            "count": len(expenses),
            "average": money(total_expenses / len(expenses)) if expenses else 0,
        },
        "income": {
            "total": money(total_income),
            "count": len(incomes),
            "average": money(total_income / len(incomes)) if incomes else 0,
        },
        "top_categories": top_categories,
        "goals": goals_summary,
        "budget_alerts": budget_service.alert_counts(s["alert_level"] for s in statuses),
        "year_to_date": {
            "start": ytd_start,
            "total_income": money(ytd_income),
            "total_expenses": money(ytd_expenses),
            "savings": money(ytd_income - ytd_expenses),
            "savings_rate": money(savings_rate(ytd_income, ytd_expenses)),
        },
    }


def burn_rate(session: Session, user_id: int, now: datetime) -> Dict[str, Any]:
    start, end = month_window(now)
    expenses = _in_window(session, user_id, Expense, start, end, order_by=Expense.date.asc())
    incomes = _in_window(session, user_id, Income, start, end)
    fig = burn_rate_figures(sum_amount(expenses), sum_amount(incomes), now)

    return {
        "period": {
            "start": start,
            "end": end,
            "days_elapsed": fig["days_elapsed"],
            "days_remaining": fig["days_remaining"],
            "total_days": fig["total_days"],
        },
        "burn_rate": {
            "daily": money(fig["daily"]),
            "weekly": money(fig["weekly"]),
            "monthly": money(fig["monthly"]),
        },
        "projections": {
            "projected_monthly_spend": money(fig["projected_monthly_spend"]),
            "total_income": money(sum_amount(incomes)),
            "remaining_balance": money(fig["remaining_balance"]),
            "runway_days": fig["runway_days"],
            "runway": fig["runway"],
        },
        "daily_spending": daily_series(expenses, fig["days_elapsed"]),
    }


def monthly_rollup(expenses: Iterable[Expense]) -> List[Dict[str, Any]]:
    """Group by (year, month), chronological, each bucket with sum/count/average."""
    buckets: Dict[tuple, List[float]] = defaultdict(list)
    for expense in expenses:
        buckets[(expense.date.year, expense.date.month)].append(expense.amount)
    rollup = []
    for (year, month), amounts in sorted(buckets.items()):
        total = sum(amounts)
        rollup.append(
            {
                "year": year,
                "month": month,
                "month_name": month_label(year, month),
                "total": money(total),
                "count": len(amounts),
                "average": money(total / len(amounts)),
            }
        )
    return rollup


def category_comparison(
    session: Session, user_id: int, now: datetime
) -> List[Dict[str, Any]]:
    start, end = month_window(now)
    last_start, _ = previous_month_window(now)

    rows: Dict[int, Dict[str, Any]] = {}
    for expense in _in_window(session, user_id, Expense, last_start, end):
        row = rows.setdefault(
            expense.category_id,
            {"category_id": expense.category_id, "current_month": 0.0, "last_month": 0.0},
        )
        row["current_month" if expense.date >= start else "last_month"] += expense.amount

    names = {}
    if rows:
        categories = OwnerScopedRepository(session, Category, user_id).list(
            Category.id.in_(list(rows))
        )
        names = {c.id: c.name for c in categories}

    result = []
    for category_id, row in rows.items():
        current, last = row["current_month"], row["last_month"]
        result.append(
            {
                "category_id": category_id,
                "category_name": names.get(category_id),
                "current_month": money(current),
                "last_month": money(last),
                "change": money(current - last),
                "change_percentage": money(percent_change(current, last)),
            }
        )
    result.sort(key=lambda r: r["current_month"], reverse=True)
    return result


def spending_trends(session: Session, user_id: int, now: datetime) -> Dict[str, Any]:
    start, end = month_window(now)
    last_start, last_end = previous_month_window(now)

    current_total = sum_amount(_in_window(session, user_id, Expense, start, end))
    last_total = sum_amount(_in_window(session, user_id, Expense, last_start, last_end))
    change = current_total - last_total

    lookback = OwnerScopedRepository(session, Expense, user_id).list(
        Expense.date >= six_month_lookback(now), Expense.date <= end
    )
    return {
        "comparison": {
            "current_month": money(current_total),
            "last_month": money(last_total),
            "change": money(change),
            "change_percentage": money(percent_change(current_total, last_total)),
            "trend": trend_label(change),
        },
        "monthly_trends": monthly_rollup(lookback),
        "category_comparison": category_comparison(session, user_id, now),
    }


def recent_transactions(session: Session, user_id: int, limit: int = 10) -> List[Dict[str, Any]]:
    """The newest ``limit`` expenses and incomes merged into one feed."""
    feed = []
    for expense, name in list_records(session, user_id, EXPENSES, limit=limit):
        feed.append(
            {
                "id": expense.id,
                "type": "expense",
                "amount": expense.amount,
                "category": name or "Uncategorized",
                "note": expense.note,
                "date": expense.date,
                "created_at": expense.created_at,
            }
        )
    for income, name in list_records(session, user_id, INCOMES, limit=limit):
        feed.append(
            {
                "id": income.id,
                "type": "income",
                "amount": income.amount,
                "category": name or "Uncategorized",
                "note": income.description,
                "date": income.date,
                "created_at": income.created_at,
            }
        )
    feed.sort(key=lambda t: (t["date"], t["created_at"]), reverse=True)
    return feed[:limit]


def health_score(session: Session, user_id: int, now: datetime) -> Dict[str, Any]:
    start, end = month_window(now)
    expenses = _in_window(session, user_id, Expense, start, end)
    incomes = _in_window(session, user_id, Income, start, end)

    statuses = _budget_statuses(session, user_id, now)
    goals = _active_goals(session, user_id)

    return score_health(
        total_income=sum_amount(incomes),
        total_expenses=sum_amount(expenses),
        budgets_within=sum(1 for s in statuses if s["remaining"] >= 0),
        budgets_total=len(statuses),
        goal_progress=[progress_percentage(g) for g in goals],
        days_with_expenses=len({e.date.date() for e in expenses}),
        days_elapsed=now.day,
    )
