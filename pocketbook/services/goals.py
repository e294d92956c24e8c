# pocketbook/services/goals.py
"""
Savings goals.

Auto-completion: an update or progress increment that leaves
current_amount >= target_amount also sets is_completed. Creating a goal that
already meets its target does not complete it.
progress_percentage and days_remaining are derived on every read.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from sqlmodel import Session

from pocketbook.errors import ValidationError
from pocketbook.models import Goal
from pocketbook.repository import OwnerScopedRepository
from pocketbook.responses import money

logger = logging.getLogger("pb.goals")

NAME_MAX = 100


def repo(session: Session, user_id: int) -> OwnerScopedRepository[Goal]:
    return OwnerScopedRepository(session, Goal, user_id, "goal")


def progress_percentage(goal: Goal) -> float:
    if goal.target_amount <= 0:
        return 0.0
    return goal.current_amount / goal.target_amount * 100


def days_remaining(goal: Goal, today: date) -> int:
    return max((goal.target_date - today).days, 0)


def serialize_goal(goal: Goal, now: datetime) -> Dict[str, Any]:
    data = goal.model_dump()
    data["progress_percentage"] = money(progress_percentage(goal))
    data["days_remaining"] = days_remaining(goal, now.date())
    return data


def _apply_completion(goal: Goal) -> None:
    if goal.current_amount >= goal.target_amount and not goal.is_completed:
        goal.is_completed = True
        logger.info("goal completed id=%s user=%s", goal.id, goal.user_id)


def _check_name(name: Optional[str]) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError("Please provide goal name, target amount, and target date")
    if len(cleaned) > NAME_MAX:
        raise ValidationError(f"Goal name cannot exceed {NAME_MAX} characters")
    return cleaned


def _check_target(amount: Optional[float]) -> float:
    if amount is None or amount < 1:
        raise ValidationError("Target amount must be at least 1")
    return float(amount)


def _check_current(amount: Optional[float]) -> float:
    if amount is None:
        return 0.0
    if amount < 0:
        raise ValidationError("Current amount cannot be negative")
    return float(amount)


def list_goals(session: Session, user_id: int, is_completed: Optional[bool] = None) -> List[Goal]:
    where = [Goal.is_completed == is_completed] if is_completed is not None else []
    return repo(session, user_id).list(*where, order_by=(Goal.target_date.asc(), Goal.id.asc()))


def get_goal(session: Session, user_id: int, goal_id: int) -> Goal:
    return repo(session, user_id).get(goal_id)


def create_goal(session: Session, user_id: int, body: Dict[str, Any], *, now: datetime) -> Goal:
    if not body.get("name") or body.get("target_amount") is None or body.get("target_date") is None:
        raise ValidationError("Please provide goal name, target amount, and target date")
    goal = Goal(
        user_id=user_id,
        name=_check_name(body["name"]),
        target_amount=_check_target(body["target_amount"]),
        current_amount=_check_current(body.get("current_amount")),
        target_date=body["target_date"],
        created_at=now,
    )
    goal = repo(session, user_id).add(goal)
    logger.info("goal created id=%s user=%s", goal.id, user_id)
    return goal


def update_goal(session: Session, user_id: int, goal_id: int, changes: Dict[str, Any]) -> Goal:
    """
    Partial update. When current_amount is part of the update and reaches the
    (possibly updated) target, the goal completes in the same write.
    """
    goals = repo(session, user_id)
    goal = goals.get(goal_id, action="update")

    if changes.get("name") is not None:
        goal.name = _check_name(changes["name"])
    if changes.get("target_amount") is not None:
        goal.target_amount = _check_target(changes["target_amount"])
    if changes.get("target_date") is not None:
        goal.target_date = changes["target_date"]
    if changes.get("is_completed") is not None:
        goal.is_completed = bool(changes["is_completed"])
    if changes.get("current_amount") is not None:
        goal.current_amount = _check_current(changes["current_amount"])
        _apply_completion(goal)
    return goals.save(goal)


def add_progress(session: Session, user_id: int, goal_id: int, amount: Optional[float]) -> Goal:
    """Add a positive delta to current_amount (read-modify-write, unguarded)."""
    if amount is None or amount <= 0:
        raise ValidationError("Please provide a valid amount")
    goals = repo(session, user_id)
    goal = goals.get(goal_id, action="update")
    goal.current_amount += float(amount)
    _apply_completion(goal)
    return goals.save(goal)


def delete_goal(session: Session, user_id: int, goal_id: int) -> None:
    goals = repo(session, user_id)
    goals.delete(goals.get(goal_id, action="delete"))
