# pocketbook/routers/goals.py
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from pocketbook.db import get_session
from pocketbook.models import User
from pocketbook.periods import get_now
from pocketbook.responses import ok
from pocketbook.schemas import GoalIn, ProgressIn
from pocketbook.security import get_current_user
from pocketbook.services import goals as svc

router = APIRouter(prefix="/goals", tags=["goals"])


@router.get("")
def list_goals(
    is_completed: Optional[bool] = None,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    now: datetime = Depends(get_now),
):
    rows = svc.list_goals(session, user.id, is_completed)
    return ok([svc.serialize_goal(g, now) for g in rows], count=len(rows))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_goal(
    body: GoalIn,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    now: datetime = Depends(get_now),
):
    goal = svc.create_goal(session, user.id, body.model_dump(), now=now)
    return ok(svc.serialize_goal(goal, now), message="Goal created successfully")


@router.patch("/{goal_id}/progress")
def add_progress(
    goal_id: int,
    body: ProgressIn,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    now: datetime = Depends(get_now),
):
    goal = svc.add_progress(session, user.id, goal_id, body.amount)
    return ok(svc.serialize_goal(goal, now), message="Goal progress updated successfully")


@router.get("/{goal_id}")
def get_goal(
    goal_id: int,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    now: datetime = Depends(get_now),
):
    return ok(svc.serialize_goal(svc.get_goal(session, user.id, goal_id), now))


@router.put("/{goal_id}")
def update_goal(
    goal_id: int,
    body: GoalIn,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    now: datetime = Depends(get_now),
):
    goal = svc.update_goal(session, user.id, goal_id, body.model_dump(exclude_unset=True))
    return ok(svc.serialize_goal(goal, now), message="Goal updated successfully")


@router.delete("/{goal_id}")
def delete_goal(
    goal_id: int,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    svc.delete_goal(session, user.id, goal_id)
    return ok({}, message="Goal deleted successfully")
