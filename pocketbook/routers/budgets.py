# pocketbook/routers/budgets.py
# Budgets CRUD; every read attaches live spend for the budget's current window.

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from pocketbook.db import get_session
from pocketbook.models import BudgetPeriod, User
from pocketbook.periods import get_now
from pocketbook.responses import ok
from pocketbook.schemas import BudgetIn
from pocketbook.security import get_current_user
from pocketbook.services import budgets as svc

router = APIRouter(prefix="/budgets", tags=["budgets"])


# must stay above /{budget_id}
@router.get("/current/status")
def current_status(
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    now: datetime = Depends(get_now),
):
    return ok(svc.current_status(session, user.id, now))


@router.get("")
def list_budgets(
    period: Optional[BudgetPeriod] = None,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    now: datetime = Depends(get_now),
):
    rows = svc.list_budgets(session, user.id, period)
    return ok([svc.serialize_budget(session, b, now) for b in rows], count=len(rows))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_budget(
    body: BudgetIn,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    now: datetime = Depends(get_now),
):
    budget = svc.create_budget(session, user.id, body.model_dump(), now=now)
    return ok(svc.serialize_budget(session, budget, now), message="Budget created successfully")


@router.get("/{budget_id}")
def get_budget(
    budget_id: int,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    now: datetime = Depends(get_now),
):
    budget = svc.get_budget(session, user.id, budget_id)
    return ok(svc.serialize_budget(session, budget, now))


@router.put("/{budget_id}")
def update_budget(
    budget_id: int,
    body: BudgetIn,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    now: datetime = Depends(get_now),
):
    budget = svc.update_budget(session, user.id, budget_id, body.model_dump(exclude_unset=True))
    return ok(svc.serialize_budget(session, budget, now), message="Budget updated successfully")


@router.delete("/{budget_id}")
def delete_budget(
    budget_id: int,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    svc.delete_budget(session, user.id, budget_id)
    return ok({}, message="Budget deleted successfully")
