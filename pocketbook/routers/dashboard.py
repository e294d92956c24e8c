# pocketbook/routers/dashboard.py
# Read-only analytics over the caller's data for the month containing "now".

from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from pocketbook.db import get_session
from pocketbook.models import User
from pocketbook.periods import get_now
from pocketbook.responses import ok
from pocketbook.security import get_current_user
from pocketbook.services import analytics

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/summary")
def summary(
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    now: datetime = Depends(get_now),
):
    return ok(analytics.dashboard_summary(session, user.id, now))


@router.get("/burn-rate")
def burn_rate(
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    now: datetime = Depends(get_now),
):
    return ok(analytics.burn_rate(session, user.id, now))


@router.get("/trends")
def trends(
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    now: datetime = Depends(get_now),
):
    return ok(analytics.spending_trends(session, user.id, now))


@router.get("/recent-transactions")
def recent_transactions(
    limit: int = Query(10, ge=1, le=100),
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    feed = analytics.recent_transactions(session, user.id, limit)
    return ok(feed, count=len(feed))


@router.get("/health-score")
def health_score(
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    now: datetime = Depends(get_now),
):
    return ok(analytics.health_score(session, user.id, now))
