# pocketbook/routers/transactions.py
# /expenses and /incomes: same routes, same rules, different table.
# (no `from __future__ import annotations` here: FastAPI must see the real body type)

from datetime import date, datetime
from typing import Optional, Type

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel
from sqlmodel import Session

from pocketbook.db import get_session
from pocketbook.models import User
from pocketbook.periods import get_now
from pocketbook.responses import money, ok
from pocketbook.schemas import ExpenseIn, IncomeIn
from pocketbook.security import get_current_user
from pocketbook.services import transactions as svc


def build_router(kind: svc.LedgerKind, prefix: str, body_model: Type[BaseModel]) -> APIRouter:
    router = APIRouter(prefix=prefix, tags=[prefix.strip("/")])
    title = kind.label.capitalize()

    def _one(session: Session, record) -> dict:
        return svc.serialize_record(record, svc.category_name_of(session, record))

    # must stay above /{record_id}
    @router.get("/stats/summary")
    def stats_summary(
        user: User = Depends(get_current_user),
        session: Session = Depends(get_session),
        now: datetime = Depends(get_now),
    ):
        return ok(svc.month_stats(session, user.id, kind, now))

    @router.get("")
    def list_records(
        category_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        user: User = Depends(get_current_user),
        session: Session = Depends(get_session),
    ):
        rows = svc.list_records(
            session,
            user.id,
            kind,
            category_id=category_id,
            start_date=start_date,
            end_date=end_date,
        )
        return ok(
            [svc.serialize_record(r, name) for r, name in rows],
            count=len(rows),
            total=money(sum(r.amount for r, _ in rows)),
        )

    @router.post("", status_code=status.HTTP_201_CREATED)
    def create_record(
        body: body_model,  # type: ignore[valid-type]
        user: User = Depends(get_current_user),
        session: Session = Depends(get_session),
        now: datetime = Depends(get_now),
    ):
        record = svc.create_record(session, user.id, kind, body.model_dump(), now=now)
        return ok(_one(session, record), message=f"{title} created successfully")

    @router.get("/{record_id}")
    def get_record(
        record_id: int,
        user: User = Depends(get_current_user),
        session: Session = Depends(get_session),
    ):
        return ok(_one(session, svc.get_record(session, user.id, kind, record_id)))

    @router.put("/{record_id}")
    def update_record(
        record_id: int,
        body: body_model,  # type: ignore[valid-type]
        user: User = Depends(get_current_user),
        session: Session = Depends(get_session),
    ):
        record = svc.update_record(
            session, user.id, kind, record_id, body.model_dump(exclude_unset=True)
        )
        return ok(_one(session, record), message=f"{title} updated successfully")

    @router.delete("/{record_id}")
    def delete_record(
        record_id: int,
        user: User = Depends(get_current_user),
        session: Session = Depends(get_session),
    ):
        svc.delete_record(session, user.id, kind, record_id)
        return ok({}, message=f"{title} deleted successfully")

    return router


expenses_router = build_router(svc.EXPENSES, "/expenses", ExpenseIn)
incomes_router = build_router(svc.INCOMES, "/incomes", IncomeIn)
