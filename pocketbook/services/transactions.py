# pocketbook/services/transactions.py
"""
Expense and Income share one set of rules, parameterised by ``LedgerKind``.

Plain words:
- Every record points at one of the caller's own categories.
- Expenses must be > 0; incomes may be 0.
- Responses always carry the joined ``category_name``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple, Type, Union

from sqlalchemy import func
from sqlmodel import Session

from pocketbook.errors import ValidationError
from pocketbook.models import Category, Expense, Income
from pocketbook.periods import end_of_day, month_window, naive_local, start_of_day
from pocketbook.repository import OwnerScopedRepository
from pocketbook.responses import money
from pocketbook.services.categories import ensure_category

logger = logging.getLogger("pb.transactions")

TEXT_MAX = 500

Record = Union[Expense, Income]


@dataclass(frozen=True)
class LedgerKind:
    model: Type[Any]
    label: str  # "expense" | "income"
    text_field: str  # free-text column name
    allow_zero: bool


EXPENSES = LedgerKind(model=Expense, label="expense", text_field="note", allow_zero=False)
INCOMES = LedgerKind(model=Income, label="income", text_field="description", allow_zero=True)


def repo(session: Session, user_id: int, kind: LedgerKind) -> OwnerScopedRepository:
    return OwnerScopedRepository(session, kind.model, user_id, kind.label)


def serialize_record(record: Record, category_name: Optional[str]) -> Dict[str, Any]:
    data = record.model_dump()
    data["category_name"] = category_name
    return data


def category_name_of(session: Session, record: Record) -> Optional[str]:
    category = session.get(Category, record.category_id)
    return category.name if category else None


def _check_amount(kind: LedgerKind, amount: Optional[float]) -> float:
    if amount is None:
        raise ValidationError("Please provide category and amount")
    if kind.allow_zero:
        if amount < 0:
            raise ValidationError("Amount cannot be negative")
    elif amount <= 0:
        raise ValidationError("Amount must be greater than 0")
    return float(amount)


def _check_text(kind: LedgerKind, text: Optional[str]) -> Optional[str]:
    if text is None:
        return None
    text = text.strip()
    if len(text) > TEXT_MAX:
        raise ValidationError(f"{kind.text_field.capitalize()} cannot exceed {TEXT_MAX} characters")
    return text or None


# ---------- reads ----------


def list_records(
    session: Session,
    user_id: int,
    kind: LedgerKind,
    *,
    category_id: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    limit: Optional[int] = None,
) -> List[Tuple[Record, Optional[str]]]:
    """Newest first, each paired with its category name. Date bounds are inclusive days."""
    model = kind.model
    records = repo(session, user_id, kind)
    stmt = records.select(model, Category.name).outerjoin(
        Category, Category.id == model.category_id
    )
    if category_id is not None:
        stmt = stmt.where(model.category_id == category_id)
    if start_date is not None:
        stmt = stmt.where(model.date >= start_of_day(start_date))
    if end_date is not None:
        stmt = stmt.where(model.date <= end_of_day(end_date))
    stmt = stmt.order_by(model.date.desc(), model.created_at.desc(), model.id.desc())
    if limit is not None:
        stmt = stmt.limit(limit)
    return [(row[0], row[1]) for row in session.exec(stmt).all()]


def get_record(session: Session, user_id: int, kind: LedgerKind, record_id: int) -> Record:
    return repo(session, user_id, kind).get(record_id)


# ---------- writes ----------


def create_record(
    session: Session,
    user_id: int,
    kind: LedgerKind,
    body: Dict[str, Any],
    *,
    now: datetime,
) -> Record:
    if body.get("category_id") is None:
        raise ValidationError("Please provide category and amount")
    amount = _check_amount(kind, body.get("amount"))
    category = ensure_category(session, user_id, body["category_id"])

    when = body.get("date")
    record = kind.model(
        user_id=user_id,
        category_id=category.id,
        amount=amount,
        date=naive_local(when) if when else now,
        created_at=now,
    )
    setattr(record, kind.text_field, _check_text(kind, body.get(kind.text_field)))
    record = repo(session, user_id, kind).add(record)
    logger.info("%s created id=%s user=%s amount=%.2f", kind.label, record.id, user_id, amount)
    return record


def update_record(
    session: Session,
    user_id: int,
    kind: LedgerKind,
    record_id: int,
    changes: Dict[str, Any],
) -> Record:
    records = repo(session, user_id, kind)
    record = records.get(record_id, action="update")

    if changes.get("category_id") is not None:
        record.category_id = ensure_category(session, user_id, changes["category_id"]).id
    if changes.get("amount") is not None:
        record.amount = _check_amount(kind, changes["amount"])
    if changes.get("date") is not None:
        record.date = naive_local(changes["date"])
    if kind.text_field in changes:
        setattr(record, kind.text_field, _check_text(kind, changes[kind.text_field]))
    return records.save(record)


def delete_record(session: Session, user_id: int, kind: LedgerKind, record_id: int) -> None:
    records = repo(session, user_id, kind)
    records.delete(records.get(record_id, action="delete"))
    logger.info("%s deleted id=%s user=%s", kind.label, record_id, user_id)


# ---------- statistics ----------


def sum_amount(records: List[Record]) -> float:
    return sum(r.amount for r in records)


def category_breakdown(
    session: Session,
    user_id: int,
    kind: LedgerKind,
    start: datetime,
    end: datetime,
) -> List[Dict[str, Any]]:
    """Sum and count per category inside [start, end], largest total first."""
    model = kind.model
    stmt = (
        repo(session, user_id, kind)
        .select(model.category_id, Category.name, func.sum(model.amount), func.count())
        .outerjoin(Category, Category.id == model.category_id)
        .where(model.date >= start, model.date <= end)
        .group_by(model.category_id, Category.name)
    )
    rows = [
        {
            "category_id": category_id,
            "category_name": name,
            "total": float(total or 0),
            "count": int(count),
        }
        for category_id, name, total, count in session.exec(stmt).all()
    ]
    rows.sort(key=lambda r: r["total"], reverse=True)
    return rows


def month_stats(session: Session, user_id: int, kind: LedgerKind, now: datetime) -> Dict[str, Any]:
    start, end = month_window(now)
    records = repo(session, user_id, kind).list(kind.model.date >= start, kind.model.date <= end)
    by_category = category_breakdown(session, user_id, kind, start, end)
    for row in by_category:
        row["total"] = money(row["total"])
    return {
        "total_this_month": money(sum_amount(records)),
        f"{kind.label}_count": len(records),
        "by_category": by_category,
        "period": {"start": start, "end": end},
    }
