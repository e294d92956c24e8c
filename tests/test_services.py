# tests/test_services.py
"""
Service-level tests (no HTTP).
We spin up a tiny SQLite DB, load the demo data, and check the analytics.
"""

from __future__ import annotations

from datetime import date, datetime

import pytest
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, SQLModel, create_engine, select

from pocketbook.errors import AuthorizationError, ConflictError, NotFoundError
from pocketbook.models import Category, CategoryKind, Expense, Goal
from pocketbook.repository import OwnerScopedRepository
from pocketbook.seed import seed
from pocketbook.services import analytics
from pocketbook.services.budgets import current_status
from pocketbook.services.categories import DEFAULT_CATEGORIES, delete_category
from pocketbook.services.transactions import EXPENSES, create_record, list_records

NOW = datetime(2025, 12, 15, 12, 0, 0)


def _make_engine():
    return create_engine("sqlite:///:memory:", echo=False)


def _bootstrap(engine):
    SQLModel.metadata.create_all(engine)
    with Session(engine) as s:
        user = seed(s, today=NOW.date())
        return user.id


def test_seed_creates_demo_month():
    engine = _make_engine()
    user_id = _bootstrap(engine)

    with Session(engine) as s:
        summary = analytics.dashboard_summary(s, user_id, NOW)
        assert summary["overview"]["total_expenses"] == 270.5
        assert summary["overview"]["total_income"] == 6000
        assert summary["overview"]["savings_rate"] == 95.49
        assert summary["goals"]["total"] == 2
        assert summary["goals"]["average_progress"] == 15.5
        assert summary["budget_alerts"] == {"exceeded": 0, "danger": 0, "warning": 0, "safe": 3}


def test_seed_is_repeatable():
    engine = _make_engine()
    _bootstrap(engine)
    with Session(engine) as s:
        seed(s, today=NOW.date())
        assert len(s.exec(select(Expense)).all()) == 4
        assert len(s.exec(select(Category)).all()) == len(DEFAULT_CATEGORIES)


def test_current_status_for_demo_budgets():
    engine = _make_engine()
    user_id = _bootstrap(engine)

    with Session(engine) as s:
        status = current_status(s, user_id, NOW)
        assert status["total_limit"] == 2100
        # food 130.50 + transport 20.00 this month; nothing social this week
        assert status["total_spent"] == 150.5
        assert status["over_budget"] == 0


def test_list_records_pairs_category_names():
    engine = _make_engine()
    user_id = _bootstrap(engine)

    with Session(engine) as s:
        rows = list_records(s, user_id, EXPENSES, limit=2)
        assert [(r.amount, name) for r, name in rows] == [
            (120.0, "Social Outings"),
            (85.0, "Food & Snacks"),
        ]


def test_create_record_checks_category_owner():
    engine = _make_engine()
    user_id = _bootstrap(engine)

    with Session(engine) as s:
        with pytest.raises(NotFoundError):
            create_record(s, user_id, EXPENSES, {"category_id": 9999, "amount": 5}, now=NOW)
        with pytest.raises(AuthorizationError):
            create_record(s, user_id + 1, EXPENSES, {"category_id": 1, "amount": 5}, now=NOW)


def test_delete_category_in_use_is_refused():
    engine = _make_engine()
    user_id = _bootstrap(engine)

    with Session(engine) as s:
        food = s.exec(select(Category).where(Category.name == "Food & Snacks")).one()
        with pytest.raises(ConflictError) as exc:
            delete_category(s, user_id, food.id)
        assert "2 expense(s) and 0 income record(s)" in exc.value.message


def test_health_score_for_demo_month():
    engine = _make_engine()
    user_id = _bootstrap(engine)

    with Session(engine) as s:
        result = analytics.health_score(s, user_id, NOW)
        assert 0 <= result["score"] <= 100
        assert len(result["factors"]) == 5
        assert result["factors"][1]["value"] == "100.00%"


def test_recent_transactions_respects_limit():
    engine = _make_engine()
    user_id = _bootstrap(engine)

    with Session(engine) as s:
        feed = analytics.recent_transactions(s, user_id, limit=3)
        assert len(feed) == 3
        assert feed[0]["date"] >= feed[-1]["date"]
        assert {t["type"] for t in analytics.recent_transactions(s, user_id)} == {"expense", "income"}
        assert isinstance(feed[0]["date"], datetime)
        assert date(2025, 12, 1) <= feed[-1]["date"].date()


def test_repository_maps_only_duplicates_to_conflict():
    engine = _make_engine()
    user_id = _bootstrap(engine)

    with Session(engine) as s:
        categories = OwnerScopedRepository(s, Category, user_id, "category")
        with pytest.raises(ConflictError) as exc:
            categories.add(Category(name="Rent", kind=CategoryKind.expense))
        assert exc.value.message == "Category already exists"

        # a NOT NULL failure is a bug, not a duplicate
        goals = OwnerScopedRepository(s, Goal, user_id, "goal")
        with pytest.raises(IntegrityError):
            goals.add(Goal(name="Broken", target_amount=None, target_date=date(2026, 1, 1)))

        # the session was rolled back and is still usable
        assert categories.count(Category.name == "Rent") == 1
