# pocketbook/seed.py
"""
Reset the database and load one demo student.

Usage:
  python -m pocketbook.seed

Dates are placed in the current month so the dashboard has something to show.
Login afterwards with john@student.edu / password123.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta

from sqlmodel import Session, SQLModel, select

from pocketbook.db import engine
from pocketbook.models import (
    Budget,
    BudgetPeriod,
    Category,
    Currency,
    Expense,
    Frequency,
    Goal,
    Income,
    RecurringExpense,
    User,
)
from pocketbook.security import hash_password
from pocketbook.services.categories import seed_default_categories

logger = logging.getLogger("pb.seed")

DEMO_EMAIL = "john@student.edu"
DEMO_PASSWORD = "password123"


def clear_data(session: Session) -> None:
    # children before parents
    for model in (RecurringExpense, Goal, Budget, Expense, Income, Category, User):
        for row in session.exec(select(model)).all():
            session.delete(row)
        session.commit()
    logger.info("All data cleared")


def seed(session: Session, today: date | None = None) -> User:
    today = today or date.today()
    first = today.replace(day=1)

    def day(n: int) -> datetime:
        # clamp to today so nothing lands in the future
        return datetime.combine(min(first + timedelta(days=n - 1), today), datetime.min.time())

    clear_data(session)

    user = User(
        name="John Doe",
        email=DEMO_EMAIL,
        hashed_password=hash_password(DEMO_PASSWORD),
        currency=Currency.HKD,
    )
    session.add(user)
    session.commit()
    session.refresh(user)

    cats = {c.name: c for c in seed_default_categories(session, user.id)}

    food, transport, social = cats["Food & Snacks"], cats["Transport"], cats["Social Outings"]
    session.add_all(
        [
            Expense(user_id=user.id, category_id=food.id, amount=45.50, date=day(1), note="Lunch at campus cafe"),
            Expense(user_id=user.id, category_id=transport.id, amount=20.00, date=day(2), note="Bus fare"),
            Expense(user_id=user.id, category_id=food.id, amount=85.00, date=day(3), note="Grocery shopping"),
            Expense(user_id=user.id, category_id=social.id, amount=120.00, date=day(4), note="Dinner with friends"),
            Income(
                user_id=user.id,
                category_id=cats["Part-time job"].id,
                amount=5000.00,
                date=day(1),
                description="Part-time salary",
            ),
            Income(
                user_id=user.id,
                category_id=cats["Allowance"].id,
                amount=1000.00,
                date=day(1),
                description="Monthly allowance from parents",
            ),
            Budget(user_id=user.id, category_id=food.id, limit_amount=1500.00, period=BudgetPeriod.monthly),
            Budget(user_id=user.id, category_id=transport.id, limit_amount=500.00, period=BudgetPeriod.monthly),
            Budget(user_id=user.id, category_id=social.id, limit_amount=100.00, period=BudgetPeriod.weekly),
            Goal(
                user_id=user.id,
                name="New Laptop",
                target_amount=10000.00,
                current_amount=1500.00,
                target_date=today + timedelta(days=180),
            ),
            Goal(
                user_id=user.id,
                name="Emergency Fund",
                target_amount=5000.00,
                current_amount=800.00,
                target_date=today + timedelta(days=365),
            ),
            RecurringExpense(
                user_id=user.id,
                category_id=cats["Rent"].id,
                amount=3500.00,
                frequency=Frequency.monthly,
                start_date=first,
                end_date=first.replace(year=first.year + 1),
                description="Dorm rent",
            ),
        ]
    )
    session.commit()
    logger.info("Seeded demo user %s", user.email)
    return user


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        seed(session)
    logger.info("Login with %s / %s", DEMO_EMAIL, DEMO_PASSWORD)


if __name__ == "__main__":
    main()
