# pocketbook/services/categories.py
"""
Category rules.

- Names are trimmed; uniqueness is per (owner, name, kind), case-sensitive.
- A category still referenced by expenses or incomes cannot be deleted.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Union

from sqlmodel import Session

from pocketbook.errors import ConflictError, ValidationError
from pocketbook.models import Budget, Category, CategoryKind, Expense, Income
from pocketbook.repository import OwnerScopedRepository

logger = logging.getLogger("pb.categories")

NAME_MAX = 50

DEFAULT_CATEGORIES = [
    ("Food & Snacks", CategoryKind.expense),
    ("Transport", CategoryKind.expense),
    ("Rent", CategoryKind.expense),
    ("Books & Stationery", CategoryKind.expense),
    ("Social Outings", CategoryKind.expense),
    ("Utilities", CategoryKind.expense),
    ("Part-time job", CategoryKind.income),
    ("Allowance", CategoryKind.income),
    ("Scholarship", CategoryKind.income),
    ("Refund", CategoryKind.income),
    ("Gift", CategoryKind.income),
    ("Other", CategoryKind.income),
]


def repo(session: Session, user_id: int) -> OwnerScopedRepository[Category]:
    return OwnerScopedRepository(session, Category, user_id, "category")


def serialize_category(category: Category) -> Dict[str, Any]:
    return category.model_dump()


def _clean_name(name: Optional[str]) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError("Please provide category name")
    if len(cleaned) > NAME_MAX:
        raise ValidationError(f"Category name cannot exceed {NAME_MAX} characters")
    return cleaned


def _ensure_unique(
    categories: OwnerScopedRepository[Category],
    name: str,
    kind: CategoryKind,
    exclude_id: Optional[int] = None,
) -> None:
    where = [Category.name == name, Category.kind == kind]
    if exclude_id is not None:
        where.append(Category.id != exclude_id)
    if categories.first(*where) is not None:
        raise ConflictError("Category already exists")


def ensure_category(session: Session, user_id: int, category_id: Optional[int]) -> Category:
    """The category a body refers to must exist and belong to the caller."""
    if category_id is None:
        raise ValidationError("Please provide category")
    return repo(session, user_id).get(category_id, action="use")


def list_categories(
    session: Session, user_id: int, kind: Optional[CategoryKind] = None
) -> List[Category]:
    where = [Category.kind == kind] if kind is not None else []
    return repo(session, user_id).list(
        *where, order_by=(Category.created_at.desc(), Category.id.desc())
    )


def get_category(session: Session, user_id: int, category_id: int) -> Category:
    return repo(session, user_id).get(category_id)


def create_category(
    session: Session,
    user_id: int,
    *,
    name: Optional[str],
    kind: Union[CategoryKind, str, None],
) -> Category:
    if kind is None:
        raise ValidationError("Please specify category kind (income or expense)")
    kind = CategoryKind(kind)
    name = _clean_name(name)

    categories = repo(session, user_id)
    _ensure_unique(categories, name, kind)
    category = categories.add(Category(user_id=user_id, name=name, kind=kind))
    logger.info("category created id=%s user=%s", category.id, user_id)
    return category


def update_category(
    session: Session, user_id: int, category_id: int, changes: Dict[str, Any]
) -> Category:
    categories = repo(session, user_id)
    category = categories.get(category_id, action="update")

    name = _clean_name(changes["name"]) if changes.get("name") is not None else category.name
    kind = CategoryKind(changes["kind"]) if changes.get("kind") is not None else category.kind
    _ensure_unique(categories, name, kind, exclude_id=category.id)

    category.name = name
    category.kind = kind
    return categories.save(category)


def delete_category(session: Session, user_id: int, category_id: int) -> None:
    categories = repo(session, user_id)
    category = categories.get(category_id, action="delete")

    expense_count = OwnerScopedRepository(session, Expense, user_id).count(
        Expense.category_id == category.id
    )
    income_count = OwnerScopedRepository(session, Income, user_id).count(
        Income.category_id == category.id
    )
    if expense_count or income_count:
        logger.warning(
            "category delete blocked id=%s expenses=%s incomes=%s",
            category.id,
            expense_count,
            income_count,
        )
        raise ConflictError(
            "Cannot delete category. It is being used in "
            f"{expense_count} expense(s) and {income_count} income record(s)"
        )

    # budgets have no meaning without their category
    for budget in OwnerScopedRepository(session, Budget, user_id).list(
        Budget.category_id == category.id
    ):
        session.delete(budget)
    categories.delete(category)
    logger.info("category deleted id=%s user=%s", category_id, user_id)


def seed_default_categories(session: Session, user_id: int) -> List[Category]:
    """Give a new account a starter set of expense and income categories."""
    created = [
        Category(user_id=user_id, name=name, kind=kind) for name, kind in DEFAULT_CATEGORIES
    ]
    session.add_all(created)
    session.commit()
    return created
