# pocketbook/repository.py
"""
Owner-scoped data access.

Every query a service issues for an entity goes through one of these, so the
``user_id`` filter is applied in one place instead of at every call site.
"""

from __future__ import annotations

from typing import Any, Generic, List, Optional, Type, TypeVar

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, SQLModel, select

from pocketbook.errors import AuthorizationError, ConflictError, NotFoundError

ModelT = TypeVar("ModelT", bound=SQLModel)

# SQLSTATE for unique_violation (PostgreSQL drivers expose it on the DBAPI error)
_UNIQUE_VIOLATION = "23505"


def _is_unique_violation(exc: IntegrityError) -> bool:
    """NOT NULL and foreign-key failures are IntegrityErrors too; only duplicates count."""
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code:
        return code == _UNIQUE_VIOLATION
    return "UNIQUE constraint failed" in str(orig)


class OwnerScopedRepository(Generic[ModelT]):
    def __init__(
        self,
        session: Session,
        model: Type[ModelT],
        user_id: int,
        label: Optional[str] = None,
    ) -> None:
        self.session = session
        self.model = model
        self.user_id = user_id
        self.label = label or model.__name__.lower()

    # ------------ reads ------------

    def select(self, *columns: Any):
        """A select already restricted to the owner's rows."""
        stmt = select(*columns) if columns else select(self.model)
        return stmt.where(self.model.user_id == self.user_id)

    def get(self, record_id: int, action: str = "access") -> ModelT:
        """
        Fetch by id: 404 when it doesn't exist, 403 when it belongs to
        someone else. Existence is always checked before ownership.
        ``action`` only shapes the 403 message ("update", "delete", "use").
        """
        obj = self.session.get(self.model, record_id)
        if obj is None:
            raise NotFoundError(f"{self.label.capitalize()} not found")
        if obj.user_id != self.user_id:
            raise AuthorizationError(f"Not authorized to {action} this {self.label}")
        return obj

    def list(self, *where: Any, order_by: Any = None, limit: Optional[int] = None) -> List[ModelT]:
        stmt = self.select().where(*where)
        if order_by is not None:
            order = order_by if isinstance(order_by, (list, tuple)) else [order_by]
            stmt = stmt.order_by(*order)
        if limit is not None:
            stmt = stmt.limit(limit)
        return list(self.session.exec(stmt).all())

    def first(self, *where: Any) -> Optional[ModelT]:
        return self.session.exec(self.select().where(*where)).first()

    def count(self, *where: Any) -> int:
        stmt = self.select(func.count()).select_from(self.model).where(*where)
        return int(self.session.exec(stmt).one())

    # ------------ writes ------------

    def add(self, obj: ModelT) -> ModelT:
        """Stamp the owner and persist."""
        obj.user_id = self.user_id
        return self.save(obj)

    def save(self, obj: ModelT) -> ModelT:
        if obj.user_id != self.user_id:
            raise AuthorizationError(f"Not authorized to update this {self.label}")
        self.session.add(obj)
        try:
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            if not _is_unique_violation(exc):
                raise
            # a concurrent insert won the unique key
            raise ConflictError(f"{self.label.capitalize()} already exists")
        self.session.refresh(obj)
        return obj

    def delete(self, obj: ModelT) -> None:
        if obj.user_id != self.user_id:
            raise AuthorizationError(f"Not authorized to delete this {self.label}")
        self.session.delete(obj)
        self.session.commit()
