# pocketbook/routers/categories.py
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from pocketbook.db import get_session
from pocketbook.models import CategoryKind, User
from pocketbook.responses import ok
from pocketbook.schemas import CategoryIn
from pocketbook.security import get_current_user
from pocketbook.services import categories as svc

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("")
def list_categories(
    kind: Optional[CategoryKind] = None,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    rows = svc.list_categories(session, user.id, kind)
    return ok([svc.serialize_category(c) for c in rows], count=len(rows))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_category(
    body: CategoryIn,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    category = svc.create_category(session, user.id, name=body.name, kind=body.kind)
    return ok(svc.serialize_category(category), message="Category created successfully")


@router.get("/{category_id}")
def get_category(
    category_id: int,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return ok(svc.serialize_category(svc.get_category(session, user.id, category_id)))


@router.put("/{category_id}")
def update_category(
    category_id: int,
    body: CategoryIn,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    category = svc.update_category(
        session, user.id, category_id, body.model_dump(exclude_unset=True)
    )
    return ok(svc.serialize_category(category), message="Category updated successfully")


@router.delete("/{category_id}")
def delete_category(
    category_id: int,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    svc.delete_category(session, user.id, category_id)
    return ok({}, message="Category deleted successfully")
