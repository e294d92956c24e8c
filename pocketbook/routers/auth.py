# pocketbook/routers/auth.py
# Register/login hand out bearer tokens; /me reads and edits the caller's profile.

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from pocketbook.db import get_session
from pocketbook.models import User
from pocketbook.responses import ok
from pocketbook.schemas import LoginIn, ProfileUpdate, RegisterIn
from pocketbook.security import get_current_user, issue_token
from pocketbook.services.users import (
    authenticate,
    register_user,
    serialize_user,
    update_profile,
)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(body: RegisterIn, session: Session = Depends(get_session)):
    user = register_user(
        session,
        name=body.name,
        email=body.email,
        password=body.password,
        currency=body.currency,
    )
    return ok(
        {"token": issue_token(user.id), "user": serialize_user(user)},
        message="User registered successfully",
    )


@router.post("/login")
def login(body: LoginIn, session: Session = Depends(get_session)):
    user = authenticate(session, email=body.email, password=body.password)
    return ok(
        {"token": issue_token(user.id), "user": serialize_user(user)},
        message="Login successful",
    )


@router.get("/me")
def me(user: User = Depends(get_current_user)):
    return ok(serialize_user(user))


@router.put("/me")
def update_me(
    body: ProfileUpdate,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    user = update_profile(session, user, body.model_dump(exclude_unset=True))
    return ok(serialize_user(user), message="Profile updated successfully")
