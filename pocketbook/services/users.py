# pocketbook/services/users.py
from __future__ import annotations

import logging
import re
from typing import Any, Dict, Optional

from sqlmodel import Session, select

from pocketbook.config import get_settings
from pocketbook.errors import AuthenticationError, ConflictError, ValidationError
from pocketbook.models import Currency, User
from pocketbook.security import hash_password, verify_password
from pocketbook.services.categories import seed_default_categories

logger = logging.getLogger("pb.users")

EMAIL_RE = re.compile(r"^[\w.+-]+@[\w-]+(\.[\w-]+)*\.\w{2,}$")
PASSWORD_MIN = 6
NAME_MAX = 100


def serialize_user(user: User) -> Dict[str, Any]:
    # never leak the hash
    return user.model_dump(exclude={"hashed_password"})


def _normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def register_user(
    session: Session,
    *,
    name: Optional[str],
    email: Optional[str],
    password: Optional[str],
    currency: Optional[Currency] = None,
) -> User:
    name = (name or "").strip()
    email = _normalize_email(email)
    if not name or not email or not password:
        raise ValidationError("Please provide name, email and password")
    if len(name) > NAME_MAX:
        raise ValidationError(f"Name cannot exceed {NAME_MAX} characters")
    if not EMAIL_RE.match(email):
        raise ValidationError("Please provide a valid email")
    if len(password) < PASSWORD_MIN:
        raise ValidationError(f"Password must be at least {PASSWORD_MIN} characters")

    existing = session.exec(select(User).where(User.email == email)).first()
    if existing:
        raise ConflictError("User already exists")

    user = User(
        name=name,
        email=email,
        hashed_password=hash_password(password),
        currency=currency or Currency(get_settings().default_currency),
    )
    session.add(user)
    session.commit()
    session.refresh(user)

    seed_default_categories(session, user.id)
    logger.info("user registered id=%s", user.id)
    return user


def authenticate(session: Session, *, email: Optional[str], password: Optional[str]) -> User:
    email = _normalize_email(email)
    if not email or not password:
        raise ValidationError("Please provide email and password")
    user = session.exec(select(User).where(User.email == email)).first()
    if not user or not verify_password(password, user.hashed_password):
        logger.warning("failed login for %s", email)
        raise AuthenticationError("Invalid email or password")
    return user


def update_profile(session: Session, user: User, changes: Dict[str, Any]) -> User:
    if changes.get("name") is not None:
        name = changes["name"].strip()
        if not name:
            raise ValidationError("Name cannot be empty")
        if len(name) > NAME_MAX:
            raise ValidationError(f"Name cannot exceed {NAME_MAX} characters")
        user.name = name
    if changes.get("currency") is not None:
        user.currency = Currency(changes["currency"])
    session.add(user)
    session.commit()
    session.refresh(user)
    return user
