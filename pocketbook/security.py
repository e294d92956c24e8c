# pocketbook/security.py
from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends
from fastapi.requests import Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from passlib.context import CryptContext
from sqlmodel import Session

from pocketbook.config import get_settings
from pocketbook.db import get_session
from pocketbook.errors import AuthenticationError
from pocketbook.models import User

logger = logging.getLogger("pb.auth")

# Password hashing context (bcrypt by default)
_pwd = CryptContext(schemes=["bcrypt"], deprecated="auto")

# auto_error=False so a missing header reaches our own 401 envelope
_bearer = HTTPBearer(auto_error=False)

_TOKEN_SALT = "pocketbook-auth"


# ------------ Password helpers ------------


def hash_password(plain: str) -> str:
    """Return a secure hash for a plaintext password."""
    return _pwd.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    """Verify a plaintext password against a stored hash."""
    return _pwd.verify(plain, hashed)


# ------------ Token helpers ------------


def _serializer() -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(get_settings().secret_key, salt=_TOKEN_SALT)


def issue_token(user_id: int) -> str:
    """Signed, timestamped token carrying the user id."""
    return _serializer().dumps({"id": user_id})


def read_token(token: str) -> int:
    """
    Return the user id inside a token.
    Raises AuthenticationError if the signature is bad or the token expired.
    """
    try:
        payload = _serializer().loads(token, max_age=get_settings().token_max_age)
    except SignatureExpired:
        raise AuthenticationError("Not authorized, token expired")
    except BadSignature:
        raise AuthenticationError("Not authorized, token failed")
    try:
        return int(payload["id"])
    except (KeyError, TypeError, ValueError):
        raise AuthenticationError("Not authorized, token failed")


# ------------ Request dependency ------------


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
    session: Session = Depends(get_session),
) -> User:
    """
    Resolve ``Authorization: Bearer <token>`` to a User.
    Usage (inside route):  user: User = Depends(get_current_user)
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Not authorized, no token")

    user_id = read_token(credentials.credentials)
    user = session.get(User, user_id)
    if user is None:
        # token outlived its user
        logger.warning("Token for missing user id=%s", user_id)
        raise AuthenticationError("User not found")

    request.state.user_id = user.id  # picked up by RequestLogMiddleware
    return user


__all__ = [
    "hash_password",
    "verify_password",
    "issue_token",
    "read_token",
    "get_current_user",
]
