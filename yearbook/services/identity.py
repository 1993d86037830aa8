"""Identity resolution and account login.

Turns a bearer token into an ``Identity``. Everything downstream works
with identities, never with raw tokens or ``User`` rows.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import jwt
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, func, select

from yearbook.errors import Conflict, InvalidInput, Unauthenticated
from yearbook.models.user import User
from yearbook.utils.security import (
    create_access_token,
    decode_token,
    hash_password,
    verify_password,
)

logger = logging.getLogger(__name__)

GLOBAL_ROLES = ("user", "admin")


@dataclass(frozen=True)
class Identity:
    user_id: str
    global_role: str = "user"
    email: Optional[str] = None
    name: Optional[str] = None

    @property
    def is_global_admin(self) -> bool:
        return self.global_role == "admin"


def _identity_for(user: User) -> Identity:
    role = user.role if user.role in GLOBAL_ROLES else "user"
    return Identity(user_id=user.id, global_role=role, email=user.email, name=user.name)


def resolve(session: Session, token: Optional[str]) -> Identity:
    """Validate an access token and load the caller's identity.

    The global role is read from the users table rather than the token so
    a demotion takes effect on the next request.
    """
    if not token:
        raise Unauthenticated()

    try:
        payload = decode_token(token)
    except jwt.PyJWTError:
        raise Unauthenticated("Invalid or expired token")

    if payload.get("type") != "access" or not payload.get("sub"):
        raise Unauthenticated("Invalid token type")

    user = session.get(User, payload["sub"])
    if not user:
        raise Unauthenticated("User not found")
    return _identity_for(user)


def register(session: Session, email: str, password: str, name: Optional[str] = None) -> dict:
    """Create an account. The first account on a fresh install is the platform admin."""
    email = email.strip().lower()
    if not email or "@" not in email:
        raise InvalidInput("A valid email is required")
    if len(password) < 6:
        raise InvalidInput("Password must be at least 6 characters")

    existing = session.exec(select(User).where(User.email == email)).first()
    if existing:
        raise Conflict("An account with this email already exists")

    user_count = session.exec(select(func.count()).select_from(User)).one()
    role = "admin" if user_count == 0 else "user"

    user = User(
        email=email,
        name=(name or "").strip() or None,
        password_hash=hash_password(password),
        role=role,
    )
    session.add(user)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise Conflict("An account with this email already exists")
    session.refresh(user)

    logger.info("Registered user %s (role=%s)", user.id, role)
    return {
        "user_id": user.id,
        "access_token": create_access_token(user.id, user.role),
        "role": user.role,
    }


def login(session: Session, email: str, password: str) -> dict:
    user = session.exec(select(User).where(User.email == email.strip().lower())).first()
    if not user or not verify_password(password, user.password_hash):
        raise Unauthenticated("Incorrect email or password")

    return {
        "user_id": user.id,
        "access_token": create_access_token(user.id, user.role),
        "role": user.role,
    }
