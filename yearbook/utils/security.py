"""Security utilities: JWT tokens, password hashing, invite tokens."""

import secrets
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt

from yearbook.config import settings


# --- Password Hashing ---

def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def verify_password(password: str, hashed: str) -> bool:
    if not hashed:
        return False
    return bcrypt.checkpw(password.encode(), hashed.encode())


# --- JWT Tokens ---

def create_access_token(user_id: str, role: str) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.access_token_expire_minutes)
    payload = {
        "sub": user_id,
        "role": role,
        "exp": expire,
        "type": "access",
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict:
    """Decode and validate a JWT token. Raises jwt.PyJWTError on failure."""
    return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])


# --- Invite Tokens ---

def generate_invite_token() -> str:
    """Random URL-safe bearer token for album invites."""
    return secrets.token_urlsafe(settings.invite_token_bytes)


# --- Time ---

def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite stores without tz info)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
