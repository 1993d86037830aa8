"""User model."""

import secrets
from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: str = Field(default_factory=lambda: f"usr_{secrets.token_hex(4)}", primary_key=True)
    email: str = Field(unique=True, index=True)
    name: Optional[str] = None
    password_hash: str
    role: str = Field(default="user")  # 'user' | 'admin' (platform-wide)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
